"""
Tests for the audit trail: appends, filtered queries, the security report
and best-effort recording after a committed mutation.
"""
import math
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from elacak.core.db import as_naive_utc, utcnow
from elacak.models import AuditLog, HousingRecord
from elacak.services import audit
from elacak.services.audit import AuditEvent


async def _entry(db_session, user_id=1, action="CREATE", age=timedelta(0), **kwargs):
    entry = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=kwargs.pop("resource_type", "housing_record"),
        created_at=utcnow() - age,
        **kwargs,
    )
    db_session.add(entry)
    await db_session.commit()
    return entry


@pytest.mark.asyncio
async def test_log_action_accepts_unknown_user(db_session):
    entry = await audit.log_action(
        db_session, 424242, "EXPORT", "report", None, "housing_report_2024-01-01.pdf", "10.0.0.1"
    )
    assert entry.id is not None
    assert entry.user_id == 424242
    assert entry.ip_address == "10.0.0.1"


@pytest.mark.asyncio
async def test_get_logs_filters_and_orders_newest_first(db_session):
    old = await _entry(db_session, user_id=1, age=timedelta(days=3))
    mid = await _entry(db_session, user_id=1, age=timedelta(days=1))
    new = await _entry(db_session, user_id=1)
    await _entry(db_session, user_id=2)

    rows = await audit.get_logs(db_session, user_id=1)
    assert [r.id for r in rows] == [new.id, mid.id, old.id]

    rows = await audit.get_logs(
        db_session,
        user_id=1,
        date_from=utcnow() - timedelta(days=2),
        date_to=utcnow() - timedelta(hours=12),
    )
    assert [r.id for r in rows] == [mid.id]

    assert len(await audit.get_logs(db_session)) == 4


WIB = timezone(timedelta(hours=7))


def test_as_naive_utc_converts_offsets():
    assert as_naive_utc(datetime(2024, 1, 1, 7, 0, tzinfo=WIB)) == datetime(2024, 1, 1, 0, 0)
    assert as_naive_utc(datetime(2024, 1, 1, 7, 0)) == datetime(2024, 1, 1, 7, 0)
    assert as_naive_utc(None) is None


@pytest.mark.asyncio
async def test_get_logs_compares_aware_bounds_in_utc(db_session):
    entry = AuditLog(
        user_id=1,
        action="CREATE",
        resource_type="housing_record",
        created_at=datetime(2024, 1, 1, 3, 0),
    )
    db_session.add(entry)
    await db_session.commit()

    rows = await audit.get_logs(
        db_session,
        date_from=datetime(2024, 1, 1, 7, 0, tzinfo=WIB),
        date_to=datetime(2024, 1, 1, 10, 0, tzinfo=WIB),
    )
    assert [r.id for r in rows] == [entry.id]


@pytest.mark.asyncio
async def test_get_logs_by_resource_is_exact(db_session):
    match = await _entry(db_session, resource_id=5)
    await _entry(db_session, resource_id=6)
    await _entry(db_session, resource_id=5, resource_type="backlog")

    rows = await audit.get_logs_by_resource(db_session, "housing_record", 5)
    assert [r.id for r in rows] == [match.id]


@pytest.mark.asyncio
async def test_security_report_on_empty_log(db_session):
    report = await audit.get_security_report(db_session)
    assert report.model_dump() == {
        "suspicious_activities": 0,
        "failed_logins": 0,
        "data_exports": 0,
        "recent_changes": 0,
    }


@pytest.mark.asyncio
async def test_security_report_windows(db_session):
    for _ in range(14):
        await _entry(db_session, action="UPDATE", age=timedelta(hours=2))
    await _entry(db_session, action="LOGIN", age=timedelta(hours=1))
    await _entry(db_session, action="EXPORT", age=timedelta(days=3))
    await _entry(db_session, action="LOGIN", age=timedelta(days=10))

    report = await audit.get_security_report(db_session)
    assert report.failed_logins == 1
    assert report.data_exports == 1
    assert report.recent_changes == 16
    # 15 entries in the last day
    assert report.suspicious_activities == math.floor(15 * 0.1) == 1


@pytest.mark.asyncio
async def test_record_events_writes_each_event(db_session):
    await audit.record_events(
        db_session,
        [AuditEvent("CREATE", "document", 3), AuditEvent("DELETE", "document", 4, "x")],
        user_id=9,
        ip_address="127.0.0.1",
    )
    rows = (await db_session.execute(select(AuditLog).order_by(AuditLog.id))).scalars().all()
    assert [(r.action, r.resource_id, r.user_id) for r in rows] == [
        ("CREATE", 3, 9),
        ("DELETE", 4, 9),
    ]


@pytest.mark.asyncio
async def test_record_events_failure_is_swallowed(make_record, db_session, admin_user, caplog):
    record = await make_record()

    # An action outside the CHECK constraint makes the insert fail.
    await audit.record_events(db_session, [AuditEvent("BOGUS", "housing_record", record.id)], 1)

    assert "Audit logging failed" in caplog.text
    assert (await db_session.execute(select(func.count(AuditLog.id)))).scalar_one() == 0
    assert (await db_session.execute(select(func.count(HousingRecord.id)))).scalar_one() == 1


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_request(client, housing_payload, db_session, monkeypatch):
    def _broken_entry(**kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(audit, "AuditLog", _broken_entry)

    resp = await client.post("/api/v1/housing-records", json=housing_payload())
    assert resp.status_code == 201
    assert resp.json()["head_of_household"] == "Budi Santoso"

    count = (await db_session.execute(select(func.count(HousingRecord.id)))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_audit_api_is_admin_only(client, district_operator):
    resp = await client.get(
        "/api/v1/audit-logs", headers={"X-Dev-User-ID": str(district_operator.id)}
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_audit_api_lists_mutations(client, housing_payload):
    created = (await client.post("/api/v1/housing-records", json=housing_payload())).json()
    await client.post(
        f"/api/v1/housing-records/{created['id']}/verify",
        json={"verification_status": "VERIFIED"},
    )

    resp = await client.get(f"/api/v1/audit-logs/resource/housing_record/{created['id']}")
    assert resp.status_code == 200
    assert [e["action"] for e in resp.json()] == ["VERIFY", "CREATE"]

    resp = await client.get("/api/v1/audit-logs/security-report")
    assert resp.json()["recent_changes"] == 2


@pytest.mark.asyncio
async def test_audit_api_accepts_utc_suffixed_dates(client, housing_payload):
    await client.post("/api/v1/housing-records", json=housing_payload())

    resp = await client.get(
        "/api/v1/audit-logs",
        params={"date_from": "2000-01-01T00:00:00Z", "date_to": "2999-01-01T00:00:00Z"},
    )
    assert resp.status_code == 200
    assert [e["action"] for e in resp.json()] == ["CREATE"]
