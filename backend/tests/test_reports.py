"""
Tests for report requests: filenames, row-sets handed to the exporter and
the EXPORT audit trail.
"""
import json
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from elacak.core.db import utcnow
from elacak.models import AuditLog
from elacak.schemas.backlog import BacklogCreate
from elacak.schemas.report import BacklogReportRequest, HousingReportRequest, ReportRequest
from elacak.services import backlogs, reports
from elacak.services.reports import SpoolExporter, build_report_filename

GENERATED_ON = datetime(2024, 3, 9, 14, 30)


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        ({"kind": "housing_report", "report_format": "PDF"}, "housing_report_2024-03-09.pdf"),
        (
            {"kind": "housing_report", "report_format": "EXCEL", "district_id": 4},
            "housing_report_2024-03-09_district_4.xlsx",
        ),
        (
            {"kind": "housing_detailed", "report_format": "CSV", "district_id": 4, "village_id": 12},
            "housing_detailed_2024-03-09_village_12.csv",
        ),
        (
            {"kind": "backlog_report", "report_format": "PDF", "month": 3},
            "backlog_report_2024-03-09_03.pdf",
        ),
    ],
)
def test_build_report_filename(kwargs, expected):
    assert build_report_filename(generated_on=GENERATED_ON, **kwargs) == expected


def test_spool_exporter_writes_render_job(tmp_path):
    exporter = SpoolExporter(tmp_path / "exports", "/reports/")
    url = exporter.export("compliance_report_2024-03-09.pdf", "PDF", [{"total_count": 3}])

    assert url == "/reports/compliance_report_2024-03-09.pdf"
    job = json.loads((tmp_path / "exports" / "compliance_report_2024-03-09.pdf.json").read_text())
    assert job["format"] == "PDF"
    assert job["rows"] == [{"total_count": 3}]


@pytest.mark.asyncio
async def test_generate_report_applies_filters(make_record, db_session, report_exporter, other_village):
    kept = await make_record(housing_status="RTLH")
    await make_record(housing_status="RLH")
    await make_record(district_id=other_village.district_id, village_id=other_village.id)

    mutation = await reports.generate_report(
        db_session,
        report_exporter,
        ReportRequest(format="CSV", district_id=kept.district_id, housing_status="RTLH"),
    )
    today = utcnow().date().isoformat()
    assert mutation.result.filename == f"housing_report_{today}_district_{kept.district_id}.csv"
    assert mutation.result.file_url == f"/reports/{mutation.result.filename}"

    filename, report_format, rows = report_exporter.jobs[0]
    assert report_format == "CSV"
    assert [row["id"] for row in rows] == [kept.id]
    assert "nik" not in rows[0]

    event = mutation.events[0]
    assert (event.action, event.resource_type, event.details) == ("EXPORT", "report", filename)


@pytest.mark.asyncio
async def test_generate_report_date_range_with_offset(make_record, db_session, report_exporter):
    record = await make_record()
    wib = timezone(timedelta(hours=7))
    now_wib = datetime.now(timezone.utc).astimezone(wib)

    await reports.generate_report(
        db_session,
        report_exporter,
        ReportRequest(
            format="PDF",
            date_from=now_wib - timedelta(hours=1),
            date_to=now_wib + timedelta(hours=1),
        ),
    )
    _, _, rows = report_exporter.jobs[0]
    assert [row["id"] for row in rows] == [record.id]


@pytest.mark.asyncio
async def test_detailed_report_includes_verification_fields(make_record, db_session, report_exporter):
    await make_record()
    mutation = await reports.generate_housing_report(
        db_session, report_exporter, HousingReportRequest()
    )
    assert mutation.result.filename.startswith("housing_detailed_")
    assert mutation.result.filename.endswith(".pdf")
    row = report_exporter.jobs[0][2][0]
    assert {"verification_status", "eligibility_category", "verified_at", "nik"} <= set(row)


@pytest.mark.asyncio
async def test_backlog_report_by_month(db_session, report_exporter, admin_user, district, village):
    for month in (3, 4):
        await backlogs.create_backlog(
            db_session,
            BacklogCreate(
                district_id=district.id,
                village_id=village.id,
                backlog_type="NO_HOUSE",
                family_count=month,
                year=2024,
                month=month,
            ),
            admin_user.id,
        )

    mutation = await reports.generate_backlog_report(
        db_session, report_exporter, BacklogReportRequest(year=2024, month=4, format="EXCEL")
    )
    assert mutation.result.filename.endswith("_04.xlsx")
    assert [row["family_count"] for row in report_exporter.jobs[0][2]] == [4]


@pytest.mark.asyncio
async def test_compliance_report_totals(make_record, db_session, report_exporter, other_district):
    await make_record(housing_status="RTLH")
    await make_record(housing_status="RLH")

    mutation = await reports.generate_compliance_report(db_session, report_exporter)
    assert mutation.result.filename == f"compliance_report_{utcnow().date().isoformat()}.pdf"

    rows = report_exporter.jobs[0][2]
    assert len(rows) == 3
    total = rows[-1]
    assert total["district_name"] == "TOTAL"
    assert (total["rtlh_count"], total["rlh_count"], total["total_count"]) == (1, 1, 2)
    assert total["pending"] == 2


@pytest.mark.asyncio
async def test_report_api_returns_file_url_and_audits(client, db_session, admin_user):
    resp = await client.post("/api/v1/reports", json={"format": "PDF", "village_id": 5})
    assert resp.status_code == 200
    data = resp.json()
    assert set(data) == {"fileUrl", "filename"}
    assert data["filename"].endswith("_village_5.pdf")
    assert data["fileUrl"] == f"/reports/{data['filename']}"

    entries = (await db_session.execute(select(AuditLog))).scalars().all()
    assert [(e.action, e.details, e.user_id) for e in entries] == [
        ("EXPORT", data["filename"], admin_user.id)
    ]


@pytest.mark.asyncio
async def test_compliance_api_without_body(client):
    resp = await client.post("/api/v1/reports/compliance")
    assert resp.status_code == 200
    assert resp.json()["filename"].startswith("compliance_report_")


@pytest.mark.asyncio
async def test_reports_require_admin(client, district_operator):
    resp = await client.post(
        "/api/v1/reports",
        json={"format": "CSV"},
        headers={"X-Dev-User-ID": str(district_operator.id)},
    )
    assert resp.status_code == 403
