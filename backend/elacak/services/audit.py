"""
Audit trail: append-only entries written after every significant mutation
and authentication event.

Business services never write audit rows themselves. They return a
Mutation carrying the AuditEvents to record; the router calls
record_events() once the primary operation has committed. A failure there is
logged and swallowed so it can never undo or fail the primary operation.
Serialize the result before calling record_events: a failed write rolls the
session back, which expires loaded objects.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import as_naive_utc, commit_or_raise, utcnow
from elacak.models.audit import AuditLog
from elacak.schemas.audit import SecurityReport

logger = logging.getLogger(__name__)

T = TypeVar("T")

SECURITY_WINDOW = timedelta(days=7)
SUSPICIOUS_WINDOW = timedelta(days=1)
SUSPICIOUS_RATIO = 0.1


@dataclass(frozen=True)
class AuditEvent:
    action: str
    resource_type: str
    resource_id: int | None = None
    details: str | None = None


@dataclass
class Mutation(Generic[T]):
    result: T
    events: list[AuditEvent] = field(default_factory=list)


async def log_action(
    db: AsyncSession,
    user_id: int,
    action: str,
    resource_type: str,
    resource_id: int | None = None,
    details: str | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """Append one entry. user_id is not checked against the users table."""
    entry = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details,
        ip_address=ip_address,
        created_at=utcnow(),
    )
    db.add(entry)
    await commit_or_raise(db, "Audit entry could not be written")
    return entry


async def record_events(
    db: AsyncSession,
    events: list[AuditEvent],
    user_id: int,
    ip_address: str | None = None,
) -> None:
    """Best-effort: write the events of a committed mutation."""
    if not events:
        return
    try:
        now = utcnow()
        for event in events:
            db.add(
                AuditLog(
                    user_id=user_id,
                    action=event.action,
                    resource_type=event.resource_type,
                    resource_id=event.resource_id,
                    details=event.details,
                    ip_address=ip_address,
                    created_at=now,
                )
            )
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception(
            "Audit logging failed for %d event(s) by user %s: %s",
            len(events),
            user_id,
            [(e.action, e.resource_type, e.resource_id) for e in events],
        )


async def get_logs(
    db: AsyncSession,
    user_id: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[AuditLog]:
    stmt = select(AuditLog)
    if user_id is not None:
        stmt = stmt.where(AuditLog.user_id == user_id)
    if date_from is not None:
        stmt = stmt.where(AuditLog.created_at >= as_naive_utc(date_from))
    if date_to is not None:
        stmt = stmt.where(AuditLog.created_at <= as_naive_utc(date_to))
    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_logs_by_resource(
    db: AsyncSession, resource_type: str, resource_id: int
) -> list[AuditLog]:
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.resource_type == resource_type, AuditLog.resource_id == resource_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    )
    return list(result.scalars().all())


async def _count_since(db: AsyncSession, since: datetime, action: str | None = None) -> int:
    stmt = select(func.count(AuditLog.id)).where(AuditLog.created_at >= since)
    if action is not None:
        stmt = stmt.where(AuditLog.action == action)
    return (await db.execute(stmt)).scalar_one()


async def get_security_report(db: AsyncSession) -> SecurityReport:
    """
    Counts over the last 7 days. suspicious_activities is 10% of the last
    day's entry volume, floored; a volume heuristic, not anomaly detection.
    """
    now = utcnow()
    week_ago = now - SECURITY_WINDOW
    day_ago = now - SUSPICIOUS_WINDOW

    last_day = await _count_since(db, day_ago)
    return SecurityReport(
        suspicious_activities=math.floor(last_day * SUSPICIOUS_RATIO),
        failed_logins=await _count_since(db, week_ago, "LOGIN"),
        data_exports=await _count_since(db, week_ago, "EXPORT"),
        recent_changes=await _count_since(db, week_ago),
    )
