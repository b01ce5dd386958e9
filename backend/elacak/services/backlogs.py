"""
Backlog tracker: counts of families lacking adequate housing, one entry per
(district, village, backlog type, year, month).
"""
import logging

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import commit_or_raise, utcnow
from elacak.core.errors import ConflictError, NotFoundError, ValidationError
from elacak.models.backlog import Backlog
from elacak.schemas.backlog import BacklogCreate
from elacak.services.audit import AuditEvent, Mutation
from elacak.services.reference import ensure_village_in_district

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "backlog"

_DUPLICATE_MESSAGE = (
    "A backlog entry already exists for this district, village, type, year, and month combination"
)


def _ordered(stmt):
    return stmt.order_by(Backlog.year, Backlog.month, Backlog.id)


async def list_backlogs(db: AsyncSession, district_id: int | None = None) -> list[Backlog]:
    stmt = select(Backlog)
    if district_id is not None:
        stmt = stmt.where(Backlog.district_id == district_id)
    result = await db.execute(_ordered(stmt))
    return list(result.scalars().all())


async def get_backlog(db: AsyncSession, backlog_id: int) -> Backlog:
    backlog = await db.get(Backlog, backlog_id)
    if backlog is None:
        raise NotFoundError(f"Backlog with ID {backlog_id} not found")
    return backlog


async def _entry_exists(db: AsyncSession, payload: BacklogCreate) -> bool:
    result = await db.execute(
        select(Backlog.id).where(
            Backlog.district_id == payload.district_id,
            Backlog.village_id == payload.village_id,
            Backlog.backlog_type == payload.backlog_type,
            Backlog.year == payload.year,
            Backlog.month == payload.month,
        )
    )
    return result.first() is not None


async def create_backlog(
    db: AsyncSession, payload: BacklogCreate, creator_id: int
) -> Mutation[Backlog]:
    await ensure_village_in_district(db, payload.district_id, payload.village_id)

    if await _entry_exists(db, payload):
        raise ConflictError(_DUPLICATE_MESSAGE)

    now = utcnow()
    backlog = Backlog(
        **payload.model_dump(),
        created_by=creator_id,
        created_at=now,
        updated_at=now,
    )
    db.add(backlog)
    await commit_or_raise(db, _DUPLICATE_MESSAGE)

    logger.info(
        "Created backlog %s (%s %04d-%02d, village %s)",
        backlog.id,
        backlog.backlog_type,
        backlog.year,
        backlog.month,
        backlog.village_id,
    )
    return Mutation(backlog, [AuditEvent("CREATE", RESOURCE_TYPE, backlog.id)])


async def update_family_count(
    db: AsyncSession, backlog_id: int, family_count: int, editor_id: int
) -> Mutation[Backlog]:
    if family_count < 0:
        raise ValidationError("family_count must not be negative")
    backlog = await get_backlog(db, backlog_id)
    previous = backlog.family_count
    backlog.family_count = family_count
    backlog.updated_at = utcnow()
    await commit_or_raise(db, f"Backlog {backlog_id} could not be updated")

    logger.info("Backlog %s family_count %d -> %d by user %s", backlog_id, previous, family_count, editor_id)
    return Mutation(
        backlog,
        [AuditEvent("UPDATE", RESOURCE_TYPE, backlog_id, f"family_count: {previous} -> {family_count}")],
    )


async def list_backlogs_by_period(
    db: AsyncSession, start_year: int, start_month: int, end_year: int, end_month: int
) -> list[Backlog]:
    """
    Entries whose (year, month) lies within [start, end], compared
    lexicographically. An inverted range yields nothing.
    """
    for month in (start_month, end_month):
        if not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month}")
    if (start_year, start_month) > (end_year, end_month):
        return []

    if start_year == end_year:
        condition = and_(
            Backlog.year == start_year,
            Backlog.month >= start_month,
            Backlog.month <= end_month,
        )
    else:
        condition = or_(
            and_(Backlog.year == start_year, Backlog.month >= start_month),
            and_(Backlog.year == end_year, Backlog.month <= end_month),
            and_(Backlog.year > start_year, Backlog.year < end_year),
        )

    result = await db.execute(_ordered(select(Backlog).where(condition)))
    return list(result.scalars().all())
