"""
Districts and villages: the geographic master data every other entity hangs off.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import commit_or_raise
from elacak.core.errors import ConflictError, NotFoundError, VillageMismatchError
from elacak.models.reference import District, Village
from elacak.schemas.reference import DistrictCreate, VillageCreate

logger = logging.getLogger(__name__)


async def list_districts(db: AsyncSession) -> list[District]:
    result = await db.execute(select(District).order_by(District.name))
    return list(result.scalars().all())


async def get_district(db: AsyncSession, district_id: int) -> District:
    district = await db.get(District, district_id)
    if district is None:
        raise NotFoundError(f"District with ID {district_id} not found")
    return district


async def create_district(db: AsyncSession, payload: DistrictCreate) -> District:
    existing = await db.execute(select(District.id).where(District.code == payload.code))
    if existing.first():
        raise ConflictError(f"District code {payload.code!r} already exists")

    district = District(name=payload.name, code=payload.code)
    db.add(district)
    await commit_or_raise(db, f"District code {payload.code!r} already exists")
    logger.info("Created district %s (code=%s)", district.id, district.code)
    return district


async def list_villages(db: AsyncSession, district_id: int | None = None) -> list[Village]:
    stmt = select(Village)
    if district_id is not None:
        stmt = stmt.where(Village.district_id == district_id)
    result = await db.execute(stmt.order_by(Village.name))
    return list(result.scalars().all())


async def get_village(db: AsyncSession, village_id: int) -> Village:
    village = await db.get(Village, village_id)
    if village is None:
        raise NotFoundError(f"Village with ID {village_id} not found")
    return village


async def create_village(db: AsyncSession, payload: VillageCreate) -> Village:
    await get_district(db, payload.district_id)

    existing = await db.execute(
        select(Village.id).where(
            Village.code == payload.code, Village.district_id == payload.district_id
        )
    )
    if existing.first():
        raise ConflictError(
            f"Village code {payload.code!r} already exists in district {payload.district_id}"
        )

    village = Village(name=payload.name, code=payload.code, district_id=payload.district_id)
    db.add(village)
    await commit_or_raise(
        db, f"Village code {payload.code!r} already exists in district {payload.district_id}"
    )
    logger.info("Created village %s in district %s", village.id, village.district_id)
    return village


async def ensure_village_in_district(db: AsyncSession, district_id: int, village_id: int) -> None:
    """
    Compound referential check: the district exists, the village exists, and
    the village belongs to that district.
    """
    await get_district(db, district_id)
    village = await get_village(db, village_id)
    if village.district_id != district_id:
        raise VillageMismatchError(
            f"Village with ID {village_id} does not belong to district {district_id}"
        )
