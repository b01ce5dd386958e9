"""
Read-only aggregations over housing records for dashboards.

Location breakdowns outer-join from the location tables so districts and
villages without records still appear with zero counts. The eligibility
distribution only reports categories that occur in the data.
"""
from datetime import datetime

from sqlalchemy import case, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.models.housing import HousingRecord
from elacak.models.reference import District, Village
from elacak.schemas.analytics import (
    DashboardStats,
    EligibilityShare,
    HousingByDistrict,
    HousingByVillage,
    MonthlyTrend,
    VerificationStats,
)


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


_rtlh = _count_where(HousingRecord.housing_status == "RTLH")
_rlh = _count_where(HousingRecord.housing_status == "RLH")


def _rounded_percentage(count: int, total: int) -> int:
    """round(count / total * 100) with halves rounded up, in exact integer arithmetic."""
    return (count * 200 + total) // (2 * total)


async def get_dashboard_stats(db: AsyncSession) -> DashboardStats:
    housing = (
        await db.execute(
            select(
                func.count(HousingRecord.id),
                _rtlh,
                _rlh,
                _count_where(HousingRecord.verification_status == "PENDING"),
            )
        )
    ).one()
    districts = (await db.execute(select(func.count(District.id)))).scalar_one()
    villages = (await db.execute(select(func.count(Village.id)))).scalar_one()

    return DashboardStats(
        total_houses=int(housing[0]),
        rtlh_count=int(housing[1]),
        rlh_count=int(housing[2]),
        pending_verification=int(housing[3]),
        districts_count=int(districts),
        villages_count=int(villages),
    )


async def get_housing_by_district(db: AsyncSession) -> list[HousingByDistrict]:
    result = await db.execute(
        select(
            District.id,
            District.name,
            _rtlh,
            _rlh,
            func.count(HousingRecord.id),
        )
        .select_from(District)
        .outerjoin(HousingRecord, HousingRecord.district_id == District.id)
        .group_by(District.id, District.name)
        .order_by(District.name)
    )
    return [
        HousingByDistrict(
            district_id=row[0],
            district_name=row[1],
            rtlh_count=int(row[2]),
            rlh_count=int(row[3]),
            total_count=int(row[4]),
        )
        for row in result.all()
    ]


async def get_housing_by_village(
    db: AsyncSession, district_id: int | None = None
) -> list[HousingByVillage]:
    stmt = (
        select(
            Village.id,
            Village.name,
            _rtlh,
            _rlh,
            func.count(HousingRecord.id),
        )
        .select_from(Village)
        .outerjoin(HousingRecord, HousingRecord.village_id == Village.id)
        .group_by(Village.id, Village.name)
        .order_by(Village.name)
    )
    if district_id is not None:
        stmt = stmt.where(Village.district_id == district_id)

    result = await db.execute(stmt)
    return [
        HousingByVillage(
            village_id=row[0],
            village_name=row[1],
            rtlh_count=int(row[2]),
            rlh_count=int(row[3]),
            total_count=int(row[4]),
        )
        for row in result.all()
    ]


async def get_verification_stats(db: AsyncSession) -> VerificationStats:
    row = (
        await db.execute(
            select(
                _count_where(HousingRecord.verification_status == "PENDING"),
                _count_where(HousingRecord.verification_status == "VERIFIED"),
                _count_where(HousingRecord.verification_status == "REJECTED"),
            )
        )
    ).one()
    return VerificationStats(pending=int(row[0]), verified=int(row[1]), rejected=int(row[2]))


async def get_eligibility_distribution(db: AsyncSession) -> list[EligibilityShare]:
    result = await db.execute(
        select(HousingRecord.eligibility_category, func.count(HousingRecord.id))
        .group_by(HousingRecord.eligibility_category)
        .order_by(HousingRecord.eligibility_category)
    )
    rows = result.all()
    total = sum(int(count) for _, count in rows)
    if total == 0:
        return []
    return [
        EligibilityShare(
            category=category,
            count=int(count),
            percentage=_rounded_percentage(int(count), total),
        )
        for category, count in rows
    ]


async def get_monthly_trends(db: AsyncSession, year: int) -> list[MonthlyTrend]:
    """Always twelve rows; months without records are zero-filled here."""
    month = extract("month", HousingRecord.created_at)
    result = await db.execute(
        select(
            month,
            _rtlh,
            _rlh,
            _count_where(HousingRecord.verification_status == "VERIFIED"),
        )
        .where(
            HousingRecord.created_at >= datetime(year, 1, 1),
            HousingRecord.created_at < datetime(year + 1, 1, 1),
        )
        .group_by(month)
    )
    by_month = {int(row[0]): row for row in result.all()}

    trends = []
    for m in range(1, 13):
        row = by_month.get(m)
        trends.append(
            MonthlyTrend(
                month=m,
                rtlh_created=int(row[1]) if row else 0,
                rlh_created=int(row[2]) if row else 0,
                verified_count=int(row[3]) if row else 0,
            )
        )
    return trends
