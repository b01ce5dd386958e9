"""
Dashboard aggregation endpoints. Read-only, any authenticated user.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db, utcnow
from elacak.core.security import get_current_user
from elacak.schemas.analytics import (
    DashboardStats,
    EligibilityShare,
    HousingByDistrict,
    HousingByVillage,
    MonthlyTrend,
    VerificationStats,
)
from elacak.services import analytics

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
) -> DashboardStats:
    return await analytics.get_dashboard_stats(db)


@router.get("/housing-by-district", response_model=list[HousingByDistrict])
async def housing_by_district(
    db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
) -> list[HousingByDistrict]:
    return await analytics.get_housing_by_district(db)


@router.get("/housing-by-village", response_model=list[HousingByVillage])
async def housing_by_village(
    district_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[HousingByVillage]:
    return await analytics.get_housing_by_village(db, district_id)


@router.get("/verification", response_model=VerificationStats)
async def verification_stats(
    db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
) -> VerificationStats:
    return await analytics.get_verification_stats(db)


@router.get("/eligibility", response_model=list[EligibilityShare])
async def eligibility_distribution(
    db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
) -> list[EligibilityShare]:
    return await analytics.get_eligibility_distribution(db)


@router.get("/monthly-trends", response_model=list[MonthlyTrend])
async def monthly_trends(
    year: int | None = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[MonthlyTrend]:
    """Twelve rows for the given year (current year by default)."""
    return await analytics.get_monthly_trends(db, year or utcnow().year)
