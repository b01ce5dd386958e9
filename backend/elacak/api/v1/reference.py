"""
Reference data endpoints: districts and villages.

Reads are open to any authenticated user; creation is admin-only.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.rbac import ADMIN_ROLES, require_role
from elacak.core.security import get_current_user
from elacak.schemas.reference import (
    DistrictCreate,
    DistrictResponse,
    VillageCreate,
    VillageResponse,
)
from elacak.services import reference

router = APIRouter(tags=["reference"])


@router.get("/districts", response_model=list[DistrictResponse])
async def list_districts(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[DistrictResponse]:
    rows = await reference.list_districts(db)
    return [DistrictResponse.model_validate(r) for r in rows]


@router.get("/districts/{district_id}", response_model=DistrictResponse)
async def get_district(
    district_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> DistrictResponse:
    return DistrictResponse.model_validate(await reference.get_district(db, district_id))


@router.post("/districts", response_model=DistrictResponse, status_code=status.HTTP_201_CREATED)
async def create_district(
    payload: DistrictCreate,
    db: AsyncSession = Depends(get_db),
    _admin=Depends(require_role(*ADMIN_ROLES)),
) -> DistrictResponse:
    return DistrictResponse.model_validate(await reference.create_district(db, payload))


@router.get("/districts/{district_id}/villages", response_model=list[VillageResponse])
async def list_villages_by_district(
    district_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[VillageResponse]:
    await reference.get_district(db, district_id)
    rows = await reference.list_villages(db, district_id)
    return [VillageResponse.model_validate(r) for r in rows]


@router.get("/villages", response_model=list[VillageResponse])
async def list_villages(
    district_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[VillageResponse]:
    rows = await reference.list_villages(db, district_id)
    return [VillageResponse.model_validate(r) for r in rows]


@router.get("/villages/{village_id}", response_model=VillageResponse)
async def get_village(
    village_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> VillageResponse:
    return VillageResponse.model_validate(await reference.get_village(db, village_id))


@router.post("/villages", response_model=VillageResponse, status_code=status.HTTP_201_CREATED)
async def create_village(
    payload: VillageCreate,
    db: AsyncSession = Depends(get_db),
    _admin=Depends(require_role(*ADMIN_ROLES)),
) -> VillageResponse:
    return VillageResponse.model_validate(await reference.create_village(db, payload))
