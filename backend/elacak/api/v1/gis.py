"""
Map endpoints: record points, heatmap cells, boundaries, coordinate edits.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.rbac import EDITOR_ROLES, ensure_in_scope, require_role
from elacak.core.security import client_ip, get_current_user
from elacak.models.user import User
from elacak.schemas.common import HousingStatus
from elacak.schemas.gis import (
    CoordinatesUpdate,
    DistrictBoundary,
    HeatmapCell,
    MapPoint,
    VillageBoundary,
)
from elacak.schemas.housing import HousingRecordResponse
from elacak.services import gis, housing
from elacak.services.audit import record_events
from elacak.services.gis import BoundaryProvider, get_boundary_provider

router = APIRouter(prefix="/gis", tags=["gis"])


@router.get("/map-data", response_model=list[MapPoint])
async def map_data(
    district_id: int | None = None,
    village_id: int | None = None,
    housing_status: HousingStatus | None = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[MapPoint]:
    return await gis.get_map_data(db, district_id, village_id, housing_status)


@router.get("/heatmap", response_model=list[HeatmapCell])
async def heatmap(
    db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
) -> list[HeatmapCell]:
    return await gis.get_heatmap_data(db)


@router.get("/boundaries/districts", response_model=list[DistrictBoundary])
async def district_boundaries(
    db: AsyncSession = Depends(get_db),
    provider: BoundaryProvider = Depends(get_boundary_provider),
    _user=Depends(get_current_user),
) -> list[DistrictBoundary]:
    return await gis.get_district_boundaries(db, provider)


@router.get("/boundaries/villages", response_model=list[VillageBoundary])
async def village_boundaries(
    district_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    provider: BoundaryProvider = Depends(get_boundary_provider),
    _user=Depends(get_current_user),
) -> list[VillageBoundary]:
    return await gis.get_village_boundaries(db, provider, district_id)


@router.put("/housing-records/{record_id}/coordinates", response_model=HousingRecordResponse)
async def update_coordinates(
    record_id: int,
    payload: CoordinatesUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> HousingRecordResponse:
    record = await housing.get_record(db, record_id)
    ensure_in_scope(current_user, record.district_id, record.village_id)
    mutation = await housing.update_coordinates(
        db, record_id, payload.latitude, payload.longitude, current_user.id
    )
    response = HousingRecordResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return response
