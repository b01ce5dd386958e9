"""
Housing-record endpoints.

Operators only see and touch records inside their own district/village;
verification is limited to admins and district operators.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.rbac import EDITOR_ROLES, VERIFIER_ROLES, ensure_in_scope, require_role, scope_filters
from elacak.core.security import client_ip
from elacak.models.user import User
from elacak.schemas.common import DeletedResponse
from elacak.schemas.housing import (
    HousingRecordCreate,
    HousingRecordResponse,
    HousingRecordUpdate,
    VerifyRequest,
)
from elacak.services import housing, reference
from elacak.services.audit import record_events

router = APIRouter(prefix="/housing-records", tags=["housing-records"])


def _out(records) -> list[HousingRecordResponse]:
    return [HousingRecordResponse.model_validate(r) for r in records]


@router.get("", response_model=list[HousingRecordResponse])
async def list_housing_records(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> list[HousingRecordResponse]:
    return _out(await housing.list_records(db, **scope_filters(current_user)))


@router.get("/district/{district_id}", response_model=list[HousingRecordResponse])
async def list_by_district(
    district_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> list[HousingRecordResponse]:
    ensure_in_scope(current_user, district_id)
    return _out(await housing.list_records_by_district(db, district_id))


@router.get("/village/{village_id}", response_model=list[HousingRecordResponse])
async def list_by_village(
    village_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> list[HousingRecordResponse]:
    village = await reference.get_village(db, village_id)
    ensure_in_scope(current_user, village.district_id, village_id)
    return _out(await housing.list_records_by_village(db, village_id))


@router.get("/{record_id}", response_model=HousingRecordResponse)
async def get_housing_record(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> HousingRecordResponse:
    record = await housing.get_record(db, record_id)
    ensure_in_scope(current_user, record.district_id, record.village_id)
    return HousingRecordResponse.model_validate(record)


@router.post("", response_model=HousingRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_housing_record(
    payload: HousingRecordCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> HousingRecordResponse:
    ensure_in_scope(current_user, payload.district_id, payload.village_id)
    mutation = await housing.create_record(db, payload, current_user.id)
    response = HousingRecordResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return response


@router.put("/{record_id}", response_model=HousingRecordResponse)
async def update_housing_record(
    record_id: int,
    payload: HousingRecordUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> HousingRecordResponse:
    """
    Partial update; a change to a significant field sends the record back to
    PENDING.

    A district_id or village_id sent on its own is checked together with the
    record's stored counterpart, so a village outside the record's district
    is rejected with village_mismatch even when both ids exist.
    """
    record = await housing.get_record(db, record_id)
    ensure_in_scope(current_user, record.district_id, record.village_id)
    ensure_in_scope(
        current_user,
        payload.district_id if "district_id" in payload.model_fields_set else record.district_id,
        payload.village_id if "village_id" in payload.model_fields_set else record.village_id,
    )

    mutation = await housing.update_record(db, record_id, payload, current_user.id)
    response = HousingRecordResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return response


@router.post("/{record_id}/verify", response_model=HousingRecordResponse)
async def verify_housing_record(
    record_id: int,
    payload: VerifyRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*VERIFIER_ROLES)),
) -> HousingRecordResponse:
    record = await housing.get_record(db, record_id)
    ensure_in_scope(current_user, record.district_id, record.village_id)

    mutation = await housing.verify_record(db, record_id, payload, current_user.id)
    response = HousingRecordResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return response


@router.delete("/{record_id}", response_model=DeletedResponse)
async def delete_housing_record(
    record_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> DeletedResponse:
    record = await housing.get_record(db, record_id)
    ensure_in_scope(current_user, record.district_id, record.village_id)

    mutation = await housing.delete_record(db, record_id, current_user.id)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return DeletedResponse(deleted=mutation.result)
