"""
Backlog tracker endpoints.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.rbac import EDITOR_ROLES, ensure_in_scope, require_role
from elacak.core.security import client_ip, get_current_user
from elacak.models.user import User
from elacak.schemas.backlog import BacklogCountUpdate, BacklogCreate, BacklogResponse
from elacak.services import backlogs
from elacak.services.audit import record_events

router = APIRouter(prefix="/backlogs", tags=["backlogs"])


def _out(rows) -> list[BacklogResponse]:
    return [BacklogResponse.model_validate(r) for r in rows]


@router.get("", response_model=list[BacklogResponse])
async def list_backlogs(
    district_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[BacklogResponse]:
    return _out(await backlogs.list_backlogs(db, district_id))


@router.get("/period", response_model=list[BacklogResponse])
async def list_backlogs_by_period(
    start_year: int,
    start_month: int,
    end_year: int,
    end_month: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[BacklogResponse]:
    """Entries between (start_year, start_month) and (end_year, end_month) inclusive."""
    return _out(
        await backlogs.list_backlogs_by_period(db, start_year, start_month, end_year, end_month)
    )


@router.get("/district/{district_id}", response_model=list[BacklogResponse])
async def list_backlogs_by_district(
    district_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> list[BacklogResponse]:
    return _out(await backlogs.list_backlogs(db, district_id))


@router.get("/{backlog_id}", response_model=BacklogResponse)
async def get_backlog(
    backlog_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
) -> BacklogResponse:
    return BacklogResponse.model_validate(await backlogs.get_backlog(db, backlog_id))


@router.post("", response_model=BacklogResponse, status_code=status.HTTP_201_CREATED)
async def create_backlog(
    payload: BacklogCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> BacklogResponse:
    ensure_in_scope(current_user, payload.district_id, payload.village_id)
    mutation = await backlogs.create_backlog(db, payload, current_user.id)
    response = BacklogResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return response


@router.patch("/{backlog_id}/family-count", response_model=BacklogResponse)
async def update_family_count(
    backlog_id: int,
    payload: BacklogCountUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> BacklogResponse:
    backlog = await backlogs.get_backlog(db, backlog_id)
    ensure_in_scope(current_user, backlog.district_id, backlog.village_id)
    mutation = await backlogs.update_family_count(
        db, backlog_id, payload.family_count, current_user.id
    )
    response = BacklogResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return response
