"""
User management endpoints.

All routes (except /me) require an admin role.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.rbac import ADMIN_ROLES, require_role
from elacak.core.security import client_ip, get_current_user
from elacak.models.user import User
from elacak.schemas.user import UserCreate, UserListResponse, UserResponse, UserUpdate
from elacak.services import users as user_service
from elacak.services.audit import record_events

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user's own profile."""
    return UserResponse.model_validate(current_user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_role(*ADMIN_ROLES)),
) -> UserResponse:
    mutation = await user_service.create_user(db, payload)
    response = UserResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, admin.id, client_ip(request))
    return response


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = 1,
    page_size: int = 20,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_role(*ADMIN_ROLES)),
) -> UserListResponse:
    """List all users with pagination."""
    data = await user_service.list_users(db, page, page_size)
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in data["items"]],
        total=data["total"],
        page=data["page"],
        page_size=data["page_size"],
        pages=data["pages"],
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_role(*ADMIN_ROLES)),
) -> UserResponse:
    return UserResponse.model_validate(await user_service.get_user(db, user_id))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_role(*ADMIN_ROLES)),
) -> UserResponse:
    """Update email, role, geographic scope or active status."""
    mutation = await user_service.update_user(db, user_id, payload)
    response = UserResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, admin.id, client_ip(request))
    return response
