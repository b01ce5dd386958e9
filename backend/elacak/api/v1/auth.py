"""
POST /auth/login: exchange username/password for a session token.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.security import client_ip
from elacak.schemas.auth import LoginRequest, LoginResponse
from elacak.schemas.user import UserResponse
from elacak.services import users as user_service
from elacak.services.audit import record_events

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    ip_address = client_ip(request)
    mutation = await user_service.login(db, payload.username, payload.password, ip_address)
    user, token = mutation.result
    response = LoginResponse(user=UserResponse.model_validate(user), token=token)
    await record_events(db, mutation.events, user.id, ip_address)
    return response
