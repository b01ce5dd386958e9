"""
Audit log queries (admin only).
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.rbac import ADMIN_ROLES, require_role
from elacak.schemas.audit import AuditLogResponse, SecurityReport
from elacak.services import audit

router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("", response_model=list[AuditLogResponse])
async def list_audit_logs(
    user_id: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    db: AsyncSession = Depends(get_db),
    _admin=Depends(require_role(*ADMIN_ROLES)),
) -> list[AuditLogResponse]:
    """Newest first; every supplied filter must match."""
    rows = await audit.get_logs(db, user_id, date_from, date_to)
    return [AuditLogResponse.model_validate(r) for r in rows]


@router.get("/resource/{resource_type}/{resource_id}", response_model=list[AuditLogResponse])
async def list_resource_logs(
    resource_type: str,
    resource_id: int,
    db: AsyncSession = Depends(get_db),
    _admin=Depends(require_role(*ADMIN_ROLES)),
) -> list[AuditLogResponse]:
    rows = await audit.get_logs_by_resource(db, resource_type, resource_id)
    return [AuditLogResponse.model_validate(r) for r in rows]


@router.get("/security-report", response_model=SecurityReport)
async def security_report(
    db: AsyncSession = Depends(get_db),
    _admin=Depends(require_role(*ADMIN_ROLES)),
) -> SecurityReport:
    return await audit.get_security_report(db)
