"""
Report generation endpoints (admin only).

Each call queues a render job and returns where the file will be served.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.rbac import ADMIN_ROLES, require_role
from elacak.core.security import client_ip
from elacak.models.user import User
from elacak.schemas.report import (
    BacklogReportRequest,
    ComplianceReportRequest,
    HousingReportRequest,
    ReportFile,
    ReportRequest,
)
from elacak.services import reports
from elacak.services.audit import Mutation, record_events
from elacak.services.reports import ReportExporter, get_report_exporter

router = APIRouter(prefix="/reports", tags=["reports"])


async def _respond(
    db: AsyncSession, mutation: Mutation[ReportFile], user: User, request: Request
) -> ReportFile:
    await record_events(db, mutation.events, user.id, client_ip(request))
    return mutation.result


@router.post("", response_model=ReportFile, response_model_by_alias=True)
async def generate_report(
    payload: ReportRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    exporter: ReportExporter = Depends(get_report_exporter),
    current_user: User = Depends(require_role(*ADMIN_ROLES)),
) -> ReportFile:
    mutation = await reports.generate_report(db, exporter, payload)
    return await _respond(db, mutation, current_user, request)


@router.post("/housing", response_model=ReportFile, response_model_by_alias=True)
async def generate_housing_report(
    payload: HousingReportRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    exporter: ReportExporter = Depends(get_report_exporter),
    current_user: User = Depends(require_role(*ADMIN_ROLES)),
) -> ReportFile:
    mutation = await reports.generate_housing_report(db, exporter, payload)
    return await _respond(db, mutation, current_user, request)


@router.post("/backlog", response_model=ReportFile, response_model_by_alias=True)
async def generate_backlog_report(
    payload: BacklogReportRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    exporter: ReportExporter = Depends(get_report_exporter),
    current_user: User = Depends(require_role(*ADMIN_ROLES)),
) -> ReportFile:
    mutation = await reports.generate_backlog_report(db, exporter, payload)
    return await _respond(db, mutation, current_user, request)


@router.post("/compliance", response_model=ReportFile, response_model_by_alias=True)
async def generate_compliance_report(
    request: Request,
    payload: ComplianceReportRequest | None = None,
    db: AsyncSession = Depends(get_db),
    exporter: ReportExporter = Depends(get_report_exporter),
    current_user: User = Depends(require_role(*ADMIN_ROLES)),
) -> ReportFile:
    report_format = payload.format if payload else "PDF"
    mutation = await reports.generate_compliance_report(db, exporter, report_format)
    return await _respond(db, mutation, current_user, request)
