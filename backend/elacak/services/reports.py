"""
Report generation requests.

Rendering PDF/Excel/CSV is not done here. A report is a row-set plus a
filename; the configured ReportExporter hands that to the renderer (a spool
directory locally, an SQS queue when SQS_EXPORT_QUEUE_URL is set) and the
caller receives the URL the rendered file will be served from.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from pydantic_core import to_jsonable_python
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.config import get_settings
from elacak.core.db import as_naive_utc, utcnow
from elacak.core.errors import StorageError
from elacak.models.backlog import Backlog
from elacak.models.housing import HousingRecord
from elacak.schemas.report import (
    BacklogReportRequest,
    HousingReportRequest,
    ReportFile,
    ReportRequest,
)
from elacak.services import analytics
from elacak.services.audit import AuditEvent, Mutation

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "report"

EXTENSIONS = {"PDF": "pdf", "EXCEL": "xlsx", "CSV": "csv"}

Row = dict[str, Any]

_HOUSING_SUMMARY_COLUMNS = (
    "id",
    "head_of_household",
    "housing_status",
    "eligibility_category",
    "verification_status",
    "district_id",
    "village_id",
    "address",
    "created_at",
)

_HOUSING_DETAILED_COLUMNS = _HOUSING_SUMMARY_COLUMNS + (
    "nik",
    "phone",
    "family_members",
    "monthly_income",
    "house_condition_score",
    "latitude",
    "longitude",
    "notes",
    "verified_by",
    "verified_at",
)


class ReportExporter(Protocol):
    def export(self, filename: str, report_format: str, rows: list[Row]) -> str:
        """Request rendering of rows into filename; returns the file URL."""
        ...


def _render_job(filename: str, report_format: str, rows: list[Row]) -> str:
    return json.dumps(
        {
            "filename": filename,
            "format": report_format,
            "requested_at": utcnow().isoformat(),
            "rows": to_jsonable_python(rows),
        }
    )


class SpoolExporter:
    """Writes render jobs as JSON files for a local renderer to pick up."""

    def __init__(self, spool_dir: str | Path, url_prefix: str):
        self.spool_dir = Path(spool_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def export(self, filename: str, report_format: str, rows: list[Row]) -> str:
        job_path = self.spool_dir / f"{filename}.json"
        try:
            self.spool_dir.mkdir(parents=True, exist_ok=True)
            job_path.write_text(_render_job(filename, report_format, rows), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to spool report job %s: %s", job_path, exc)
            raise StorageError("Report could not be queued for rendering") from exc
        return f"{self.url_prefix}/{filename}"


class QueueExporter:
    def __init__(self, queue_url: str, region: str, url_prefix: str):
        import boto3

        self.queue_url = queue_url
        self.url_prefix = url_prefix.rstrip("/")
        self.client = boto3.client("sqs", region_name=region)

    def export(self, filename: str, report_format: str, rows: list[Row]) -> str:
        try:
            self.client.send_message(
                QueueUrl=self.queue_url,
                MessageBody=_render_job(filename, report_format, rows),
            )
        except Exception as exc:
            logger.error("SQS SendMessage failed for report %s: %s", filename, exc)
            raise StorageError("Report could not be queued for rendering") from exc
        return f"{self.url_prefix}/{filename}"


def get_report_exporter() -> ReportExporter:
    """FastAPI dependency; overridden in tests."""
    settings = get_settings()
    if settings.sqs_export_queue_url:
        return QueueExporter(
            settings.sqs_export_queue_url, settings.aws_region, settings.report_url_prefix
        )
    return SpoolExporter(settings.export_dir, settings.report_url_prefix)


def build_report_filename(
    kind: str,
    report_format: str,
    generated_on: datetime,
    district_id: int | None = None,
    village_id: int | None = None,
    month: int | None = None,
) -> str:
    """
    <kind>_<YYYY-MM-DD>[_district_<id>|_village_<id>][_<MM>].<ext>

    A village is more specific than a district, so it wins when both are given.
    """
    name = f"{kind}_{generated_on.date().isoformat()}"
    if village_id is not None:
        name += f"_village_{village_id}"
    elif district_id is not None:
        name += f"_district_{district_id}"
    if month is not None:
        name += f"_{month:02d}"
    return f"{name}.{EXTENSIONS[report_format]}"


def _rows(records: list[HousingRecord], columns: tuple[str, ...]) -> list[Row]:
    return [{column: getattr(record, column) for column in columns} for record in records]


def _export(
    exporter: ReportExporter, filename: str, report_format: str, rows: list[Row]
) -> Mutation[ReportFile]:
    file_url = exporter.export(filename, report_format, rows)
    logger.info("Requested %s report %s (%d rows)", report_format, filename, len(rows))
    return Mutation(
        ReportFile(file_url=file_url, filename=filename),
        [AuditEvent("EXPORT", RESOURCE_TYPE, None, filename)],
    )


async def generate_report(
    db: AsyncSession, exporter: ReportExporter, request: ReportRequest
) -> Mutation[ReportFile]:
    stmt = select(HousingRecord)
    if request.district_id is not None:
        stmt = stmt.where(HousingRecord.district_id == request.district_id)
    if request.village_id is not None:
        stmt = stmt.where(HousingRecord.village_id == request.village_id)
    if request.housing_status is not None:
        stmt = stmt.where(HousingRecord.housing_status == request.housing_status)
    if request.date_from is not None:
        stmt = stmt.where(HousingRecord.created_at >= as_naive_utc(request.date_from))
    if request.date_to is not None:
        stmt = stmt.where(HousingRecord.created_at <= as_naive_utc(request.date_to))
    records = list((await db.execute(stmt.order_by(HousingRecord.id))).scalars().all())

    filename = build_report_filename(
        "housing_report",
        request.format,
        utcnow(),
        district_id=request.district_id,
        village_id=request.village_id,
    )
    return _export(exporter, filename, request.format, _rows(records, _HOUSING_SUMMARY_COLUMNS))


async def generate_housing_report(
    db: AsyncSession, exporter: ReportExporter, request: HousingReportRequest
) -> Mutation[ReportFile]:
    """Every matching record with verification and eligibility details."""
    stmt = select(HousingRecord)
    if request.district_id is not None:
        stmt = stmt.where(HousingRecord.district_id == request.district_id)
    if request.village_id is not None:
        stmt = stmt.where(HousingRecord.village_id == request.village_id)
    records = list((await db.execute(stmt.order_by(HousingRecord.id))).scalars().all())

    filename = build_report_filename(
        "housing_detailed",
        request.format,
        utcnow(),
        district_id=request.district_id,
        village_id=request.village_id,
    )
    return _export(exporter, filename, request.format, _rows(records, _HOUSING_DETAILED_COLUMNS))


async def generate_backlog_report(
    db: AsyncSession, exporter: ReportExporter, request: BacklogReportRequest
) -> Mutation[ReportFile]:
    stmt = select(Backlog).where(Backlog.year == request.year)
    if request.month is not None:
        stmt = stmt.where(Backlog.month == request.month)
    result = await db.execute(
        stmt.order_by(Backlog.district_id, Backlog.village_id, Backlog.month, Backlog.id)
    )
    rows = [
        {
            "district_id": backlog.district_id,
            "village_id": backlog.village_id,
            "backlog_type": backlog.backlog_type,
            "year": backlog.year,
            "month": backlog.month,
            "family_count": backlog.family_count,
        }
        for backlog in result.scalars().all()
    ]

    filename = build_report_filename(
        "backlog_report", request.format, utcnow(), month=request.month
    )
    return _export(exporter, filename, request.format, rows)


async def generate_compliance_report(
    db: AsyncSession, exporter: ReportExporter, report_format: str = "PDF"
) -> Mutation[ReportFile]:
    """Per-district housing and verification totals in the provincial reporting layout."""
    verification_stats = await analytics.get_verification_stats(db)
    rows: list[Row] = [
        {
            "district_id": entry.district_id,
            "district_name": entry.district_name,
            "rtlh_count": entry.rtlh_count,
            "rlh_count": entry.rlh_count,
            "total_count": entry.total_count,
        }
        for entry in await analytics.get_housing_by_district(db)
    ]
    rows.append(
        {
            "district_id": None,
            "district_name": "TOTAL",
            "rtlh_count": sum(r["rtlh_count"] for r in rows),
            "rlh_count": sum(r["rlh_count"] for r in rows),
            "total_count": sum(r["total_count"] for r in rows),
            "verified": verification_stats.verified,
            "pending": verification_stats.pending,
            "rejected": verification_stats.rejected,
        }
    )

    filename = build_report_filename("compliance_report", report_format, utcnow())
    return _export(exporter, filename, report_format, rows)
