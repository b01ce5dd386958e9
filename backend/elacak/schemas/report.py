from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from elacak.schemas.common import HousingStatus

ReportFormat = Literal["PDF", "EXCEL", "CSV"]


class ReportRequest(BaseModel):
    format: ReportFormat
    district_id: int | None = None
    village_id: int | None = None
    housing_status: HousingStatus | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class HousingReportRequest(BaseModel):
    format: ReportFormat = "PDF"
    district_id: int | None = None
    village_id: int | None = None


class BacklogReportRequest(BaseModel):
    format: ReportFormat = "PDF"
    year: int = Field(ge=1900, le=9999)
    month: int | None = Field(default=None, ge=1, le=12)


class ComplianceReportRequest(BaseModel):
    format: ReportFormat = "PDF"


class ReportFile(BaseModel):
    file_url: str = Field(serialization_alias="fileUrl")
    filename: str
