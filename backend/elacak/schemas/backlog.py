from datetime import datetime

from pydantic import BaseModel, Field

from elacak.schemas.common import BacklogType


class BacklogCreate(BaseModel):
    district_id: int
    village_id: int
    backlog_type: BacklogType
    family_count: int = Field(ge=0)
    year: int = Field(ge=1900, le=9999)
    month: int = Field(ge=1, le=12)


class BacklogCountUpdate(BaseModel):
    family_count: int = Field(ge=0)


class BacklogResponse(BaseModel):
    id: int
    district_id: int
    village_id: int
    backlog_type: str
    family_count: int
    year: int
    month: int
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
