from datetime import datetime

from pydantic import BaseModel, Field


class DistrictCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=20)


class DistrictResponse(BaseModel):
    id: int
    name: str
    code: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VillageCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=20)
    district_id: int


class VillageResponse(BaseModel):
    id: int
    name: str
    code: str
    district_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
