import re
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from elacak.schemas.common import (
    EligibilityCategory,
    HousingStatus,
    NumericOut,
    VerificationStatus,
)

_NOT_NULLABLE = (
    "head_of_household",
    "housing_status",
    "eligibility_category",
    "district_id",
    "village_id",
    "address",
    "family_members",
)

_NIK_PATTERN = re.compile(r"[0-9]{16}")


class HousingRecordCreate(BaseModel):
    head_of_household: str = Field(min_length=1, max_length=200)
    nik: str
    housing_status: HousingStatus
    eligibility_category: EligibilityCategory
    district_id: int
    village_id: int
    latitude: Decimal | None = Field(
        default=None, ge=-90, le=90, max_digits=10, decimal_places=8
    )
    longitude: Decimal | None = Field(
        default=None, ge=-180, le=180, max_digits=11, decimal_places=8
    )
    address: str = Field(min_length=1)
    phone: str | None = None
    family_members: int = Field(gt=0)
    monthly_income: Decimal | None = Field(
        default=None, ge=0, max_digits=12, decimal_places=2
    )
    house_condition_score: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None

    @field_validator("nik")
    @classmethod
    def validate_nik(cls, v: str) -> str:
        if not _NIK_PATTERN.fullmatch(v):
            raise ValueError("NIK must be exactly 16 digits")
        return v


class HousingRecordUpdate(BaseModel):
    """
    Partial update. Only fields present in the request are applied; an
    explicit null clears a nullable field.
    """

    head_of_household: str | None = Field(default=None, min_length=1, max_length=200)
    housing_status: HousingStatus | None = None
    eligibility_category: EligibilityCategory | None = None
    district_id: int | None = None
    village_id: int | None = None
    latitude: Decimal | None = Field(
        default=None, ge=-90, le=90, max_digits=10, decimal_places=8
    )
    longitude: Decimal | None = Field(
        default=None, ge=-180, le=180, max_digits=11, decimal_places=8
    )
    address: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    family_members: int | None = Field(default=None, gt=0)
    monthly_income: Decimal | None = Field(
        default=None, ge=0, max_digits=12, decimal_places=2
    )
    house_condition_score: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in _NOT_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class VerifyRequest(BaseModel):
    verification_status: VerificationStatus
    notes: str | None = None

    @field_validator("verification_status")
    @classmethod
    def validate_target(cls, v: str) -> str:
        if v == "PENDING":
            raise ValueError("verification_status must be VERIFIED or REJECTED")
        return v


class HousingRecordResponse(BaseModel):
    id: int
    head_of_household: str
    nik: str
    housing_status: str
    eligibility_category: str
    verification_status: str
    district_id: int
    village_id: int
    latitude: NumericOut | None
    longitude: NumericOut | None
    address: str
    phone: str | None
    family_members: int
    monthly_income: NumericOut | None
    house_condition_score: int | None
    notes: str | None
    verified_by: int | None
    verified_at: datetime | None
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
