"""Shared schema utilities."""
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, PlainSerializer

HousingStatus = Literal["RTLH", "RLH"]
EligibilityCategory = Literal["POOR", "VERY_POOR", "MODERATE", "NOT_ELIGIBLE"]
VerificationStatus = Literal["PENDING", "VERIFIED", "REJECTED"]
UserRole = Literal["PUPR_ADMIN", "KOMINFO_ADMIN", "DISTRICT_OPERATOR", "VILLAGE_OPERATOR", "PUBLIC"]
BacklogType = Literal["NO_HOUSE", "UNINHABITABLE_HOUSE"]
DocumentType = Literal[
    "LAND_CERTIFICATE", "ID_CARD", "FAMILY_CARD", "HOUSE_PHOTO_BEFORE", "HOUSE_PHOTO_AFTER"
]
AuditAction = Literal["CREATE", "UPDATE", "DELETE", "VERIFY", "LOGIN", "EXPORT"]

# Stored as fixed-precision DECIMAL, emitted as a JSON number.
NumericOut = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class MessageResponse(BaseModel):
    message: str


class DeletedResponse(BaseModel):
    deleted: bool
