from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from elacak.core.db import utcnow
from elacak.models.base import Base

HOUSING_STATUSES = ("RTLH", "RLH")
ELIGIBILITY_CATEGORIES = ("POOR", "VERY_POOR", "MODERATE", "NOT_ELIGIBLE")
VERIFICATION_STATUSES = ("PENDING", "VERIFIED", "REJECTED")


class HousingRecord(Base):
    __tablename__ = "housing_records"
    __table_args__ = (
        CheckConstraint("housing_status IN ('RTLH', 'RLH')", name="chk_housing_status"),
        CheckConstraint(
            "eligibility_category IN ('POOR', 'VERY_POOR', 'MODERATE', 'NOT_ELIGIBLE')",
            name="chk_housing_eligibility",
        ),
        CheckConstraint(
            "verification_status IN ('PENDING', 'VERIFIED', 'REJECTED')",
            name="chk_housing_verification",
        ),
        CheckConstraint("family_members > 0", name="chk_housing_family_members"),
        CheckConstraint(
            "house_condition_score IS NULL OR house_condition_score BETWEEN 0 AND 100",
            name="chk_housing_condition_score",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    head_of_household: Mapped[str] = mapped_column(String(200), nullable=False)
    nik: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    housing_status: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    eligibility_category: Mapped[str] = mapped_column(String(20), nullable=False)
    verification_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="PENDING", index=True
    )
    district_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("districts.id"), nullable=False, index=True
    )
    village_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("villages.id"), nullable=False, index=True
    )
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    family_members: Mapped[int] = mapped_column(Integer, nullable=False)
    monthly_income: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    house_condition_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    verified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )
