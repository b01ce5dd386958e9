from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from elacak.core.db import utcnow
from elacak.models.base import Base

BACKLOG_TYPES = ("NO_HOUSE", "UNINHABITABLE_HOUSE")


class Backlog(Base):
    __tablename__ = "backlogs"
    __table_args__ = (
        UniqueConstraint(
            "district_id",
            "village_id",
            "backlog_type",
            "year",
            "month",
            name="uq_backlogs_entry",
        ),
        CheckConstraint(
            "backlog_type IN ('NO_HOUSE', 'UNINHABITABLE_HOUSE')", name="chk_backlogs_type"
        ),
        CheckConstraint("family_count >= 0", name="chk_backlogs_family_count"),
        CheckConstraint("month BETWEEN 1 AND 12", name="chk_backlogs_month"),
        Index("idx_backlogs_year_month", "year", "month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    district_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("districts.id"), nullable=False, index=True
    )
    village_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("villages.id"), nullable=False, index=True
    )
    backlog_type: Mapped[str] = mapped_column(String(30), nullable=False)
    family_count: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    month: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )
