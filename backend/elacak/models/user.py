from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from elacak.core.db import utcnow
from elacak.models.base import Base

PUPR_ADMIN = "PUPR_ADMIN"
KOMINFO_ADMIN = "KOMINFO_ADMIN"
DISTRICT_OPERATOR = "DISTRICT_OPERATOR"
VILLAGE_OPERATOR = "VILLAGE_OPERATOR"
PUBLIC = "PUBLIC"

USER_ROLES = (PUPR_ADMIN, KOMINFO_ADMIN, DISTRICT_OPERATOR, VILLAGE_OPERATOR, PUBLIC)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('PUPR_ADMIN', 'KOMINFO_ADMIN', 'DISTRICT_OPERATOR', "
            "'VILLAGE_OPERATOR', 'PUBLIC')",
            name="chk_users_role",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(300), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    district_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("districts.id"), nullable=True
    )
    village_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("villages.id"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )
