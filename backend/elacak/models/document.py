from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from elacak.core.db import utcnow
from elacak.models.base import Base

DOCUMENT_TYPES = (
    "LAND_CERTIFICATE",
    "ID_CARD",
    "FAMILY_CARD",
    "HOUSE_PHOTO_BEFORE",
    "HOUSE_PHOTO_AFTER",
)


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        CheckConstraint(
            "document_type IN ('LAND_CERTIFICATE', 'ID_CARD', 'FAMILY_CARD', "
            "'HOUSE_PHOTO_BEFORE', 'HOUSE_PHOTO_AFTER')",
            name="chk_documents_type",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    housing_record_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("housing_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    document_type: Mapped[str] = mapped_column(String(30), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    uploaded_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )
