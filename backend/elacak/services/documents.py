"""
Documents attached to housing records. Created or deleted, never updated.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import commit_or_raise, utcnow
from elacak.core.errors import NotFoundError, ValidationError
from elacak.models.document import Document
from elacak.schemas.document import DocumentCreate
from elacak.services.audit import AuditEvent, Mutation
from elacak.services.housing import get_record
from elacak.services.storage import BlobStore, generate_blob_name

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "document"


async def list_documents(db: AsyncSession, housing_record_id: int) -> list[Document]:
    result = await db.execute(
        select(Document)
        .where(Document.housing_record_id == housing_record_id)
        .order_by(Document.id)
    )
    return list(result.scalars().all())


async def get_document(db: AsyncSession, document_id: int) -> Document:
    document = await db.get(Document, document_id)
    if document is None:
        raise NotFoundError(f"Document with ID {document_id} not found")
    return document


async def create_document(
    db: AsyncSession, payload: DocumentCreate, uploader_id: int
) -> Mutation[Document]:
    await get_record(db, payload.housing_record_id)

    document = Document(**payload.model_dump(), uploaded_by=uploader_id, created_at=utcnow())
    db.add(document)
    await commit_or_raise(db, "Document could not be stored")

    logger.info(
        "Attached %s document %s to housing record %s",
        document.document_type,
        document.id,
        document.housing_record_id,
    )
    return Mutation(
        document,
        [AuditEvent("CREATE", RESOURCE_TYPE, document.id, f"housing_record: {document.housing_record_id}")],
    )


async def upload_document(
    db: AsyncSession,
    store: BlobStore,
    housing_record_id: int,
    document_type: str,
    original_name: str | None,
    content_type: str | None,
    data: bytes,
    uploader_id: int,
) -> Mutation[Document]:
    """Store the bytes first, then record the document metadata."""
    if not data:
        raise ValidationError("Uploaded file is empty")
    await get_record(db, housing_record_id)

    filename = generate_blob_name(document_type, original_name)
    mime_type = content_type or "application/octet-stream"
    blob = store.save(filename, data, mime_type)

    payload = DocumentCreate(
        housing_record_id=housing_record_id,
        document_type=document_type,
        filename=filename,
        file_path=blob.path,
        file_size=blob.size,
        mime_type=mime_type,
    )
    return await create_document(db, payload, uploader_id)


async def delete_document(db: AsyncSession, document_id: int, actor_id: int) -> Mutation[bool]:
    document = await get_document(db, document_id)
    housing_record_id = document.housing_record_id
    await db.delete(document)
    await commit_or_raise(db, f"Document {document_id} could not be deleted")

    logger.info("Deleted document %s by user %s", document_id, actor_id)
    return Mutation(
        True,
        [AuditEvent("DELETE", RESOURCE_TYPE, document_id, f"housing_record: {housing_record_id}")],
    )
