"""
Document endpoints: metadata registration, multipart upload, listing, delete.
"""
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import get_db
from elacak.core.rbac import EDITOR_ROLES, ensure_in_scope, require_role
from elacak.core.security import client_ip
from elacak.models.user import User
from elacak.schemas.common import DeletedResponse, DocumentType
from elacak.schemas.document import DocumentCreate, DocumentResponse
from elacak.services import documents, housing
from elacak.services.audit import record_events
from elacak.services.storage import BlobStore, get_blob_store

router = APIRouter(tags=["documents"])


async def _ensure_record_in_scope(db: AsyncSession, user: User, record_id: int) -> None:
    record = await housing.get_record(db, record_id)
    ensure_in_scope(user, record.district_id, record.village_id)


@router.get(
    "/housing-records/{record_id}/documents", response_model=list[DocumentResponse]
)
async def list_documents(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> list[DocumentResponse]:
    await _ensure_record_in_scope(db, current_user, record_id)
    rows = await documents.list_documents(db, record_id)
    return [DocumentResponse.model_validate(r) for r in rows]


@router.post(
    "/housing-records/{record_id}/documents/upload",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    record_id: int,
    request: Request,
    document_type: DocumentType = Form(...),
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> DocumentResponse:
    await _ensure_record_in_scope(db, current_user, record_id)
    data = await file.read()
    mutation = await documents.upload_document(
        db,
        store,
        record_id,
        document_type,
        file.filename,
        file.content_type,
        data,
        current_user.id,
    )
    response = DocumentResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return response


@router.post(
    "/documents", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED
)
async def create_document(
    payload: DocumentCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> DocumentResponse:
    """Register a file that is already in the blob store."""
    await _ensure_record_in_scope(db, current_user, payload.housing_record_id)
    mutation = await documents.create_document(db, payload, current_user.id)
    response = DocumentResponse.model_validate(mutation.result)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return response


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> DocumentResponse:
    document = await documents.get_document(db, document_id)
    await _ensure_record_in_scope(db, current_user, document.housing_record_id)
    return DocumentResponse.model_validate(document)


@router.delete("/documents/{document_id}", response_model=DeletedResponse)
async def delete_document(
    document_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(*EDITOR_ROLES)),
) -> DeletedResponse:
    document = await documents.get_document(db, document_id)
    await _ensure_record_in_scope(db, current_user, document.housing_record_id)
    mutation = await documents.delete_document(db, document_id, current_user.id)
    await record_events(db, mutation.events, current_user.id, client_ip(request))
    return DeletedResponse(deleted=mutation.result)
