"""
Tests for document metadata, uploads through the blob store and deletion.
"""
import re

import pytest
from sqlalchemy import select

from elacak.core.errors import NotFoundError, ValidationError
from elacak.models import AuditLog
from elacak.schemas.document import DocumentCreate
from elacak.services import documents
from elacak.services.storage import generate_blob_name


def _metadata(record_id: int, **overrides) -> DocumentCreate:
    data = {
        "housing_record_id": record_id,
        "document_type": "FAMILY_CARD",
        "filename": "kk.pdf",
        "file_path": "/uploads/kk.pdf",
        "file_size": 2048,
        "mime_type": "application/pdf",
    }
    data.update(overrides)
    return DocumentCreate(**data)


def test_blob_name_keeps_extension():
    name = generate_blob_name("HOUSE_PHOTO_BEFORE", "rumah depan.JPG")
    assert re.fullmatch(r"HOUSE_PHOTO_BEFORE_\d{13}_[a-z0-9]{13}\.JPG", name)


def test_blob_name_without_extension():
    name = generate_blob_name("ID_CARD", "scan")
    assert re.fullmatch(r"ID_CARD_\d{13}_[a-z0-9]{13}", name)


@pytest.mark.parametrize(
    "original_name",
    ["evil./../../etc", "photo.jp/g", "scan.", "archive.toolongextension", "foto.jp\u00e9g"],
)
def test_blob_name_drops_unsafe_extension(original_name):
    name = generate_blob_name("ID_CARD", original_name)
    assert re.fullmatch(r"ID_CARD_\d{13}_[a-z0-9]{13}", name)


@pytest.mark.asyncio
async def test_create_document_for_missing_record(db_session, admin_user):
    with pytest.raises(NotFoundError):
        await documents.create_document(db_session, _metadata(9999), admin_user.id)


@pytest.mark.asyncio
async def test_create_list_and_delete(make_record, db_session, admin_user):
    record = await make_record()
    created = (await documents.create_document(db_session, _metadata(record.id), admin_user.id)).result
    assert created.uploaded_by == admin_user.id

    assert [d.id for d in await documents.list_documents(db_session, record.id)] == [created.id]

    mutation = await documents.delete_document(db_session, created.id, admin_user.id)
    assert mutation.result is True
    assert mutation.events[0].action == "DELETE"
    assert await documents.list_documents(db_session, record.id) == []

    with pytest.raises(NotFoundError):
        await documents.delete_document(db_session, created.id, admin_user.id)


@pytest.mark.asyncio
async def test_upload_writes_blob(make_record, db_session, admin_user, blob_store):
    record = await make_record()
    mutation = await documents.upload_document(
        db_session,
        blob_store,
        record.id,
        "ID_CARD",
        "ktp.png",
        "image/png",
        b"\x89PNG fake image",
        admin_user.id,
    )
    document = mutation.result
    assert document.file_size == len(b"\x89PNG fake image")
    assert document.file_path == f"/uploads/{document.filename}"
    assert (blob_store.root / document.filename).read_bytes() == b"\x89PNG fake image"


@pytest.mark.asyncio
async def test_upload_rejects_empty_file(make_record, db_session, admin_user, blob_store):
    record = await make_record()
    with pytest.raises(ValidationError):
        await documents.upload_document(
            db_session, blob_store, record.id, "ID_CARD", "ktp.png", "image/png", b"", admin_user.id
        )


@pytest.mark.asyncio
async def test_upload_api(client, make_record, db_session):
    record = await make_record()
    resp = await client.post(
        f"/api/v1/housing-records/{record.id}/documents/upload",
        data={"document_type": "LAND_CERTIFICATE"},
        files={"file": ("sertifikat.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["document_type"] == "LAND_CERTIFICATE"
    assert data["mime_type"] == "application/pdf"
    assert data["filename"].endswith(".pdf")

    resp = await client.get(f"/api/v1/housing-records/{record.id}/documents")
    assert [d["id"] for d in resp.json()] == [data["id"]]

    entries = (await db_session.execute(select(AuditLog))).scalars().all()
    assert [(e.action, e.resource_type) for e in entries] == [("CREATE", "document")]


@pytest.mark.asyncio
async def test_document_api_metadata_and_delete(client, make_record):
    record = await make_record()
    payload = _metadata(record.id).model_dump()
    resp = await client.post("/api/v1/documents", json=payload)
    assert resp.status_code == 201
    document_id = resp.json()["id"]

    assert (await client.get(f"/api/v1/documents/{document_id}")).status_code == 200
    assert (await client.delete(f"/api/v1/documents/{document_id}")).json() == {"deleted": True}
    assert (await client.get(f"/api/v1/documents/{document_id}")).status_code == 404


@pytest.mark.asyncio
async def test_document_api_rejects_unknown_type(client, make_record):
    record = await make_record()
    payload = _metadata(record.id).model_dump()
    payload["document_type"] = "PASSPORT"
    resp = await client.post("/api/v1/documents", json=payload)
    assert resp.status_code == 422
