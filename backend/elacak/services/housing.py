"""
Housing-record lifecycle: create, partial update (with verification reset),
verify, delete, and the read projections.

Coordinates and income are held as Decimal end to end; they are quantized to
the column scale (8 places for coordinates, 2 for currency) before storage.
"""
import logging
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import commit_or_raise, utcnow
from elacak.core.errors import ConflictError, NotFoundError
from elacak.models.document import Document
from elacak.models.housing import HousingRecord
from elacak.schemas.housing import HousingRecordCreate, HousingRecordUpdate, VerifyRequest
from elacak.services import verification
from elacak.services.audit import AuditEvent, Mutation
from elacak.services.reference import ensure_village_in_district, get_district, get_village

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "housing_record"

COORDINATE_SCALE = Decimal("0.00000001")
CURRENCY_SCALE = Decimal("0.01")

_SCALES = {
    "latitude": COORDINATE_SCALE,
    "longitude": COORDINATE_SCALE,
    "monthly_income": CURRENCY_SCALE,
}


def _quantized(name: str, value):
    scale = _SCALES.get(name)
    if scale is None or value is None:
        return value
    return Decimal(value).quantize(scale)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_record(db: AsyncSession, record_id: int) -> HousingRecord:
    record = await db.get(HousingRecord, record_id)
    if record is None:
        raise NotFoundError(f"Housing record with ID {record_id} not found")
    return record


async def list_records(
    db: AsyncSession,
    district_id: int | None = None,
    village_id: int | None = None,
) -> list[HousingRecord]:
    stmt = select(HousingRecord)
    if district_id is not None:
        stmt = stmt.where(HousingRecord.district_id == district_id)
    if village_id is not None:
        stmt = stmt.where(HousingRecord.village_id == village_id)
    result = await db.execute(stmt.order_by(HousingRecord.id))
    return list(result.scalars().all())


async def list_records_by_district(db: AsyncSession, district_id: int) -> list[HousingRecord]:
    return await list_records(db, district_id=district_id)


async def list_records_by_village(db: AsyncSession, village_id: int) -> list[HousingRecord]:
    return await list_records(db, village_id=village_id)


async def _nik_taken(db: AsyncSession, nik: str) -> bool:
    result = await db.execute(select(HousingRecord.id).where(HousingRecord.nik == nik))
    return result.first() is not None


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

async def create_record(
    db: AsyncSession, payload: HousingRecordCreate, creator_id: int
) -> Mutation[HousingRecord]:
    await ensure_village_in_district(db, payload.district_id, payload.village_id)
    if await _nik_taken(db, payload.nik):
        raise ConflictError(f"NIK {payload.nik} is already registered")

    now = utcnow()
    fields = {name: _quantized(name, value) for name, value in payload.model_dump().items()}
    record = HousingRecord(
        **fields,
        verification_status=verification.PENDING,
        verified_by=None,
        verified_at=None,
        created_by=creator_id,
        created_at=now,
        updated_at=now,
    )
    db.add(record)
    await commit_or_raise(db, f"NIK {payload.nik} is already registered")

    logger.info("Created housing record %s by user %s", record.id, creator_id)
    return Mutation(record, [AuditEvent("CREATE", RESOURCE_TYPE, record.id)])


async def update_record(
    db: AsyncSession, record_id: int, payload: HousingRecordUpdate, editor_id: int
) -> Mutation[HousingRecord]:
    record = await get_record(db, record_id)
    changes = payload.model_dump(exclude_unset=True)

    if "district_id" in changes or "village_id" in changes:
        # a lone district or village is paired with the stored counterpart
        if "district_id" in changes:
            await get_district(db, changes["district_id"])
        if "village_id" in changes:
            await get_village(db, changes["village_id"])
        await ensure_village_in_district(
            db,
            changes.get("district_id", record.district_id),
            changes.get("village_id", record.village_id),
        )

    for name, value in changes.items():
        setattr(record, name, _quantized(name, value))

    reset = verification.requires_reverification(changes)
    if reset:
        verification.reset_to_pending(record)
    record.updated_at = utcnow()

    await commit_or_raise(db, f"Housing record {record_id} conflicts with an existing record")

    logger.info(
        "Updated housing record %s by user %s (fields=%s, verification_reset=%s)",
        record.id,
        editor_id,
        sorted(changes),
        reset,
    )
    details = f"fields: {', '.join(sorted(changes))}" if changes else None
    if reset:
        details = f"{details}; verification reset to PENDING"
    return Mutation(record, [AuditEvent("UPDATE", RESOURCE_TYPE, record.id, details)])


async def verify_record(
    db: AsyncSession, record_id: int, payload: VerifyRequest, verifier_id: int
) -> Mutation[HousingRecord]:
    record = await get_record(db, record_id)

    now = max(utcnow(), record.updated_at)
    verification.apply_decision(
        record, payload.verification_status, verifier_id, now, payload.notes
    )
    record.updated_at = now

    await commit_or_raise(db, f"Housing record {record_id} could not be verified")

    logger.info(
        "Housing record %s marked %s by user %s",
        record.id,
        record.verification_status,
        verifier_id,
    )
    return Mutation(
        record,
        [AuditEvent("VERIFY", RESOURCE_TYPE, record.id, record.verification_status)],
    )


async def delete_record(db: AsyncSession, record_id: int, actor_id: int) -> Mutation[bool]:
    """Hard delete. Attached documents are removed with the record."""
    record = await get_record(db, record_id)

    doc_count = (
        await db.execute(
            select(func.count(Document.id)).where(Document.housing_record_id == record_id)
        )
    ).scalar_one()
    await db.execute(delete(Document).where(Document.housing_record_id == record_id))
    await db.delete(record)
    await commit_or_raise(db, f"Housing record {record_id} could not be deleted")

    logger.info(
        "Deleted housing record %s by user %s (%d documents removed)",
        record_id,
        actor_id,
        doc_count,
    )
    details = f"documents removed: {doc_count}" if doc_count else None
    return Mutation(True, [AuditEvent("DELETE", RESOURCE_TYPE, record_id, details)])


async def update_coordinates(
    db: AsyncSession,
    record_id: int,
    latitude: Decimal | float,
    longitude: Decimal | float,
    actor_id: int,
) -> Mutation[HousingRecord]:
    record = await get_record(db, record_id)
    record.latitude = _quantized("latitude", Decimal(str(latitude)))
    record.longitude = _quantized("longitude", Decimal(str(longitude)))
    record.updated_at = utcnow()
    await commit_or_raise(db, f"Housing record {record_id} could not be updated")

    logger.info("Updated coordinates of housing record %s by user %s", record_id, actor_id)
    return Mutation(
        record, [AuditEvent("UPDATE", RESOURCE_TYPE, record_id, "fields: latitude, longitude")]
    )
