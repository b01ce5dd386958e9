"""
User accounts and credential verification.

Operators carry a geographic scope: a district operator needs a district, a
village operator a district and a village inside it.
"""
import logging
import math

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.core.db import commit_or_raise, utcnow
from elacak.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from elacak.core.security import create_access_token, hash_password, verify_password
from elacak.models.user import DISTRICT_OPERATOR, VILLAGE_OPERATOR, User
from elacak.schemas.user import UserCreate, UserUpdate
from elacak.services.audit import AuditEvent, Mutation, record_events
from elacak.services.reference import ensure_village_in_district, get_district, get_village

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "user"

INVALID_CREDENTIALS = "Invalid username or password"


async def _validate_scope(
    db: AsyncSession, role: str, district_id: int | None, village_id: int | None
) -> None:
    if role == DISTRICT_OPERATOR and district_id is None:
        raise ValidationError("District operators must be assigned a district")
    if role == VILLAGE_OPERATOR and (district_id is None or village_id is None):
        raise ValidationError("Village operators must be assigned a district and a village")

    if district_id is not None and village_id is not None:
        await ensure_village_in_district(db, district_id, village_id)
    elif district_id is not None:
        await get_district(db, district_id)
    elif village_id is not None:
        await get_village(db, village_id)


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User with ID {user_id} not found")
    return user


async def list_users(db: AsyncSession, page: int = 1, page_size: int = 20) -> dict:
    page = max(page, 1)
    page_size = min(max(page_size, 1), 100)
    offset = (page - 1) * page_size

    total = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    result = await db.execute(select(User).order_by(User.id).offset(offset).limit(page_size))
    return {
        "items": list(result.scalars().all()),
        "total": total,
        "page": page,
        "page_size": page_size,
        "pages": math.ceil(total / page_size) if total else 0,
    }


async def create_user(db: AsyncSession, payload: UserCreate) -> Mutation[User]:
    existing = await db.execute(
        select(User.id).where(
            or_(User.username == payload.username, User.email == payload.email)
        )
    )
    if existing.first():
        raise ConflictError("A user with this username or email already exists")
    await _validate_scope(db, payload.role, payload.district_id, payload.village_id)

    now = utcnow()
    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        district_id=payload.district_id,
        village_id=payload.village_id,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    await commit_or_raise(db, "A user with this username or email already exists")

    logger.info("Created user %s (role=%s)", user.id, user.role)
    return Mutation(user, [AuditEvent("CREATE", RESOURCE_TYPE, user.id, f"role: {user.role}")])


async def update_user(db: AsyncSession, user_id: int, payload: UserUpdate) -> Mutation[User]:
    user = await get_user(db, user_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("email") is not None and changes["email"] != user.email:
        taken = await db.execute(
            select(User.id).where(User.email == changes["email"], User.id != user_id)
        )
        if taken.first():
            raise ConflictError("A user with this email already exists")

    if {"role", "district_id", "village_id"} & changes.keys():
        await _validate_scope(
            db,
            changes.get("role") or user.role,
            changes.get("district_id", user.district_id),
            changes.get("village_id", user.village_id),
        )

    for name, value in changes.items():
        if value is None and name in ("email", "role", "is_active"):
            continue
        setattr(user, name, value)
    user.updated_at = utcnow()
    await commit_or_raise(db, "A user with this email already exists")

    logger.info("Updated user %s (fields=%s)", user.id, sorted(changes))
    return Mutation(
        user,
        [AuditEvent("UPDATE", RESOURCE_TYPE, user.id, f"fields: {', '.join(sorted(changes))}")],
    )


async def login(
    db: AsyncSession, username: str, password: str, ip_address: str | None = None
) -> Mutation[tuple[User, str]]:
    """
    Verify credentials and issue a session token.

    Attempts against an existing account are audited whether they succeed or
    not. A failed attempt is recorded here, before the AuthError is raised;
    a successful one is returned as the LOGIN event of the Mutation.
    """
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalars().first()
    if user is None:
        logger.warning("Login attempt for unknown username")
        raise AuthError(INVALID_CREDENTIALS)

    if not verify_password(password, user.password_hash):
        logger.warning("Failed login for user %s", user.id)
        await record_events(
            db, [AuditEvent("LOGIN", RESOURCE_TYPE, user.id, "login failed")], user.id, ip_address
        )
        raise AuthError(INVALID_CREDENTIALS)

    if not user.is_active:
        logger.warning("Login rejected for inactive user %s", user.id)
        raise AuthError("User account is inactive")

    token = create_access_token(user)
    logger.info("User %s logged in", user.id)
    return Mutation(
        (user, token), [AuditEvent("LOGIN", RESOURCE_TYPE, user.id, "login succeeded")]
    )
