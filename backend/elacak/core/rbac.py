"""
Role-based access control (RBAC) dependency factory and geographic scope checks.

Usage:
    @router.get("/admin-only")
    async def admin_endpoint(user = Depends(require_role(*ADMIN_ROLES))):
        ...

    @router.post("/records")
    async def create(user = Depends(require_role(*EDITOR_ROLES))):
        ensure_in_scope(user, payload.district_id, payload.village_id)
"""
from fastapi import Depends

from elacak.core.errors import PermissionDeniedError
from elacak.core.security import get_current_user
from elacak.models.user import (
    DISTRICT_OPERATOR,
    KOMINFO_ADMIN,
    PUPR_ADMIN,
    VILLAGE_OPERATOR,
    User,
)

ADMIN_ROLES = (PUPR_ADMIN, KOMINFO_ADMIN)
EDITOR_ROLES = ADMIN_ROLES + (DISTRICT_OPERATOR, VILLAGE_OPERATOR)
VERIFIER_ROLES = ADMIN_ROLES + (DISTRICT_OPERATOR,)


def require_role(*roles: str):
    """
    Dependency factory that enforces the caller's role is in *roles.
    Accepts any authenticated user when called with no role arguments.
    """

    async def _check_role(current_user: User = Depends(get_current_user)) -> User:
        if roles and current_user.role not in roles:
            raise PermissionDeniedError(f"Requires one of roles: {list(roles)}")
        return current_user

    return _check_role


def ensure_in_scope(user: User, district_id: int | None, village_id: int | None = None) -> None:
    """Operators may only touch data inside their own district or village."""
    if user.role == DISTRICT_OPERATOR and district_id != user.district_id:
        raise PermissionDeniedError("District operators may only act within their district")
    if user.role == VILLAGE_OPERATOR and (
        district_id != user.district_id or village_id != user.village_id
    ):
        raise PermissionDeniedError("Village operators may only act within their village")


def scope_filters(user: User) -> dict[str, int | None]:
    """Listing filters implied by an operator's scope (empty for everyone else)."""
    if user.role == DISTRICT_OPERATOR:
        return {"district_id": user.district_id}
    if user.role == VILLAGE_OPERATOR:
        return {"district_id": user.district_id, "village_id": user.village_id}
    return {}
