"""
Error taxonomy shared by services and routers.

Services raise these; create_app() renders them as
{"detail": <message>, "code": <code>} with the class's HTTP status.
"""


class RegistryError(Exception):
    status_code = 500
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RegistryError):
    """A referenced district, village, record, backlog, document or user is absent."""

    status_code = 404
    code = "not_found"


class ValidationError(RegistryError):
    """Malformed input caught before reaching storage."""

    status_code = 422
    code = "validation_error"


class VillageMismatchError(ValidationError):
    code = "village_mismatch"


class ConflictError(RegistryError):
    """Uniqueness violation (NIK, backlog period, village code, username/email)."""

    status_code = 409
    code = "conflict"


class AuthError(RegistryError):
    """Bad credentials, inactive account, or an invalid/tampered/expired token."""

    status_code = 401
    code = "auth_error"


class PermissionDeniedError(RegistryError):
    status_code = 403
    code = "forbidden"


class StorageError(RegistryError):
    """Persistence failure not otherwise classified."""

    status_code = 500
    code = "storage_error"
