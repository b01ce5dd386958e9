from elacak.models.audit import AuditLog
from elacak.models.backlog import Backlog
from elacak.models.base import Base
from elacak.models.document import Document
from elacak.models.housing import HousingRecord
from elacak.models.reference import District, Village
from elacak.models.user import User

__all__ = [
    "AuditLog",
    "Backlog",
    "Base",
    "District",
    "Document",
    "HousingRecord",
    "User",
    "Village",
]
