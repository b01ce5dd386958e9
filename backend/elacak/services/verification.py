"""
Housing-record verification state machine.

    PENDING  --verify-->  VERIFIED | REJECTED
    any      --significant edit-->  PENDING

Re-verifying an already decided record is allowed and simply restamps the
decision. A record is created PENDING with no verifier.
"""
from collections.abc import Iterable
from datetime import datetime

from elacak.core.errors import ValidationError
from elacak.models.housing import HousingRecord

PENDING = "PENDING"
VERIFIED = "VERIFIED"
REJECTED = "REJECTED"

DECISIONS = frozenset({VERIFIED, REJECTED})

# Editing any of these invalidates a previous verification decision.
SIGNIFICANT_FIELDS = frozenset(
    {
        "head_of_household",
        "housing_status",
        "eligibility_category",
        "address",
        "family_members",
    }
)


def requires_reverification(changed_fields: Iterable[str]) -> bool:
    return not SIGNIFICANT_FIELDS.isdisjoint(changed_fields)


def reset_to_pending(record: HousingRecord) -> None:
    record.verification_status = PENDING
    record.verified_by = None
    record.verified_at = None


def apply_decision(
    record: HousingRecord,
    decision: str,
    verifier_id: int,
    decided_at: datetime,
    notes: str | None = None,
) -> None:
    if decision not in DECISIONS:
        raise ValidationError(f"Unsupported verification decision: {decision}")
    record.verification_status = decision
    record.verified_by = verifier_id
    record.verified_at = decided_at
    if notes is not None:
        record.notes = notes
