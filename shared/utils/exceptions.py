"""Error taxonomy for tenant onboarding and occupancy."""

from typing import List, Optional


class TenancyError(Exception):
    """Base exception for all tenancy service errors."""


class WizardValidationError(TenancyError):
    """One or more wizard rules failed; always recoverable.

    Carries every violation for the current scope so callers can show them
    together.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


class EntityNotFoundError(TenancyError):
    """Raised when a referenced property, tenant or task does not exist."""


class PersistenceError(TenancyError):
    """Tenant create/update failed. Fatal for the current submission."""


class ConcurrentUpdateError(PersistenceError):
    """A whole-document write carried a stale version token."""

    def __init__(self, property_id, expected_version: Optional[int], actual_version: Optional[int]):
        self.property_id = property_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Property {property_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )


class SideEffectFailure(TenancyError):
    """A ledger or occupancy side effect failed after the tenant was saved."""


class LedgerError(SideEffectFailure):
    """Ledger transaction could not be created."""


class RoomNotFoundError(SideEffectFailure):
    """The floor/room pair does not exist on the property."""


class RoomCapacityError(SideEffectFailure):
    """Every bed in the room is already occupied."""
