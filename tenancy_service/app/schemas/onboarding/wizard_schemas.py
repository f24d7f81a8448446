# app/schemas/onboarding/wizard_schemas.py
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from ...enum.onboarding_enum import TOTAL_STEPS, WizardMode
from ..leasing_tenants.tenants_schemas import TenantOut


class RoomRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    floor: int
    room_number: str

    def matches(self, floor, room_number) -> bool:
        try:
            return int(floor) == self.floor and str(room_number) == self.room_number
        except (TypeError, ValueError):
            return False


class WizardState(BaseModel):
    """Snapshot of the onboarding wizard.

    Never mutated in place: every wizard operation returns a new snapshot.
    """
    model_config = ConfigDict(frozen=True)

    mode: WizardMode = WizardMode.create
    step: int = Field(1, ge=1, le=TOTAL_STEPS)
    values: Dict[str, Any] = {}
    errors: Tuple[str, ...] = ()
    tenant_id: Optional[UUID] = None
    original_room: Optional[RoomRef] = None
    original_property_id: Optional[UUID] = None

    @property
    def is_edit(self) -> bool:
        return self.mode == WizardMode.edit

    @property
    def is_last_step(self) -> bool:
        return self.step == TOTAL_STEPS


class WizardStartRequest(BaseModel):
    mode: WizardMode = WizardMode.create
    tenant_id: Optional[UUID] = None
    owner_id: Optional[str] = None


class WizardStateRequest(BaseModel):
    state: WizardState


class WizardUpdateRequest(WizardStateRequest):
    patch: Dict[str, Any]


class WizardSelectPropertyRequest(WizardStateRequest):
    property_id: UUID
    owner_id: Optional[str] = None


class WizardSelectFloorRequest(WizardStateRequest):
    floor: int = Field(..., ge=0)


class WizardSelectRoomRequest(WizardStateRequest):
    room_number: str


class WizardSubmitRequest(WizardStateRequest):
    owner_id: Optional[str] = None


class ReconcileResult(BaseModel):
    property_id: UUID
    room: RoomRef
    occupancy: int
    vacated: Optional[RoomRef] = None
    vacated_occupancy: Optional[int] = None
    unchanged: bool = False


class SideEffectOutcome(BaseModel):
    task_id: UUID
    task_type: str
    succeeded: bool
    error: Optional[str] = None
    result_id: Optional[str] = None
    occupancy: Optional[ReconcileResult] = None


class OnboardingResult(BaseModel):
    tenant_id: UUID
    mode: WizardMode
    tenant: TenantOut
    side_effects: List[SideEffectOutcome] = []
    ledger_synced: bool
    occupancy_synced: bool

    @property
    def failed_side_effects(self) -> List[SideEffectOutcome]:
        return [s for s in self.side_effects if not s.succeeded]
