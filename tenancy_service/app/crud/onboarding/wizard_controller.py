# app/crud/onboarding/wizard_controller.py
import copy
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import ValidationError

from shared.utils.exceptions import EntityNotFoundError, WizardValidationError
from ..leasing_tenants.tenants_crud import tenant_to_form_values
from ...enum.onboarding_enum import TOTAL_STEPS, WizardMode
from ...schemas.leasing_tenants.tenants_schemas import TenantForm
from ...schemas.onboarding.wizard_schemas import OnboardingResult, RoomRef, WizardState
from .collaborators import PropertyCatalog, TenantRepository
from .room_availability import RoomAvailabilityIndex
from .step_validators import StepContext, derive_age, validate_step

logger = logging.getLogger(__name__)

DEFAULT_VALUES: Dict[str, Any] = {
    "personal_info": {
        "first_name": "",
        "last_name": "",
        "father_first_name": "",
        "father_last_name": "",
        "gender": "MALE",
        "marital_status": "SINGLE",
        "dob": "",
        "age": None,
    },
    "contact_info": {
        "mobile_number": "",
        "alternative_number": "",
        "email": "",
        "address": {
            "address_line1": "",
            "address_line2": "",
            "city": "",
            "state": "",
            "pincode": "",
            "country": "India",
        },
    },
    "education": "",
    "employment": {
        "designation": "",
        "present_employed_at": "",
        "office_mobile_number": "",
        "office_address": {
            "address_line1": "",
            "address_line2": "",
            "city": "",
            "state": "",
            "pincode": "",
            "country": "India",
        },
    },
    "property_id": "",
    "property_name": "",
    "room_details": {
        "floor": None,
        "room_number": "",
        "room_type": "",
    },
    "financials": {
        "monthly_rent": 0,
        "deposit": 0,
        "payment_method": "Bank Transfer",
        "rent_due_date": "",
    },
    "lease_details": {
        "lease_start_date": "",
        "lease_end_date": "",
    },
    "emergency_contacts": [
        {"name": "", "relation": "", "contact_number": ""},
    ],
    "status": "PENDING",
    "declaration": False,
    "notes": "",
}


def deep_merge(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``patch`` into a copy of ``base``; nested dicts merge, everything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in (patch or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _schema_errors(values: Dict[str, Any]) -> List[str]:
    try:
        TenantForm.model_validate(values)
    except ValidationError as e:
        messages = []
        for err in e.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()))
            msg = str(err.get("msg", "")).replace("Value error, ", "")
            messages.append(f"{loc}: {msg}" if loc else msg)
        return messages
    return []


def _room_of(tenant) -> Optional[RoomRef]:
    if tenant.room_floor is None or not tenant.room_number:
        return None
    return RoomRef(floor=tenant.room_floor, room_number=str(tenant.room_number))


class WizardController:
    """Seven-step onboarding state machine over immutable WizardState snapshots."""

    def __init__(self, catalog: PropertyCatalog, tenants: Optional[TenantRepository] = None,
                 owner_id: Optional[str] = None, today: Optional[date] = None):
        self.catalog = catalog
        self.tenants = tenants
        self.owner_id = owner_id
        self.today = today

    # ------------------------------------------------------------
    # construction
    # ------------------------------------------------------------

    def start(self, mode: WizardMode = WizardMode.create, tenant_id: Optional[UUID] = None) -> WizardState:
        if mode == WizardMode.create:
            return WizardState(mode=mode, step=1, values=copy.deepcopy(DEFAULT_VALUES))

        if tenant_id is None:
            raise WizardValidationError(["Tenant id is required to edit a tenant"])
        if self.tenants is None:
            raise RuntimeError("WizardController needs a TenantRepository for edit mode")

        tenant = self.tenants.get(tenant_id)
        values = deep_merge(DEFAULT_VALUES, tenant_to_form_values(tenant))
        # the tenant already accepted it when they were onboarded
        values["declaration"] = True
        values = self._with_age(values)

        return WizardState(
            mode=WizardMode.edit,
            step=1,
            values=values,
            tenant_id=tenant.id,
            original_room=_room_of(tenant),
            original_property_id=tenant.property_id,
        )

    # ------------------------------------------------------------
    # value edits
    # ------------------------------------------------------------

    def update(self, state: WizardState, patch: Dict[str, Any]) -> WizardState:
        values = self._with_age(deep_merge(state.values, patch))
        return state.model_copy(update={"values": values})

    def select_property(self, state: WizardState, property_id: UUID) -> WizardState:
        prop = self.catalog.get_one(property_id, self.owner_id)
        values = deep_merge(state.values, {
            "property_id": str(prop.id),
            "property_name": prop.property_name,
            "room_details": {"floor": None, "room_number": "", "room_type": ""},
        })
        return state.model_copy(update={"values": values, "errors": ()})

    def select_floor(self, state: WizardState, floor: int) -> WizardState:
        index, _ = self.availability(state)
        if index is not None and floor not in index.floors:
            return state.model_copy(update={
                "errors": (f"Floor {floor} is not available for this property",)})

        values = deep_merge(state.values, {
            "room_details": {"floor": floor, "room_number": "", "room_type": ""},
        })
        return state.model_copy(update={"values": values, "errors": ()})

    def select_room(self, state: WizardState, room_number: str) -> WizardState:
        room_details = state.values.get("room_details") or {}
        floor = room_details.get("floor")
        if floor is None:
            return state.model_copy(update={"errors": ("Floor selection is required",)})

        index, _ = self.availability(state)
        if index is None:
            return state.model_copy(update={"errors": ("Property selection is required",)})

        room = index.find(floor, room_number)
        if room is None:
            return state.model_copy(update={
                "errors": (f"Room {room_number} does not exist on floor {floor}",)})
        if not room.selectable:
            return state.model_copy(update={
                "errors": ("Selected room is already occupied. Please choose another room.",)})

        values = deep_merge(state.values, {
            "room_details": {"room_number": room.room_no, "room_type": room.sharing_option},
        })
        return state.model_copy(update={"values": values, "errors": ()})

    # ------------------------------------------------------------
    # navigation
    # ------------------------------------------------------------

    def next(self, state: WizardState) -> WizardState:
        errors = self.validate_step(state)
        if errors:
            return state.model_copy(update={"errors": tuple(errors)})
        return state.model_copy(update={
            "step": min(state.step + 1, TOTAL_STEPS),
            "errors": (),
        })

    def prev(self, state: WizardState) -> WizardState:
        if state.step <= 1:
            return state
        return state.model_copy(update={"step": state.step - 1, "errors": ()})

    # ------------------------------------------------------------
    # validation
    # ------------------------------------------------------------

    def availability(self, state: WizardState) -> Tuple[Optional[RoomAvailabilityIndex], bool]:
        """Room index for the selected property, and whether the property was missing."""
        raw_id = state.values.get("property_id")
        if not raw_id:
            return None, False
        try:
            property_id = raw_id if isinstance(raw_id, UUID) else UUID(str(raw_id))
            prop = self.catalog.get_one(property_id, self.owner_id)
        except (ValueError, EntityNotFoundError):
            return None, True

        original_room, original_property_id = self._origin(state)
        if original_property_id != prop.id:
            original_room = None
        return RoomAvailabilityIndex.from_property(prop, original_room), False

    def _origin(self, state: WizardState) -> Tuple[Optional[RoomRef], Optional[UUID]]:
        """Room and property the edited tenant holds, read from storage rather than the posted state."""
        if not state.is_edit or state.tenant_id is None or self.tenants is None:
            return None, None
        tenant = self.tenants.get(state.tenant_id)
        return _room_of(tenant), tenant.property_id

    def _context(self, state: WizardState) -> StepContext:
        index, missing = self.availability(state)
        return StepContext(
            mode=state.mode,
            index=index,
            property_missing=missing,
            today=self.today,
        )

    def validate_step(self, state: WizardState, step: Optional[int] = None) -> List[str]:
        step = step or state.step
        # only step 4 needs the property loaded
        ctx = self._context(state) if step == 4 else StepContext(mode=state.mode, today=self.today)
        return validate_step(step, state.values, ctx)

    def validate_all(self, state: WizardState) -> List[str]:
        ctx = self._context(state)
        errors = []
        for step in range(1, TOTAL_STEPS + 1):
            errors.extend(f"Step {step}: {e}" for e in validate_step(step, state.values, ctx))
        errors.extend(_schema_errors(self._with_age(copy.deepcopy(state.values))))
        return errors

    # ------------------------------------------------------------
    # submission
    # ------------------------------------------------------------

    def submit(self, state: WizardState, orchestrator) -> OnboardingResult:
        if not state.is_last_step:
            raise WizardValidationError([
                f"Please complete all steps. Currently on step {state.step} of {TOTAL_STEPS}."
            ])
        if state.is_edit and state.tenant_id is None:
            raise WizardValidationError(["Tenant id is required to edit a tenant"])

        errors = self.validate_all(state)
        if errors:
            logger.info("Wizard submission rejected with %d errors", len(errors))
            raise WizardValidationError(errors)

        form = TenantForm.model_validate(self._with_age(copy.deepcopy(state.values)))
        if state.is_edit:
            return orchestrator.edit(state.tenant_id, form, self.owner_id)
        return orchestrator.create(form, self.owner_id)

    def _with_age(self, values: Dict[str, Any]) -> Dict[str, Any]:
        personal = values.get("personal_info")
        if isinstance(personal, dict):
            personal["age"] = derive_age(personal.get("dob"), self.today)
        return values
