# app/crud/onboarding/step_validators.py
"""Per-step rules of the tenant onboarding wizard.

Every validator is a plain function of the form values and a StepContext and
returns a list of messages; an empty list means the step is complete.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict

from shared.wrappers.empty_string_model_wrapper import safe_parse_date
from ...enum.onboarding_enum import WizardMode, WizardStep
from .room_availability import RoomAvailabilityIndex

PHONE_PATTERN = re.compile(r"^[0-9+\-\s()]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PINCODE_PATTERN = re.compile(r"^[0-9]{6}$")

MIN_TENANT_AGE = 18


class StepContext(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    mode: WizardMode = WizardMode.create
    index: Optional[RoomAvailabilityIndex] = None
    property_missing: bool = False
    today: Optional[date] = None

    @property
    def reference_day(self) -> date:
        return self.today or date.today()


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _section(values: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = values.get(key)
    return section if isinstance(section, dict) else {}


def _amount(value: Any) -> Optional[Decimal]:
    if value is None or _text(value) == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def derive_age(dob: Any, today: Optional[date] = None) -> Optional[int]:
    """Completed years between ``dob`` and ``today``."""
    born = safe_parse_date(dob)
    if not born:
        return None
    return relativedelta(today or date.today(), born).years


# ----------------------------------------------------------------
# Steps
# ----------------------------------------------------------------

def validate_personal_info(values: Dict[str, Any], ctx: StepContext) -> List[str]:
    errors = []
    personal = _section(values, "personal_info")

    if not _text(personal.get("first_name")):
        errors.append("First name is required")
    if not _text(personal.get("last_name")):
        errors.append("Last name is required")
    if not personal.get("dob"):
        errors.append("Date of birth is required")
    if not _text(personal.get("gender")):
        errors.append("Gender is required")

    # any age sent with the form is ignored
    age = derive_age(personal.get("dob"), ctx.reference_day)
    if age is None or age < MIN_TENANT_AGE:
        errors.append("Age must be at least 18 years")

    return errors


def validate_contact_info(values: Dict[str, Any], ctx: StepContext) -> List[str]:
    errors = []
    contact = _section(values, "contact_info")
    address = _section(contact, "address")

    mobile = _text(contact.get("mobile_number"))
    if not mobile:
        errors.append("Mobile number is required")
    else:
        if len(mobile) < 10:
            errors.append("Mobile number must be at least 10 digits")
        if not PHONE_PATTERN.match(mobile):
            errors.append("Mobile number contains invalid characters")

    email = _text(contact.get("email"))
    if not email:
        errors.append("Email address is required")
    elif not EMAIL_PATTERN.match(email):
        errors.append("Please enter a valid email address")

    if not _text(address.get("address_line1")):
        errors.append("Address line 1 is required")
    if not _text(address.get("city")):
        errors.append("City is required")
    if not _text(address.get("state")):
        errors.append("State is required")

    pincode = _text(address.get("pincode"))
    if not pincode:
        errors.append("Pincode is required")
    elif not PINCODE_PATTERN.match(pincode):
        errors.append("Pincode must be exactly 6 digits")

    return errors


def validate_education_employment(values: Dict[str, Any], ctx: StepContext) -> List[str]:
    # optional step
    return []


def validate_property_room(values: Dict[str, Any], ctx: StepContext) -> List[str]:
    errors = []
    room_details = _section(values, "room_details")
    floor = room_details.get("floor")
    room_number = _text(room_details.get("room_number"))

    if not _text(values.get("property_id")):
        errors.append("Property selection is required")
    elif ctx.property_missing:
        errors.append("Selected property could not be found")
    if floor is None or _text(floor) == "":
        errors.append("Floor selection is required")
    if not room_number:
        errors.append("Room selection is required")
    if not _text(room_details.get("room_type")):
        errors.append("Room type is required")

    if ctx.index is None or floor is None or _text(floor) == "" or not room_number:
        return errors

    room = ctx.index.find(floor, room_number)
    if room is None:
        return errors

    # the index only flags the room the tenant holds on this same property
    if ctx.mode == WizardMode.edit and room.is_original_room:
        return errors

    if ctx.index.is_pg and room.occupancy >= room.capacity:
        errors.append(f"Room is full. All {room.capacity} beds are occupied.")
    elif not room.selectable:
        errors.append("Selected room is already occupied. Please choose another room.")

    return errors


def validate_financials(values: Dict[str, Any], ctx: StepContext) -> List[str]:
    errors = []
    financials = _section(values, "financials")
    lease = _section(values, "lease_details")

    rent = _amount(financials.get("monthly_rent"))
    if rent is None or rent <= 0:
        errors.append("Monthly rent must be greater than 0")

    deposit = _amount(financials.get("deposit"))
    if deposit is None or deposit < 0:
        errors.append("Security deposit must be 0 or greater")

    if not financials.get("rent_due_date"):
        errors.append("Rent due date is required")

    start = safe_parse_date(lease.get("lease_start_date"))
    end = safe_parse_date(lease.get("lease_end_date"))
    if not start:
        errors.append("Lease start date is required")
    if not end:
        errors.append("Lease end date is required")

    if start and end:
        if start >= end:
            errors.append("Lease end date must be after start date")
        if ctx.mode == WizardMode.create and start < ctx.reference_day:
            errors.append("Lease start date cannot be in the past")

    return errors


def validate_emergency_contacts(values: Dict[str, Any], ctx: StepContext) -> List[str]:
    errors = []
    contacts = values.get("emergency_contacts") or []

    if not contacts:
        return ["At least one emergency contact is required"]

    for i, contact in enumerate(contacts, start=1):
        contact = contact if isinstance(contact, dict) else {}
        if not _text(contact.get("name")):
            errors.append(f"Emergency contact {i}: Name is required")
        if not _text(contact.get("relation")):
            errors.append(f"Emergency contact {i}: Relationship is required")
        number = _text(contact.get("contact_number"))
        if not number:
            errors.append(f"Emergency contact {i}: Contact number is required")
        elif len(number) < 10:
            errors.append(f"Emergency contact {i}: Contact number must be at least 10 digits")

    return errors


def validate_review(values: Dict[str, Any], ctx: StepContext) -> List[str]:
    if values.get("declaration") is not True:
        return ["Declaration must be accepted to proceed"]
    return []


STEP_VALIDATORS: Dict[int, Callable[[Dict[str, Any], StepContext], List[str]]] = {
    WizardStep.PERSONAL: validate_personal_info,
    WizardStep.CONTACT: validate_contact_info,
    WizardStep.EDUCATION_EMPLOYMENT: validate_education_employment,
    WizardStep.PROPERTY_ROOM: validate_property_room,
    WizardStep.FINANCIAL: validate_financials,
    WizardStep.EMERGENCY_CONTACTS: validate_emergency_contacts,
    WizardStep.DOCUMENTS_REVIEW: validate_review,
}


def validate_step(step: int, values: Dict[str, Any], ctx: StepContext) -> List[str]:
    return STEP_VALIDATORS[WizardStep(step)](values, ctx)
