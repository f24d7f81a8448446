# app/schemas/leasing_tenants/tenants_schemas.py
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field, model_validator

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.leasing_tenants_enum import Gender, MaritalStatus, TenantStatus


class AddressIn(EmptyStringModel):
    address_line1: str = Field(..., min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., min_length=1)
    country: str = "India"


class OfficeAddressIn(EmptyStringModel):
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: str = "India"


class PersonalInfoIn(EmptyStringModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    father_first_name: Optional[str] = None
    father_last_name: Optional[str] = None
    gender: Gender = Gender.MALE
    marital_status: MaritalStatus = MaritalStatus.SINGLE
    age: Optional[int] = Field(None, ge=18, le=100)
    dob: date


class ContactInfoIn(EmptyStringModel):
    mobile_number: str = Field(..., min_length=10)
    alternative_number: Optional[str] = None
    email: EmailStr
    address: AddressIn


class EmploymentIn(EmptyStringModel):
    designation: Optional[str] = None
    present_employed_at: Optional[str] = None
    office_mobile_number: Optional[str] = None
    office_address: Optional[OfficeAddressIn] = None


class RoomDetailsIn(EmptyStringModel):
    floor: int = Field(..., ge=0)
    room_number: str = Field(..., min_length=1)
    room_type: str = Field(..., min_length=1)


class FinancialsIn(EmptyStringModel):
    monthly_rent: Decimal = Field(..., ge=0)
    deposit: Decimal = Field(Decimal("0"), ge=0)
    payment_method: str = "Bank Transfer"
    rent_due_date: date


class LeaseDetailsIn(EmptyStringModel):
    lease_start_date: date
    lease_end_date: date


class EmergencyContactIn(EmptyStringModel):
    name: str = Field(..., min_length=1)
    relation: str = Field(..., min_length=1)
    contact_number: str = Field(..., min_length=10)


class TenantForm(EmptyStringModel):
    """Schema-level shape of a complete wizard submission."""
    personal_info: PersonalInfoIn
    contact_info: ContactInfoIn
    education: Optional[str] = None
    employment: Optional[EmploymentIn] = None
    property_id: UUID
    property_name: Optional[str] = None
    room_details: RoomDetailsIn
    financials: FinancialsIn
    lease_details: LeaseDetailsIn
    emergency_contacts: List[EmergencyContactIn] = Field(..., min_length=1)
    status: TenantStatus = TenantStatus.PENDING
    declaration: bool
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_cross_fields(self):
        if not self.declaration:
            raise ValueError("Declaration must be accepted")
        if self.lease_details.lease_end_date <= self.lease_details.lease_start_date:
            raise ValueError("Lease end date should be after start date.")
        return self

    @property
    def full_name(self) -> str:
        return f"{self.personal_info.first_name} {self.personal_info.last_name}"


class TenantRequest(CommonQueryParams):
    tenant_id: Optional[UUID] = None
    owner_id: Optional[str] = None
    property_id: Optional[UUID] = None
    status: Optional[str] = None
    name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    marital_status: Optional[str] = None


class TenantOut(BaseModel):
    id: UUID
    owner_id: Optional[str] = None
    property_id: UUID
    property_name: Optional[str] = None
    personal_info: Dict[str, Any]
    contact_info: Dict[str, Any]
    education: Optional[str] = None
    employment: Optional[Dict[str, Any]] = None
    room_details: Dict[str, Any]
    financials: Dict[str, Any]
    lease_details: Dict[str, Any]
    emergency_contacts: List[Dict[str, Any]]
    status: str
    declaration: bool
    notes: Optional[str] = None
    ledger_synced: bool
    occupancy_synced: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TenantListResponse(BaseModel):
    tenants: List[TenantOut]
    total: int
