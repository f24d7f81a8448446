# app/crud/leasing_tenants/tenants_crud.py
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session

from shared.core.schemas import Lookup
from shared.utils.exceptions import EntityNotFoundError
from ...enum.leasing_tenants_enum import TenantStatus
from ...models.leasing_tenants.tenants import Tenant
from ...schemas.leasing_tenants.tenants_schemas import (
    TenantForm,
    TenantListResponse,
    TenantOut,
    TenantRequest,
)


def _sections(form: TenantForm) -> dict:
    data = form.model_dump(mode="json")
    return {
        "property_id": form.property_id,
        "property_name": form.property_name,
        "personal_info": data["personal_info"],
        "contact_info": data["contact_info"],
        "education": form.education,
        "employment": data["employment"],
        "room_details": data["room_details"],
        "financials": data["financials"],
        "lease_details": data["lease_details"],
        "emergency_contacts": data["emergency_contacts"],
        "status": form.status.value,
        "declaration": form.declaration,
        "notes": form.notes,
        # denormalized columns
        "full_name": form.full_name,
        "mobile_number": form.contact_info.mobile_number,
        "email": str(form.contact_info.email),
        "room_floor": form.room_details.floor,
        "room_number": form.room_details.room_number,
    }


# ------------------------------------------------------------

def get_all_tenants(db: Session, params: TenantRequest) -> TenantListResponse:
    query = db.query(Tenant).filter(Tenant.is_deleted == False)

    if params.owner_id:
        query = query.filter(Tenant.owner_id == params.owner_id)
    if params.tenant_id:
        query = query.filter(Tenant.id == params.tenant_id)
    if params.property_id:
        query = query.filter(Tenant.property_id == params.property_id)
    if params.status and params.status.lower() != "all":
        query = query.filter(func.upper(Tenant.status) == params.status.upper())
    if params.name:
        query = query.filter(Tenant.full_name.ilike(f"%{params.name}%"))
    if params.mobile:
        query = query.filter(Tenant.mobile_number.ilike(f"%{params.mobile}%"))
    if params.email:
        query = query.filter(Tenant.email.ilike(f"%{params.email}%"))
    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(
            or_(
                Tenant.full_name.ilike(search_term),
                Tenant.email.ilike(search_term),
                Tenant.mobile_number.ilike(search_term),
                Tenant.room_number.ilike(search_term),
            )
        )

    tenants = query.order_by(desc(Tenant.updated_at)).all()

    # address and marital status live inside JSON sections
    if params.city:
        tenants = [t for t in tenants if _address_field(t, "city") == params.city.lower()]
    if params.state:
        tenants = [t for t in tenants if _address_field(t, "state") == params.state.lower()]
    if params.marital_status:
        wanted = params.marital_status.upper()
        tenants = [
            t for t in tenants
            if str((t.personal_info or {}).get("marital_status") or "").upper() == wanted
        ]

    total = len(tenants)
    start = params.skip or 0
    end = start + params.limit if params.limit else None

    return TenantListResponse(
        tenants=[TenantOut.model_validate(t) for t in tenants[start:end]],
        total=total,
    )


def _address_field(tenant: Tenant, key: str) -> str:
    address = (tenant.contact_info or {}).get("address") or {}
    return str(address.get(key) or "").lower()


def get_tenant_by_id(db: Session, tenant_id: UUID) -> Optional[Tenant]:
    return (
        db.query(Tenant)
        .filter(Tenant.id == tenant_id, Tenant.is_deleted == False)
        .first()
    )


def get_tenant(db: Session, tenant_id: UUID) -> Tenant:
    tenant = get_tenant_by_id(db, tenant_id)
    if not tenant:
        raise EntityNotFoundError(f"Tenant {tenant_id} not found")
    return tenant


def create_tenant(db: Session, form: TenantForm, owner_id: Optional[str]) -> Tenant:
    """Stage a new tenant row; the caller commits."""
    tenant = Tenant(owner_id=owner_id, **_sections(form))
    db.add(tenant)
    db.flush()
    return tenant


def update_tenant(db: Session, tenant_id: UUID, form: TenantForm) -> Tenant:
    """Overwrite every form-owned field of an existing tenant; the caller commits."""
    tenant = get_tenant(db, tenant_id)
    for key, value in _sections(form).items():
        setattr(tenant, key, value)
    tenant.updated_at = datetime.now(timezone.utc)
    db.flush()
    return tenant


def tenant_to_form_values(tenant: Tenant) -> dict:
    """Flatten a stored tenant back into wizard form values."""
    return {
        "personal_info": dict(tenant.personal_info or {}),
        "contact_info": dict(tenant.contact_info or {}),
        "education": tenant.education or "",
        "employment": dict(tenant.employment or {}),
        "property_id": str(tenant.property_id) if tenant.property_id else "",
        "property_name": tenant.property_name or "",
        "room_details": dict(tenant.room_details or {}),
        "financials": dict(tenant.financials or {}),
        "lease_details": dict(tenant.lease_details or {}),
        "emergency_contacts": [dict(c) for c in tenant.emergency_contacts or []],
        "status": tenant.status,
        "declaration": bool(tenant.declaration),
        "notes": tenant.notes or "",
    }


def tenant_status_lookup(db: Session) -> List[Dict]:
    return [
        Lookup(id=status.value, name=status.name.capitalize())
        for status in TenantStatus
    ]
