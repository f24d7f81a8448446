# app/router/property_catalog/properties_router.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.database import get_tenancy_db as get_db
from shared.core.owner_scope import get_owner_id
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode

from ...crud.leasing_tenants import tenants_crud
from ...crud.onboarding.collaborators import PropertyRepository
from ...crud.onboarding.room_availability import RoomAvailabilityIndex
from ...crud.property_catalog import properties_crud as crud
from ...schemas.onboarding.room_availability_schemas import PropertyAvailabilityOut
from ...schemas.onboarding.wizard_schemas import RoomRef
from ...schemas.property_catalog.property_schemas import (
    PropertyDocumentIn,
    PropertyListRequest,
    PropertyListResponse,
    PropertyOut,
)

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.get("/", response_model=PropertyListResponse)
def read_properties(
    params: PropertyListRequest = Depends(),
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    if owner_id and not params.owner_id:
        params.owner_id = owner_id
    return crud.get_all_properties(db, params)


@router.get("/{property_id}", response_model=PropertyOut)
def read_property(
    property_id: UUID,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    return crud.get_property(db, property_id, owner_id)


@router.put("/{property_id}", response_model=None)
def write_property(
    property_id: UUID,
    document: PropertyDocumentIn,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    crud.get_property(db, property_id, owner_id)
    prop = PropertyRepository(db).update(property_id, document)
    return success_response(
        data=PropertyOut.model_validate(prop),
        message="Property updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.get("/{property_id}/availability", response_model=PropertyAvailabilityOut)
def read_availability(
    property_id: UUID,
    tenant_id: Optional[UUID] = Query(None, description="Tenant being edited"),
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    prop = crud.get_property(db, property_id, owner_id)

    original_room = None
    if tenant_id:
        tenant = tenants_crud.get_tenant(db, tenant_id)
        if tenant.property_id == prop.id and tenant.room_floor is not None and tenant.room_number:
            original_room = RoomRef(floor=tenant.room_floor, room_number=str(tenant.room_number))

    return RoomAvailabilityIndex.from_property(prop, original_room).to_schema()
