# app/router/leasing_tenants/tenants_router.py
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.database import get_tenancy_db as get_db
from shared.core.owner_scope import get_owner_id
from shared.core.schemas import Lookup
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

from ...crud.leasing_tenants import tenants_crud as crud
from ...schemas.leasing_tenants.tenants_schemas import (
    TenantListResponse,
    TenantOut,
    TenantRequest,
)

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


@router.get("/all", response_model=TenantListResponse)
def tenants_all(
    params: TenantRequest = Depends(),
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    if owner_id and not params.owner_id:
        params.owner_id = owner_id
    return crud.get_all_tenants(db, params)


@router.get("/status-lookup", response_model=List[Lookup])
def tenant_status_lookup(db: Session = Depends(get_db)):
    return crud.tenant_status_lookup(db)


@router.get("/{tenant_id}", response_model=TenantOut)
def read_tenant(tenant_id: UUID, db: Session = Depends(get_db)):
    tenant = crud.get_tenant_by_id(db, tenant_id)
    if not tenant:
        return error_response("Tenant not found", AppStatusCode.NOT_FOUND, 404)
    return tenant
