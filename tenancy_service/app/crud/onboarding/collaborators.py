# app/crud/onboarding/collaborators.py
"""Storage-facing collaborators used by the wizard and the onboarding flow.

Each wraps the module-level crud functions over one Session so the flow can
be exercised against substitutes (a ledger that always fails, for example).
None of them commit: the caller owns the transaction.
"""
import logging
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.utils.exceptions import LedgerError, PersistenceError
from ..financials import transactions_crud
from ..leasing_tenants import tenants_crud
from ..property_catalog import properties_crud
from ...models.financials.transactions import Transaction
from ...models.leasing_tenants.tenants import Tenant
from ...models.property_catalog.properties import Property, Room
from ...schemas.financials.transaction_schemas import TransactionCreate
from ...schemas.leasing_tenants.tenants_schemas import (
    TenantForm,
    TenantListResponse,
    TenantRequest,
)
from ...schemas.property_catalog.property_schemas import (
    PropertyDocumentIn,
    PropertyListRequest,
)

logger = logging.getLogger(__name__)


class PropertyCatalog:
    def __init__(self, db: Session):
        self.db = db

    def list(self, owner_id: Optional[str] = None) -> List[Property]:
        query = self.db.query(Property).filter(Property.is_deleted == False)
        if owner_id:
            query = query.filter(Property.owner_id == owner_id)
        return query.order_by(Property.property_name).all()

    def get_one(self, property_id: UUID, owner_id: Optional[str] = None) -> Property:
        return properties_crud.get_property(self.db, property_id, owner_id)

    def search(self, params: PropertyListRequest) -> dict:
        return properties_crud.get_all_properties(self.db, params)


class PropertyRepository:
    def __init__(self, db: Session):
        self.db = db

    def update(self, property_id: UUID, document: PropertyDocumentIn,
               expected_version: Optional[int] = None) -> Property:
        if expected_version is not None:
            document = document.model_copy(update={"version": expected_version})
        return properties_crud.update_property_document(self.db, property_id, document)

    def find_room(self, prop: Property, floor_number, room_no) -> Room:
        return properties_crud.require_room(prop, floor_number, room_no)

    def increment_occupancy(self, room: Room, tenant_id: UUID, tenant_name: Optional[str]) -> int:
        return properties_crud.increment_room_occupancy(self.db, room, tenant_id, tenant_name)

    def decrement_occupancy(self, room: Room, tenant_id: UUID) -> Optional[int]:
        return properties_crud.decrement_room_occupancy(self.db, room, tenant_id)

    def holds_bed(self, room: Room, tenant_id: UUID) -> bool:
        return properties_crud.room_has_occupant(self.db, room.id, tenant_id)

    def ensure_occupant(self, room: Room, tenant_id: UUID, tenant_name: Optional[str]) -> None:
        properties_crud.ensure_room_occupant(self.db, room, tenant_id, tenant_name)

    def touch(self, property_id: UUID) -> None:
        properties_crud.bump_property_version(self.db, property_id)


class TenantRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, tenant_id: UUID) -> Tenant:
        return tenants_crud.get_tenant(self.db, tenant_id)

    def list(self, params: TenantRequest) -> TenantListResponse:
        return tenants_crud.get_all_tenants(self.db, params)

    def create(self, form: TenantForm, owner_id: Optional[str]) -> Tenant:
        try:
            return tenants_crud.create_tenant(self.db, form, owner_id)
        except SQLAlchemyError as e:
            logger.error("Tenant insert failed: %s", e)
            raise PersistenceError("Failed to create tenant") from e

    def update(self, tenant_id: UUID, form: TenantForm) -> Tenant:
        try:
            return tenants_crud.update_tenant(self.db, tenant_id, form)
        except SQLAlchemyError as e:
            logger.error("Tenant %s update failed: %s", tenant_id, e)
            raise PersistenceError("Failed to update tenant") from e


class TransactionLedger:
    def __init__(self, db: Session):
        self.db = db

    def create(self, data: TransactionCreate) -> Transaction:
        try:
            return transactions_crud.create_transaction(self.db, data)
        except SQLAlchemyError as e:
            raise LedgerError(
                f"Failed to record {data.transaction_type} transaction: {e}") from e


class OnboardingCollaborators(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    catalog: PropertyCatalog
    properties: PropertyRepository
    tenants: TenantRepository
    ledger: TransactionLedger

    @classmethod
    def from_session(cls, db: Session) -> "OnboardingCollaborators":
        return cls(
            catalog=PropertyCatalog(db),
            properties=PropertyRepository(db),
            tenants=TenantRepository(db),
            ledger=TransactionLedger(db),
        )
