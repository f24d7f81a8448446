# app/crud/onboarding/onboarding_orchestrator.py
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.utils.exceptions import PersistenceError
from ...enum.onboarding_enum import WizardMode
from ...schemas.leasing_tenants.tenants_schemas import TenantForm, TenantOut
from ...schemas.onboarding.wizard_schemas import OnboardingResult, RoomRef, SideEffectOutcome
from . import outbox_crud
from .collaborators import OnboardingCollaborators

logger = logging.getLogger(__name__)


class TenantOnboardingOrchestrator:
    """Sequences the writes behind a wizard submission.

    The tenant row and its outbox tasks are committed together; that commit
    is the only fatal step. Ledger entries and the occupancy update then run
    in order as outbox tasks, and a failing task is left for a later retry
    instead of failing the submission.
    """

    def __init__(self, db: Session, collaborators: Optional[OnboardingCollaborators] = None,
                 max_attempts: Optional[int] = None):
        self.db = db
        self.collaborators = collaborators or OnboardingCollaborators.from_session(db)
        self.runner = outbox_crud.OutboxRunner(db, self.collaborators, max_attempts)

    def create(self, form: TenantForm, owner_id: Optional[str] = None) -> OnboardingResult:
        try:
            tenant = self.collaborators.tenants.create(form, owner_id)
            tasks = outbox_crud.enqueue_creation_tasks(self.db, tenant, form, owner_id)
            tenant_id = tenant.id
            task_ids = [t.id for t in tasks]
            self.db.commit()
        except PersistenceError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Tenant create failed: %s", e)
            raise PersistenceError("Failed to create tenant") from e

        logger.info("Tenant %s created with %d pending side effects",
                    tenant_id, len(task_ids))
        outcomes = self.runner.run(task_ids)
        return self._result(tenant_id, WizardMode.create, outcomes)

    def edit(self, tenant_id: UUID, form: TenantForm, owner_id: Optional[str] = None) -> OnboardingResult:
        existing = self.collaborators.tenants.get(tenant_id)
        old_room = None
        if existing.room_floor is not None and existing.room_number:
            old_room = RoomRef(floor=existing.room_floor, room_number=str(existing.room_number))
        old_property_id = existing.property_id

        try:
            tenant = self.collaborators.tenants.update(tenant_id, form)
            outbox_crud.supersede_occupancy_tasks(self.db, tenant_id)
            task = outbox_crud.enqueue_move_task(
                self.db, tenant, form, old_room, old_property_id)
            task_id = task.id
            self.db.commit()
        except PersistenceError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Tenant %s update failed: %s", tenant_id, e)
            raise PersistenceError("Failed to update tenant") from e

        outcomes = self.runner.run([task_id])
        return self._result(tenant_id, WizardMode.edit, outcomes)

    def _result(self, tenant_id: UUID, mode: WizardMode,
                outcomes: List[SideEffectOutcome]) -> OnboardingResult:
        tenant = outbox_crud.refresh_sync_flags(self.db, tenant_id)

        for outcome in outcomes:
            if not outcome.succeeded:
                logger.warning("Tenant %s saved but %s did not complete: %s",
                               tenant_id, outcome.task_type, outcome.error)

        return OnboardingResult(
            tenant_id=tenant_id,
            mode=mode,
            tenant=TenantOut.model_validate(tenant),
            side_effects=outcomes,
            ledger_synced=tenant.ledger_synced,
            occupancy_synced=tenant.occupancy_synced,
        )
