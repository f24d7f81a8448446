# app/crud/onboarding/outbox_crud.py
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.schemas import JsonOutResult
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.exceptions import EntityNotFoundError, SideEffectFailure
from ...enum.financials_enum import TransactionStatus, TransactionSubType, TransactionType
from ...enum.onboarding_enum import (
    LEDGER_TASK_TYPES,
    SETTLED_STATUSES,
    OutboxStatus,
    OutboxTaskType,
)
from ...models.leasing_tenants.tenants import Tenant
from ...models.onboarding.outbox_tasks import OutboxTask
from ...schemas.financials.transaction_schemas import TransactionCreate
from ...schemas.leasing_tenants.tenants_schemas import TenantForm
from ...schemas.onboarding.outbox_schemas import (
    OutboxListResponse,
    OutboxProcessOut,
    OutboxRequest,
    OutboxTaskOut,
)
from ...schemas.onboarding.wizard_schemas import RoomRef, SideEffectOutcome
from .collaborators import OnboardingCollaborators
from .occupancy_reconciler import OccupancyReconciler

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------
# Enqueue
# ----------------------------------------------------------------

def _new_task(tenant_id: UUID, task_type: OutboxTaskType, sequence: int, payload: dict) -> OutboxTask:
    now = datetime.now(timezone.utc)
    return OutboxTask(
        tenant_id=tenant_id,
        task_type=task_type.value,
        sequence=sequence,
        payload=payload,
        status=OutboxStatus.PENDING.value,
        attempts=0,
        created_at=now,
        updated_at=now,
    )


def _occupancy_payload(tenant: Tenant, form: TenantForm,
                       old_room: Optional[RoomRef] = None,
                       old_property_id: Optional[UUID] = None) -> dict:
    return {
        "property_id": str(form.property_id),
        "new_room": {
            "floor": form.room_details.floor,
            "room_number": form.room_details.room_number,
        },
        "old_room": old_room.model_dump() if old_room else None,
        "old_property_id": str(old_property_id) if old_property_id else None,
        "tenant_id": str(tenant.id),
        "tenant_name": form.full_name,
    }


def enqueue_creation_tasks(db: Session, tenant: Tenant, form: TenantForm,
                           owner_id: Optional[str]) -> List[OutboxTask]:
    """Stage rent, deposit (when non-zero) and occupancy tasks for a new tenant."""
    today = date.today()
    name = form.full_name
    room_number = form.room_details.room_number
    payment_method = form.financials.payment_method or settings.DEFAULT_PAYMENT_METHOD

    tasks = []
    rent = TransactionCreate(
        owner_id=owner_id,
        property_id=form.property_id,
        tenant_id=tenant.id,
        transaction_type=TransactionType.RENT.value,
        transaction_sub_type=TransactionSubType.MONTHLY_RENT.value,
        amount=form.financials.monthly_rent,
        currency=settings.DEFAULT_CURRENCY,
        status=TransactionStatus.PENDING.value,
        payment_method=payment_method,
        transaction_date=today,
        rent_start_date=form.lease_details.lease_start_date,
        rent_end_date=form.lease_details.lease_end_date,
        description=f"Monthly rent for {name} - Room {room_number}",
    )
    tasks.append(_new_task(tenant.id, OutboxTaskType.LEDGER_RENT, len(tasks),
                           rent.model_dump(mode="json")))

    if form.financials.deposit and form.financials.deposit > 0:
        deposit = TransactionCreate(
            owner_id=owner_id,
            property_id=form.property_id,
            tenant_id=tenant.id,
            transaction_type=TransactionType.INCOME.value,
            transaction_sub_type=TransactionSubType.SECURITY_DEPOSIT.value,
            amount=form.financials.deposit,
            currency=settings.DEFAULT_CURRENCY,
            status=TransactionStatus.PAID.value,
            payment_method=payment_method,
            transaction_date=today,
            paid_date=today,
            description=f"Security deposit from {name} - Room {room_number}",
        )
        tasks.append(_new_task(tenant.id, OutboxTaskType.LEDGER_DEPOSIT, len(tasks),
                               deposit.model_dump(mode="json")))

    # occupancy always runs last
    tasks.append(_new_task(tenant.id, OutboxTaskType.OCCUPANCY_RECONCILE, len(tasks),
                           _occupancy_payload(tenant, form)))

    db.add_all(tasks)
    db.flush()
    return tasks


def supersede_occupancy_tasks(db: Session, tenant_id: UUID) -> int:
    """Retire a tenant's unfinished occupancy tasks before a newer one is queued.

    A PENDING task retried after the tenant moved would take a bed in the
    room they left. Flushes only; the caller commits.
    """
    superseded = db.query(OutboxTask).filter(
        OutboxTask.tenant_id == tenant_id,
        OutboxTask.task_type == OutboxTaskType.OCCUPANCY_RECONCILE.value,
        OutboxTask.status.in_([OutboxStatus.PENDING.value, OutboxStatus.ABANDONED.value]),
    ).update({
        OutboxTask.status: OutboxStatus.SUPERSEDED.value,
        OutboxTask.updated_at: datetime.now(timezone.utc),
    }, synchronize_session=False)
    db.flush()
    if superseded:
        logger.info("Superseded %d occupancy task(s) for tenant %s", superseded, tenant_id)
    return superseded


def enqueue_move_task(db: Session, tenant: Tenant, form: TenantForm,
                      old_room: Optional[RoomRef], old_property_id: Optional[UUID]) -> OutboxTask:
    task = _new_task(tenant.id, OutboxTaskType.OCCUPANCY_RECONCILE, 0,
                     _occupancy_payload(tenant, form, old_room, old_property_id))
    db.add(task)
    db.flush()
    return task


# ----------------------------------------------------------------
# Queries
# ----------------------------------------------------------------

def list_tasks(db: Session, params: OutboxRequest) -> OutboxListResponse:
    query = db.query(OutboxTask)
    if params.tenant_id:
        query = query.filter(OutboxTask.tenant_id == params.tenant_id)
    if params.status and params.status.lower() != "all":
        query = query.filter(OutboxTask.status == params.status.upper())

    total = query.count()
    query = query.order_by(OutboxTask.created_at, OutboxTask.sequence)
    if params.skip:
        query = query.offset(params.skip)
    if params.limit:
        query = query.limit(params.limit)

    return OutboxListResponse(
        tasks=[OutboxTaskOut.model_validate(t) for t in query.all()],
        total=total,
    )


def get_task(db: Session, task_id: UUID) -> OutboxTask:
    task = db.get(OutboxTask, task_id)
    if not task:
        raise EntityNotFoundError(f"Outbox task {task_id} not found")
    return task


def abandon_task(db: Session, task_id: UUID) -> Union[OutboxTask, JsonOutResult]:
    task = get_task(db, task_id)
    if task.status in (OutboxStatus.DONE.value, OutboxStatus.SUPERSEDED.value):
        return error_response(
            "Completed tasks cannot be abandoned",
            status_code=AppStatusCode.INVALID_INPUT,
        )

    task.status = OutboxStatus.ABANDONED.value
    task.updated_at = datetime.now(timezone.utc)
    db.commit()
    refresh_sync_flags(db, task.tenant_id)
    logger.warning("Outbox task %s (%s) abandoned for tenant %s",
                   task.id, task.task_type, task.tenant_id)
    db.refresh(task)
    return task


def refresh_sync_flags(db: Session, tenant_id: UUID) -> Optional[Tenant]:
    """Recompute a tenant's ledger/occupancy sync flags from its outbox tasks."""
    tenant = db.get(Tenant, tenant_id)
    if not tenant:
        return None

    open_types = {
        task_type for (task_type,) in db.query(OutboxTask.task_type).filter(
            OutboxTask.tenant_id == tenant_id,
            OutboxTask.status.notin_([s.value for s in SETTLED_STATUSES]),
        ).distinct()
    }
    ledger_types = {t.value for t in LEDGER_TASK_TYPES}

    tenant.ledger_synced = not (open_types & ledger_types)
    tenant.occupancy_synced = OutboxTaskType.OCCUPANCY_RECONCILE.value not in open_types
    db.commit()
    db.refresh(tenant)
    return tenant


# ----------------------------------------------------------------
# Execution
# ----------------------------------------------------------------

class OutboxRunner:
    """Executes outbox tasks; each effect commits together with its task status."""

    def __init__(self, db: Session, collaborators: Optional[OnboardingCollaborators] = None,
                 max_attempts: Optional[int] = None):
        self.db = db
        self.collaborators = collaborators or OnboardingCollaborators.from_session(db)
        self.reconciler = OccupancyReconciler(
            self.collaborators.catalog, self.collaborators.properties)
        self.max_attempts = max_attempts or settings.OUTBOX_MAX_ATTEMPTS

    def _apply(self, task: OutboxTask) -> Dict[str, Any]:
        payload = task.payload or {}

        if task.task_type in (t.value for t in LEDGER_TASK_TYPES):
            data = TransactionCreate.model_validate(
                {**payload, "idempotency_key": str(task.id)})
            transaction = self.collaborators.ledger.create(data)
            return {"result_id": str(transaction.id)}

        if task.task_type == OutboxTaskType.OCCUPANCY_RECONCILE.value:
            old_room = payload.get("old_room")
            old_property_id = payload.get("old_property_id")
            occupancy = self.reconciler.reconcile(
                property_id=UUID(payload["property_id"]),
                new_room=RoomRef(**payload["new_room"]),
                tenant_id=UUID(payload["tenant_id"]),
                tenant_name=payload.get("tenant_name"),
                old_room=RoomRef(**old_room) if old_room else None,
                old_property_id=UUID(old_property_id) if old_property_id else None,
            )
            return {"occupancy": occupancy}

        raise SideEffectFailure(f"Unknown outbox task type {task.task_type}")

    def execute(self, task: OutboxTask) -> SideEffectOutcome:
        task_id, task_type, tenant_id = task.id, task.task_type, task.tenant_id

        if task.status != OutboxStatus.PENDING.value:
            return SideEffectOutcome(
                task_id=task_id,
                task_type=task_type,
                succeeded=task.status == OutboxStatus.DONE.value,
                error=task.last_error,
            )

        try:
            details = self._apply(task)
            task.status = OutboxStatus.DONE.value
            task.attempts = (task.attempts or 0) + 1
            task.last_error = None
            task.updated_at = datetime.now(timezone.utc)
            self.db.commit()
        except (SideEffectFailure, SQLAlchemyError) as e:
            self.db.rollback()
            logger.exception("Outbox task %s (%s) failed for tenant %s",
                             task_id, task_type, tenant_id)
            self._record_failure(task_id, e)
            return SideEffectOutcome(
                task_id=task_id, task_type=task_type, succeeded=False, error=str(e))

        return SideEffectOutcome(
            task_id=task_id, task_type=task_type, succeeded=True, **details)

    def _record_failure(self, task_id: UUID, error: Exception) -> None:
        task = self.db.get(OutboxTask, task_id)
        task.attempts = (task.attempts or 0) + 1
        task.last_error = str(error)
        task.updated_at = datetime.now(timezone.utc)
        if task.attempts >= self.max_attempts:
            task.status = OutboxStatus.ABANDONED.value
            logger.error("Outbox task %s abandoned after %d attempts",
                         task_id, task.attempts)
        self.db.commit()

    def run(self, task_ids: Iterable[UUID]) -> List[SideEffectOutcome]:
        outcomes = []
        for task_id in task_ids:
            outcomes.append(self.execute(get_task(self.db, task_id)))
        return outcomes

    def process_pending(self, limit: Optional[int] = None) -> OutboxProcessOut:
        query = self.db.query(OutboxTask.id).filter(
            OutboxTask.status == OutboxStatus.PENDING.value,
        ).order_by(OutboxTask.created_at, OutboxTask.sequence)
        if limit:
            query = query.limit(limit)
        task_ids = [task_id for (task_id,) in query.all()]

        summary = OutboxProcessOut(processed=0, succeeded=0, failed=0, abandoned=0)
        tenants = set()
        for task_id in task_ids:
            outcome = self.execute(get_task(self.db, task_id))
            summary.processed += 1
            if outcome.succeeded:
                summary.succeeded += 1
            else:
                summary.failed += 1
                if get_task(self.db, task_id).status == OutboxStatus.ABANDONED.value:
                    summary.abandoned += 1
            tenants.add(get_task(self.db, task_id).tenant_id)

        for tenant_id in tenants:
            refresh_sync_flags(self.db, tenant_id)

        logger.info("Outbox run: %s", summary.model_dump())
        return summary


def process_pending(db: Session, limit: Optional[int] = None,
                    collaborators: Optional[OnboardingCollaborators] = None) -> OutboxProcessOut:
    return OutboxRunner(db, collaborators).process_pending(limit)
