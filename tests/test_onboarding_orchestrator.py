"""Tests for tenant onboarding side effects and the outbox."""

import uuid
from decimal import Decimal

import pytest

from shared.utils.exceptions import LedgerError, PersistenceError
from tenancy_service.app.crud.financials.transactions_crud import create_transaction
from tenancy_service.app.crud.onboarding import outbox_crud
from tenancy_service.app.crud.onboarding.collaborators import (
    OnboardingCollaborators,
    TenantRepository,
    TransactionLedger,
)
from tenancy_service.app.crud.onboarding.onboarding_orchestrator import TenantOnboardingOrchestrator
from tenancy_service.app.crud.property_catalog.properties_crud import find_room, get_property
from tenancy_service.app.enum.onboarding_enum import OutboxStatus, OutboxTaskType
from tenancy_service.app.models.financials.transactions import Transaction
from tenancy_service.app.models.leasing_tenants.tenants import Tenant
from tenancy_service.app.models.onboarding.outbox_tasks import OutboxTask
from tenancy_service.app.schemas.financials.transaction_schemas import TransactionCreate
from tenancy_service.app.schemas.leasing_tenants.tenants_schemas import TenantForm


class FailingLedger(TransactionLedger):
    def create(self, data):
        raise LedgerError("ledger service unavailable")


class FailingTenants(TenantRepository):
    def create(self, form, owner_id):
        raise PersistenceError("Failed to create tenant")


@pytest.fixture
def room_202(make_property):
    return make_property({2: [("202", 3, 1, "TRIPLE", [(uuid.uuid4(), "Existing")])]})


def _occupancy(db, property_id, floor, room_no):
    db.expire_all()
    return find_room(get_property(db, property_id), floor, room_no)


def _form(values) -> TenantForm:
    return TenantForm.model_validate(values)


class TestCreate:

    def test_room_202_end_to_end(self, db, room_202, tenant_values, owner_id):
        form = _form(tenant_values(room_202.id, monthly_rent=8000, deposit=15000))

        result = TenantOnboardingOrchestrator(db).create(form, owner_id)

        tenant = db.get(Tenant, result.tenant_id)
        assert tenant.full_name == "Asha Rao"
        assert tenant.ledger_synced is True
        assert tenant.occupancy_synced is True

        rent, deposit = (
            db.query(Transaction).filter(Transaction.tenant_id == tenant.id)
            .order_by(Transaction.transaction_type.desc()).all()
        )
        assert (rent.transaction_type, rent.status, rent.amount) == ("RENT", "PENDING", Decimal("8000"))
        assert rent.transaction_sub_type == "monthly_rent"
        assert rent.description == "Monthly rent for Asha Rao - Room 202"
        assert (deposit.transaction_type, deposit.status, deposit.amount) == ("INCOME", "PAID", Decimal("15000"))
        assert deposit.transaction_sub_type == "security_deposit"
        assert deposit.paid_date is not None

        room = _occupancy(db, room_202.id, 2, "202")
        assert room.no_of_beds_occupied == 2
        assert room.occupied_by.tenant_id == tenant.id
        assert room.occupied_by.tenant_name == "Asha Rao"

        assert [s.task_type for s in result.side_effects] == [
            OutboxTaskType.LEDGER_RENT.value,
            OutboxTaskType.LEDGER_DEPOSIT.value,
            OutboxTaskType.OCCUPANCY_RECONCILE.value,
        ]
        assert all(s.succeeded for s in result.side_effects)

    def test_zero_deposit_books_rent_only(self, db, room_202, tenant_values, owner_id):
        form = _form(tenant_values(room_202.id, deposit=0))

        result = TenantOnboardingOrchestrator(db).create(form, owner_id)

        entries = db.query(Transaction).filter(Transaction.tenant_id == result.tenant_id).all()
        assert [(e.transaction_type, e.status) for e in entries] == [("RENT", "PENDING")]
        assert len(result.side_effects) == 2

    def test_resubmission_creates_second_tenant(self, db, room_202, tenant_values, owner_id):
        values = tenant_values(room_202.id)
        orchestrator = TenantOnboardingOrchestrator(db)

        first = orchestrator.create(_form(values), owner_id)
        second = orchestrator.create(_form(values), owner_id)

        assert first.tenant_id != second.tenant_id
        assert db.query(Tenant).count() == 2
        assert _occupancy(db, room_202.id, 2, "202").no_of_beds_occupied == 3

    def test_tenant_failure_is_fatal(self, db, room_202, tenant_values, owner_id):
        collaborators = OnboardingCollaborators.from_session(db)
        collaborators.tenants = FailingTenants(db)

        with pytest.raises(PersistenceError):
            TenantOnboardingOrchestrator(db, collaborators).create(
                _form(tenant_values(room_202.id)), owner_id)

        assert db.query(Tenant).count() == 0
        assert db.query(OutboxTask).count() == 0
        assert db.query(Transaction).count() == 0
        assert _occupancy(db, room_202.id, 2, "202").no_of_beds_occupied == 1

    def test_ledger_failure_does_not_block_occupancy(self, db, room_202, tenant_values, owner_id):
        collaborators = OnboardingCollaborators.from_session(db)
        collaborators.ledger = FailingLedger(db)

        result = TenantOnboardingOrchestrator(db, collaborators).create(
            _form(tenant_values(room_202.id)), owner_id)

        assert [s.task_type for s in result.failed_side_effects] == [
            OutboxTaskType.LEDGER_RENT.value,
            OutboxTaskType.LEDGER_DEPOSIT.value,
        ]
        assert result.failed_side_effects[0].error == "ledger service unavailable"
        assert result.ledger_synced is False
        assert result.occupancy_synced is True
        assert db.query(Transaction).count() == 0
        assert _occupancy(db, room_202.id, 2, "202").no_of_beds_occupied == 2

    def test_full_room_leaves_occupancy_pending(self, db, make_property, tenant_values, owner_id):
        prop = make_property({1: [("101", 1, 1, "SINGLE")]})
        form = _form(tenant_values(prop.id, floor=1, room_number="101", room_type="SINGLE"))

        result = TenantOnboardingOrchestrator(db).create(form, owner_id)

        assert result.ledger_synced is True
        assert result.occupancy_synced is False
        failed = result.failed_side_effects
        assert len(failed) == 1
        assert "Room 101 is full" in failed[0].error
        assert _occupancy(db, prop.id, 1, "101").no_of_beds_occupied == 1


class TestEdit:

    def test_move_to_other_room(self, db, make_property, tenant_values, owner_id):
        prop = make_property({1: [("101", 3, 1, "TRIPLE"), ("102", 2, 0, "DOUBLE")]})
        orchestrator = TenantOnboardingOrchestrator(db)
        created = orchestrator.create(
            _form(tenant_values(prop.id, floor=1, room_number="101")), owner_id)
        assert _occupancy(db, prop.id, 1, "101").no_of_beds_occupied == 2

        edited = orchestrator.edit(
            created.tenant_id,
            _form(tenant_values(prop.id, floor=1, room_number="102", room_type="DOUBLE")),
            owner_id,
        )

        assert edited.occupancy_synced is True
        assert edited.tenant.room_details["room_number"] == "102"
        assert _occupancy(db, prop.id, 1, "101").no_of_beds_occupied == 1
        room_b = _occupancy(db, prop.id, 1, "102")
        assert room_b.no_of_beds_occupied == 1
        assert room_b.occupied_by.tenant_id == created.tenant_id
        # ledger entries are only booked on creation
        assert db.query(Transaction).count() == 2

    def test_edit_in_place_keeps_count(self, db, room_202, tenant_values, owner_id):
        orchestrator = TenantOnboardingOrchestrator(db)
        created = orchestrator.create(_form(tenant_values(room_202.id)), owner_id)

        values = tenant_values(room_202.id, notes="prefers lower bunk")
        orchestrator.edit(created.tenant_id, _form(values), owner_id)

        assert _occupancy(db, room_202.id, 2, "202").no_of_beds_occupied == 2
        assert db.get(Tenant, created.tenant_id).notes == "prefers lower bunk"

    def test_move_after_failed_assignment(self, db, make_property, tenant_values, owner_id):
        other = uuid.uuid4()
        prop = make_property({1: [
            ("101", 1, 1, "SINGLE", [(other, "Other")]),
            ("102", 1, 0, "SINGLE"),
        ]})
        orchestrator = TenantOnboardingOrchestrator(db)
        created = orchestrator.create(
            _form(tenant_values(prop.id, floor=1, room_number="101", room_type="SINGLE")), owner_id)
        assert created.occupancy_synced is False

        edited = orchestrator.edit(
            created.tenant_id,
            _form(tenant_values(prop.id, floor=1, room_number="102", room_type="SINGLE")),
            owner_id,
        )
        summary = outbox_crud.process_pending(db)

        assert edited.occupancy_synced is True
        assert summary.processed == 0
        room_a = _occupancy(db, prop.id, 1, "101")
        assert room_a.no_of_beds_occupied == 1
        assert [o.tenant_id for o in room_a.occupants] == [other]
        room_b = _occupancy(db, prop.id, 1, "102")
        assert room_b.no_of_beds_occupied == 1
        assert [o.tenant_id for o in room_b.occupants] == [created.tenant_id]

        statuses = {
            t.status for t in db.query(OutboxTask).filter(
                OutboxTask.tenant_id == created.tenant_id,
                OutboxTask.task_type == OutboxTaskType.OCCUPANCY_RECONCILE.value,
            )
        }
        assert statuses == {OutboxStatus.SUPERSEDED.value, OutboxStatus.DONE.value}

    def test_edit_supersedes_abandoned_assignment(self, db, make_property, tenant_values, owner_id):
        prop = make_property({1: [("101", 1, 1, "SINGLE"), ("102", 2, 0, "DOUBLE")]})
        orchestrator = TenantOnboardingOrchestrator(db, max_attempts=1)
        created = orchestrator.create(
            _form(tenant_values(prop.id, floor=1, room_number="101", room_type="SINGLE")), owner_id)
        abandoned = created.failed_side_effects[0]
        assert outbox_crud.get_task(db, abandoned.task_id).status == OutboxStatus.ABANDONED.value

        edited = orchestrator.edit(
            created.tenant_id,
            _form(tenant_values(prop.id, floor=1, room_number="102", room_type="DOUBLE")),
            owner_id,
        )

        assert edited.occupancy_synced is True
        assert outbox_crud.get_task(db, abandoned.task_id).status == OutboxStatus.SUPERSEDED.value
        assert _occupancy(db, prop.id, 1, "101").no_of_beds_occupied == 1
        assert _occupancy(db, prop.id, 1, "102").no_of_beds_occupied == 1

    def test_move_result_reports_rooms(self, db, make_property, tenant_values, owner_id):
        prop = make_property({1: [("101", 2, 0, "DOUBLE"), ("102", 2, 0, "DOUBLE")]})
        orchestrator = TenantOnboardingOrchestrator(db)
        created = orchestrator.create(
            _form(tenant_values(prop.id, floor=1, room_number="101", room_type="DOUBLE")), owner_id)

        edited = orchestrator.edit(
            created.tenant_id,
            _form(tenant_values(prop.id, floor=1, room_number="102", room_type="DOUBLE")),
            owner_id,
        )

        occupancy = edited.side_effects[0].occupancy
        assert (occupancy.room.room_number, occupancy.occupancy) == ("102", 1)
        assert (occupancy.vacated.room_number, occupancy.vacated_occupancy) == ("101", 0)


class TestOutbox:

    def test_retry_closes_ledger_gap(self, db, room_202, tenant_values, owner_id):
        collaborators = OnboardingCollaborators.from_session(db)
        collaborators.ledger = FailingLedger(db)
        result = TenantOnboardingOrchestrator(db, collaborators).create(
            _form(tenant_values(room_202.id)), owner_id)

        summary = outbox_crud.process_pending(db)

        assert (summary.processed, summary.succeeded, summary.failed) == (2, 2, 0)
        tenant = db.get(Tenant, result.tenant_id)
        assert tenant.ledger_synced is True
        assert db.query(Transaction).count() == 2
        tasks = db.query(OutboxTask).filter(OutboxTask.tenant_id == tenant.id).all()
        assert {t.status for t in tasks} == {OutboxStatus.DONE.value}
        rent_task = next(t for t in tasks if t.task_type == OutboxTaskType.LEDGER_RENT.value)
        assert rent_task.attempts == 2

    def test_task_abandoned_after_max_attempts(self, db, room_202, tenant_values, owner_id):
        collaborators = OnboardingCollaborators.from_session(db)
        collaborators.ledger = FailingLedger(db)
        orchestrator = TenantOnboardingOrchestrator(db, collaborators, max_attempts=2)
        result = orchestrator.create(_form(tenant_values(room_202.id, deposit=0)), owner_id)

        summary = orchestrator.runner.process_pending()

        assert (summary.failed, summary.abandoned) == (1, 1)
        task = db.query(OutboxTask).filter(
            OutboxTask.task_type == OutboxTaskType.LEDGER_RENT.value).one()
        assert task.status == OutboxStatus.ABANDONED.value
        assert task.attempts == 2
        assert task.last_error == "ledger service unavailable"
        assert db.get(Tenant, result.tenant_id).ledger_synced is False
        assert outbox_crud.process_pending(db).processed == 0

    def test_abandon_pending_task(self, db, room_202, tenant_values, owner_id):
        collaborators = OnboardingCollaborators.from_session(db)
        collaborators.ledger = FailingLedger(db)
        result = TenantOnboardingOrchestrator(db, collaborators).create(
            _form(tenant_values(room_202.id, deposit=0)), owner_id)
        task_id = result.failed_side_effects[0].task_id

        task = outbox_crud.abandon_task(db, task_id)

        assert task.status == OutboxStatus.ABANDONED.value
        assert outbox_crud.process_pending(db).processed == 0

    def test_ledger_entries_are_idempotent(self, db, room_202):
        data = TransactionCreate(
            property_id=room_202.id,
            transaction_type="RENT",
            amount=Decimal("8000"),
            idempotency_key="task-1",
        )

        first = create_transaction(db, data)
        second = create_transaction(db, data)
        db.commit()

        assert first.id == second.id
        assert db.query(Transaction).count() == 1
