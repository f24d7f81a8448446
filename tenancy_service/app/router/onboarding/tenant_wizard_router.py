# app/router/onboarding/tenant_wizard_router.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.database import get_tenancy_db as get_db
from shared.core.owner_scope import get_owner_id
from shared.core.schemas import ErrorListOut
from shared.helpers.json_response_helper import success_response, validation_failed_response
from shared.utils.app_status_code import AppStatusCode

from ...crud.onboarding.collaborators import OnboardingCollaborators
from ...crud.onboarding.onboarding_orchestrator import TenantOnboardingOrchestrator
from ...crud.onboarding.wizard_controller import WizardController
from ...schemas.onboarding.wizard_schemas import (
    WizardSelectFloorRequest,
    WizardSelectPropertyRequest,
    WizardSelectRoomRequest,
    WizardStartRequest,
    WizardState,
    WizardStateRequest,
    WizardSubmitRequest,
    WizardUpdateRequest,
)

router = APIRouter(prefix="/api/tenant-wizard", tags=["tenant wizard"])


def _controller(db: Session, owner_id: Optional[str]) -> WizardController:
    collaborators = OnboardingCollaborators.from_session(db)
    return WizardController(collaborators.catalog, collaborators.tenants, owner_id)


def _state_response(state: WizardState, message: str = "Success"):
    if state.errors:
        return validation_failed_response(state)
    return success_response(data=state, message=message,
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.post("/start", response_model=None)
def start_wizard(
    request: WizardStartRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, request.owner_id or owner_id)
    return _state_response(controller.start(request.mode, request.tenant_id))


@router.post("/update", response_model=None)
def update_wizard(
    request: WizardUpdateRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, owner_id)
    return _state_response(controller.update(request.state, request.patch))


@router.post("/select-property", response_model=None)
def select_property(
    request: WizardSelectPropertyRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, request.owner_id or owner_id)
    return _state_response(controller.select_property(request.state, request.property_id))


@router.post("/select-floor", response_model=None)
def select_floor(
    request: WizardSelectFloorRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, owner_id)
    return _state_response(controller.select_floor(request.state, request.floor))


@router.post("/select-room", response_model=None)
def select_room(
    request: WizardSelectRoomRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, owner_id)
    return _state_response(controller.select_room(request.state, request.room_number))


@router.post("/next", response_model=None)
def next_step(
    request: WizardStateRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, owner_id)
    return _state_response(controller.next(request.state))


@router.post("/prev", response_model=None)
def prev_step(
    request: WizardStateRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, owner_id)
    return _state_response(controller.prev(request.state))


@router.post("/validate", response_model=None)
def validate_wizard(
    request: WizardStateRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, owner_id)
    errors = controller.validate_all(request.state)
    if errors:
        return validation_failed_response(ErrorListOut(errors=errors))
    return success_response(data=ErrorListOut(), message="All steps are valid")


@router.post("/submit", response_model=None)
def submit_wizard(
    request: WizardSubmitRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(get_owner_id),
):
    controller = _controller(db, request.owner_id or owner_id)
    orchestrator = TenantOnboardingOrchestrator(db)
    result = controller.submit(request.state, orchestrator)

    action = "updated" if request.state.is_edit else "created"
    message = f"Tenant {action} successfully"
    if result.failed_side_effects:
        message += ", some follow-up updates are pending retry"
    return success_response(
        data=result,
        message=message,
        status_code=AppStatusCode.CREATED_SUCCESSFULLY if action == "created"
        else AppStatusCode.UPDATED_SUCCESSFULLY,
    )
