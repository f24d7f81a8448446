# app/router/onboarding/outbox_router.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.database import get_tenancy_db as get_db
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode

from ...crud.onboarding import outbox_crud as crud
from ...schemas.onboarding.outbox_schemas import (
    OutboxListResponse,
    OutboxRequest,
    OutboxTaskOut,
)

router = APIRouter(prefix="/api/onboarding/outbox", tags=["onboarding outbox"])


@router.get("", response_model=OutboxListResponse)
def list_outbox_tasks(
    params: OutboxRequest = Depends(),
    db: Session = Depends(get_db),
):
    return crud.list_tasks(db, params)


@router.post("/process", response_model=None)
def process_outbox(
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    summary = crud.process_pending(db, limit)
    return success_response(
        data=summary,
        message=f"Processed {summary.processed} pending tasks",
        status_code=AppStatusCode.OPERATION_SUCCESSFUL,
    )


@router.post("/{task_id}/abandon", response_model=None)
def abandon_outbox_task(task_id: UUID, db: Session = Depends(get_db)):
    task = crud.abandon_task(db, task_id)
    return success_response(
        data=OutboxTaskOut.model_validate(task),
        message="Task abandoned",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )
