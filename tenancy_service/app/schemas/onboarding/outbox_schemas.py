from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel

from shared.core.schemas import CommonQueryParams


class OutboxTaskOut(BaseModel):
    id: UUID
    tenant_id: UUID
    task_type: str
    sequence: int
    payload: Dict[str, Any]
    status: str
    attempts: int
    last_error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OutboxRequest(CommonQueryParams):
    tenant_id: Optional[UUID] = None
    status: Optional[str] = None


class OutboxListResponse(BaseModel):
    tasks: List[OutboxTaskOut]
    total: int


class OutboxProcessOut(BaseModel):
    processed: int
    succeeded: int
    failed: int
    abandoned: int
