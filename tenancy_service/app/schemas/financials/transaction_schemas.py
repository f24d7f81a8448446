from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams


class TransactionCreate(BaseModel):
    owner_id: Optional[str] = None
    property_id: UUID
    tenant_id: Optional[UUID] = None
    transaction_type: str
    transaction_sub_type: Optional[str] = None
    amount: Decimal = Field(..., ge=0)
    currency: str = "INR"
    status: str = "PENDING"
    payment_method: Optional[str] = None
    transaction_date: Optional[date] = None
    paid_date: Optional[date] = None
    rent_start_date: Optional[date] = None
    rent_end_date: Optional[date] = None
    description: Optional[str] = None
    idempotency_key: Optional[str] = None


class TransactionOut(TransactionCreate):
    id: UUID
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TransactionRequest(CommonQueryParams):
    tenant_id: Optional[UUID] = None
    property_id: Optional[UUID] = None
    transaction_type: Optional[str] = None
    status: Optional[str] = None


class TransactionListResponse(BaseModel):
    transactions: List[TransactionOut]
    total: int
