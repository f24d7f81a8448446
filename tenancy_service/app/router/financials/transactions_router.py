# app/router/financials/transactions_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.database import get_tenancy_db as get_db
from ...crud.financials import transactions_crud as crud
from ...schemas.financials.transaction_schemas import (
    TransactionListResponse,
    TransactionRequest,
)

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("/", response_model=TransactionListResponse)
def read_transactions(
    params: TransactionRequest = Depends(),
    db: Session = Depends(get_db),
):
    return crud.get_all_transactions(db, params)
