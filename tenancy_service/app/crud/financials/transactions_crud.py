# app/crud/financials/transactions_crud.py
from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session

from ...models.financials.transactions import Transaction
from ...schemas.financials.transaction_schemas import (
    TransactionCreate,
    TransactionListResponse,
    TransactionOut,
    TransactionRequest,
)


def get_all_transactions(db: Session, params: TransactionRequest) -> TransactionListResponse:
    query = db.query(Transaction)

    if params.tenant_id:
        query = query.filter(Transaction.tenant_id == params.tenant_id)
    if params.property_id:
        query = query.filter(Transaction.property_id == params.property_id)
    if params.transaction_type:
        query = query.filter(
            func.upper(Transaction.transaction_type) == params.transaction_type.upper())
    if params.status and params.status.lower() != "all":
        query = query.filter(
            func.upper(Transaction.status) == params.status.upper())
    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(
            or_(
                Transaction.description.ilike(search_term),
                Transaction.transaction_sub_type.ilike(search_term),
            )
        )

    total = query.count()
    query = query.order_by(desc(Transaction.created_at))
    if params.skip:
        query = query.offset(params.skip)
    if params.limit:
        query = query.limit(params.limit)

    return TransactionListResponse(
        transactions=[TransactionOut.model_validate(t) for t in query.all()],
        total=total,
    )


def create_transaction(db: Session, data: TransactionCreate) -> Transaction:
    """Stage a ledger row; a repeated idempotency key returns the existing row."""
    if data.idempotency_key:
        existing = db.query(Transaction).filter(
            Transaction.idempotency_key == data.idempotency_key
        ).first()
        if existing:
            return existing

    transaction = Transaction(**data.model_dump())
    db.add(transaction)
    db.flush()
    return transaction
