import uuid
from sqlalchemy import Column, Date, DateTime, Numeric, String, Text
from sqlalchemy.sql import func
from sqlalchemy.types import Uuid

from shared.core.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(String(64), index=True)
    property_id = Column(Uuid(as_uuid=True), index=True, nullable=False)
    tenant_id = Column(Uuid(as_uuid=True), index=True)
    transaction_type: str = Column(String(16), nullable=False)  # RENT|INCOME|EXPENSE
    transaction_sub_type: str = Column(String(32))
    amount = Column(Numeric(12, 2), nullable=False)
    currency: str = Column(String(8), default="INR")
    status: str = Column(String(16), default="PENDING")  # PENDING|PAID|...
    payment_method = Column(String(32))
    transaction_date = Column(Date)
    paid_date = Column(Date)
    rent_start_date = Column(Date)
    rent_end_date = Column(Date)
    description = Column(Text)
    # one ledger row per outbox task, so retries never double-book
    idempotency_key = Column(String(64), unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
