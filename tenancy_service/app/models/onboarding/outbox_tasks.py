import uuid
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.types import JSON, Uuid

from shared.core.database import Base


class OutboxTask(Base):
    __tablename__ = "onboarding_outbox_tasks"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), index=True, nullable=False)
    task_type = Column(String(32), nullable=False)
    # order within one submission
    sequence = Column(Integer, nullable=False, default=0)
    payload = Column(JSON, nullable=False)
    status = Column(String(16), nullable=False, default="PENDING", index=True)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
