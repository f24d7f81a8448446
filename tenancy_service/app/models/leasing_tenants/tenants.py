# app/models/leasing_tenants/tenants.py
import uuid
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.types import JSON, Uuid

from shared.core.database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(String(64), index=True)
    property_id = Column(Uuid(as_uuid=True), index=True, nullable=False)
    property_name = Column(String(128))

    personal_info = Column(JSON, nullable=False)
    contact_info = Column(JSON, nullable=False)
    education = Column(String(256))
    employment = Column(JSON)
    room_details = Column(JSON, nullable=False)
    financials = Column(JSON, nullable=False)
    lease_details = Column(JSON, nullable=False)
    emergency_contacts = Column(JSON, nullable=False)

    # denormalized for filtering
    full_name = Column(String(256), index=True)
    mobile_number = Column(String(32))
    email = Column(String(256))
    room_floor = Column(Integer)
    room_number = Column(String(32))

    status = Column(String(16), default="PENDING", nullable=False)
    declaration = Column(Boolean, default=False, nullable=False)
    notes = Column(Text)

    # side-effect sync flags maintained by the onboarding outbox
    ledger_synced = Column(Boolean, default=False, nullable=False)
    occupancy_synced = Column(Boolean, default=False, nullable=False)

    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
