# app/models/property_catalog/properties.py
import uuid
from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import Uuid

from shared.core.database import Base


class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(String(64), nullable=False, index=True)
    property_name = Column(String(128), nullable=False)
    property_type = Column(String(16), nullable=False, default="PG")
    city = Column(String(64))
    # metadata used when no floor rows exist
    total_floors = Column(Integer)
    rooms_per_floor = Column(Integer)
    # optimistic-concurrency token for whole-document writes
    version = Column(Integer, nullable=False, default=1)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    floors = relationship(
        "Floor",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="Floor.floor_number",
    )


class Floor(Base):
    __tablename__ = "property_floors"
    __table_args__ = (
        UniqueConstraint("property_id", "floor_number",
                         name="uq_property_floor_number"),
        CheckConstraint("floor_number >= 0", name="ck_floor_number_positive"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid(as_uuid=True), ForeignKey(
        "properties.id", ondelete="CASCADE"), nullable=False)
    floor_number = Column(Integer, nullable=False)

    property = relationship("Property", back_populates="floors")
    rooms = relationship(
        "Room",
        back_populates="floor",
        cascade="all, delete-orphan",
        order_by="Room.position",
    )


class Room(Base):
    __tablename__ = "property_rooms"
    __table_args__ = (
        UniqueConstraint("floor_id", "room_no", name="uq_floor_room_no"),
        CheckConstraint("no_of_beds >= 1", name="ck_room_beds_min"),
        CheckConstraint(
            "no_of_beds_occupied >= 0 AND no_of_beds_occupied <= no_of_beds",
            name="ck_room_beds_occupied_range"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    floor_id = Column(Uuid(as_uuid=True), ForeignKey(
        "property_floors.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    room_no = Column(String(32), nullable=False)
    room_name = Column(String(64))
    sharing_option = Column(String(16), nullable=False, default="SINGLE")
    no_of_beds = Column(Integer, nullable=False, default=1)
    no_of_beds_occupied = Column(Integer, nullable=False, default=0)
    rent = Column(Numeric(12, 2), default=0)

    floor = relationship("Floor", back_populates="rooms")
    occupants = relationship(
        "RoomOccupant",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="RoomOccupant.assigned_at",
    )

    @property
    def occupied_by(self):
        # most recent assignee, kept for clients that read a single occupant
        return self.occupants[-1] if self.occupants else None


class RoomOccupant(Base):
    __tablename__ = "room_occupants"
    __table_args__ = (
        UniqueConstraint("room_id", "tenant_id", name="uq_room_occupant"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room_id = Column(Uuid(as_uuid=True), ForeignKey(
        "property_rooms.id", ondelete="CASCADE"), nullable=False)
    tenant_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    tenant_name = Column(String(128))
    assigned_at = Column(DateTime(timezone=True), server_default=func.now())

    room = relationship("Room", back_populates="occupants")
