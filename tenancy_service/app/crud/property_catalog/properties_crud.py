# app/crud/property_catalog/properties_crud.py
import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import exists, func
from sqlalchemy.orm import Session, selectinload

from shared.utils.exceptions import (
    ConcurrentUpdateError,
    EntityNotFoundError,
    RoomCapacityError,
    RoomNotFoundError,
)
from ...models.property_catalog.properties import Floor, Property, Room, RoomOccupant
from ...schemas.property_catalog.property_schemas import (
    PropertyDocumentIn,
    PropertyListRequest,
    PropertyOut,
)

logger = logging.getLogger(__name__)


def _with_rooms(query):
    return query.options(
        selectinload(Property.floors)
        .selectinload(Floor.rooms)
        .selectinload(Room.occupants)
    )


# ----------------------------------------------------------------
# Catalog reads
# ----------------------------------------------------------------

def get_all_properties(db: Session, params: PropertyListRequest) -> dict:
    query = db.query(Property).filter(Property.is_deleted == False)

    if params.owner_id:
        query = query.filter(Property.owner_id == params.owner_id)
    if params.property_id:
        query = query.filter(Property.id == params.property_id)
    if params.property_type:
        query = query.filter(
            func.upper(Property.property_type) == params.property_type.upper())
    if params.city:
        query = query.filter(Property.city.ilike(f"%{params.city}%"))
    if params.property_name:
        query = query.filter(
            Property.property_name.ilike(f"%{params.property_name}%"))
    if params.search:
        query = query.filter(Property.property_name.ilike(f"%{params.search}%"))

    total = query.count()

    query = _with_rooms(query).order_by(Property.property_name)
    if params.skip:
        query = query.offset(params.skip)
    if params.limit:
        query = query.limit(params.limit)

    return {
        "properties": [PropertyOut.model_validate(p) for p in query.all()],
        "total": total,
    }


def get_property_by_id(db: Session, property_id: UUID, owner_id: Optional[str] = None) -> Optional[Property]:
    query = db.query(Property).filter(
        Property.id == property_id,
        Property.is_deleted == False,
    )
    if owner_id:
        query = query.filter(Property.owner_id == owner_id)
    return _with_rooms(query).first()


def get_property(db: Session, property_id: UUID, owner_id: Optional[str] = None) -> Property:
    prop = get_property_by_id(db, property_id, owner_id)
    if not prop:
        raise EntityNotFoundError(f"Property {property_id} not found")
    return prop


def find_room(prop: Property, floor_number, room_no) -> Optional[Room]:
    """Locate a room by floor number and room number (or room name)."""
    try:
        floor_number = int(floor_number)
    except (TypeError, ValueError):
        return None

    wanted = str(room_no)
    for floor in prop.floors:
        if floor.floor_number != floor_number:
            continue
        for room in floor.rooms:
            if str(room.room_no) == wanted or (room.room_name and str(room.room_name) == wanted):
                return room
    return None


def require_room(prop: Property, floor_number, room_no) -> Room:
    room = find_room(prop, floor_number, room_no)
    if not room:
        raise RoomNotFoundError(
            f"Room {room_no} on floor {floor_number} not found in property {prop.id}")
    return room


# ----------------------------------------------------------------
# Whole-document write (versioned)
# ----------------------------------------------------------------

def update_property_document(db: Session, property_id: UUID, document: PropertyDocumentIn,
                             owner_id: Optional[str] = None) -> Property:
    """Replace a property's floors and rooms wholesale.

    The write only lands if ``document.version`` still matches the stored
    version; otherwise ConcurrentUpdateError is raised and nothing changes.
    """
    prop = get_property(db, property_id, owner_id)

    bumped = db.query(Property).filter(
        Property.id == property_id,
        Property.version == document.version,
    ).update({
        Property.version: Property.version + 1,
        Property.updated_at: datetime.now(timezone.utc),
    }, synchronize_session=False)

    if bumped == 0:
        db.rollback()
        actual = db.query(Property.version).filter(
            Property.id == property_id).scalar()
        raise ConcurrentUpdateError(property_id, document.version, actual)

    prop.property_name = document.property_name
    prop.property_type = document.property_type.upper()
    prop.city = document.city
    prop.total_floors = document.total_floors
    prop.rooms_per_floor = document.rooms_per_floor

    # drop the old rows first so the unique (property, floor) keys are free
    prop.floors = []
    db.flush()

    now = datetime.now(timezone.utc)
    for floor_in in document.floors:
        floor = Floor(floor_number=floor_in.floor_number)
        for position, room_in in enumerate(floor_in.rooms):
            room = Room(
                position=position,
                room_no=room_in.room_no,
                room_name=room_in.room_name or room_in.room_no,
                sharing_option=room_in.sharing_option,
                no_of_beds=room_in.no_of_beds,
                no_of_beds_occupied=room_in.no_of_beds_occupied,
                rent=room_in.rent,
            )
            for occupant in room_in.occupants[:room_in.no_of_beds]:
                room.occupants.append(RoomOccupant(
                    tenant_id=occupant.tenant_id,
                    tenant_name=occupant.tenant_name,
                    assigned_at=now,
                ))
            floor.rooms.append(room)
        prop.floors.append(floor)

    db.commit()
    db.expire_all()
    logger.info("Property %s rewritten at version %s",
                property_id, document.version + 1)
    return get_property(db, property_id)


# ----------------------------------------------------------------
# Per-room atomic occupancy counters
# ----------------------------------------------------------------

def increment_room_occupancy(db: Session, room: Room, tenant_id: UUID, tenant_name: Optional[str]) -> int:
    """Take one bed in ``room``; fails fast when the room is already full."""
    updated = db.query(Room).filter(
        Room.id == room.id,
        Room.no_of_beds_occupied < Room.no_of_beds,
    ).update({
        Room.no_of_beds_occupied: Room.no_of_beds_occupied + 1,
    }, synchronize_session=False)

    if updated == 0:
        raise RoomCapacityError(
            f"Room {room.room_no} is full. All {room.no_of_beds} beds are occupied.")

    already_listed = db.query(RoomOccupant.id).filter(
        RoomOccupant.room_id == room.id,
        RoomOccupant.tenant_id == tenant_id,
    ).first()
    if already_listed:
        db.query(RoomOccupant).filter(
            RoomOccupant.id == already_listed.id,
        ).update({
            RoomOccupant.tenant_name: tenant_name,
            RoomOccupant.assigned_at: datetime.now(timezone.utc),
        }, synchronize_session=False)
    else:
        db.add(RoomOccupant(
            room_id=room.id,
            tenant_id=tenant_id,
            tenant_name=tenant_name,
            assigned_at=datetime.now(timezone.utc),
        ))
    db.flush()

    return current_room_occupancy(db, room.id)


def decrement_room_occupancy(db: Session, room: Room, tenant_id: UUID) -> Optional[int]:
    """Release the bed ``tenant_id`` holds in ``room``.

    Returns the remaining occupancy, or None when the tenant is not listed as
    an occupant of the room, in which case nothing changes.
    """
    holds_bed = exists().where(
        RoomOccupant.room_id == room.id,
        RoomOccupant.tenant_id == tenant_id,
    )
    updated = db.query(Room).filter(
        Room.id == room.id,
        Room.no_of_beds_occupied > 0,
        holds_bed,
    ).update({
        Room.no_of_beds_occupied: Room.no_of_beds_occupied - 1,
    }, synchronize_session=False)

    if updated == 0:
        return None

    db.query(RoomOccupant).filter(
        RoomOccupant.room_id == room.id,
        RoomOccupant.tenant_id == tenant_id,
    ).delete(synchronize_session=False)
    db.flush()

    return current_room_occupancy(db, room.id)


def ensure_room_occupant(db: Session, room: Room, tenant_id: UUID, tenant_name: Optional[str]) -> None:
    """Record ``tenant_id`` as an occupant without touching the bed count."""
    occupant = db.query(RoomOccupant).filter(
        RoomOccupant.room_id == room.id,
        RoomOccupant.tenant_id == tenant_id,
    ).first()
    if occupant:
        occupant.tenant_name = tenant_name
    else:
        db.add(RoomOccupant(
            room_id=room.id,
            tenant_id=tenant_id,
            tenant_name=tenant_name,
            assigned_at=datetime.now(timezone.utc),
        ))
    db.flush()


def room_has_occupant(db: Session, room_id: UUID, tenant_id: UUID) -> bool:
    return db.query(RoomOccupant.id).filter(
        RoomOccupant.room_id == room_id,
        RoomOccupant.tenant_id == tenant_id,
    ).first() is not None


def current_room_occupancy(db: Session, room_id: UUID) -> int:
    return db.query(Room.no_of_beds_occupied).filter(
        Room.id == room_id).scalar() or 0


def bump_property_version(db: Session, property_id: UUID) -> None:
    db.query(Property).filter(Property.id == property_id).update({
        Property.version: Property.version + 1,
        Property.updated_at: datetime.now(timezone.utc),
    }, synchronize_session=False)
