from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel


class RoomAvailabilityOut(BaseModel):
    room_id: Optional[UUID] = None
    floor_number: int
    room_no: str
    room_name: Optional[str] = None
    sharing_option: str
    capacity: int
    occupancy: int
    available_beds: int
    rent: Optional[Decimal] = None
    selectable: bool
    is_original_room: bool = False
    # False for rooms synthesized from property metadata
    configured: bool = True


class FloorAvailabilityOut(BaseModel):
    floor_number: int
    rooms: List[RoomAvailabilityOut]
    available_rooms: int
    total_rooms: int


class PropertyAvailabilityOut(BaseModel):
    property_id: UUID
    property_type: str
    synthesized: bool
    floors: List[FloorAvailabilityOut]
    total_rooms: int
