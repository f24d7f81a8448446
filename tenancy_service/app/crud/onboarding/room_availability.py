# app/crud/onboarding/room_availability.py
from typing import Dict, List, Optional

from shared.core.config import settings
from ...enum.property_catalog_enum import (
    SHARING_OPTION_BEDS,
    SharingOption,
    normalize_sharing_option,
)
from ...models.property_catalog.properties import Property
from ...schemas.onboarding.room_availability_schemas import (
    FloorAvailabilityOut,
    PropertyAvailabilityOut,
    RoomAvailabilityOut,
)
from ...schemas.onboarding.wizard_schemas import RoomRef


def fallback_grid(total_floors: Optional[int] = None,
                  rooms_per_floor: Optional[int] = None) -> Dict[int, List[RoomAvailabilityOut]]:
    """Room grid for a property that has no floor rows yet.

    Floors run 1..total_floors and rooms are numbered "<floor><nn>". Occupancy
    of these rooms is unknown, so they are reported as empty and unconfigured.
    """
    total_floors = total_floors or settings.FALLBACK_TOTAL_FLOORS
    rooms_per_floor = rooms_per_floor or settings.FALLBACK_ROOMS_PER_FLOOR

    grid = {}
    for floor in range(1, total_floors + 1):
        grid[floor] = []
        for n in range(1, rooms_per_floor + 1):
            room_no = f"{floor}{n:02d}"
            grid[floor].append(RoomAvailabilityOut(
                floor_number=floor,
                room_no=room_no,
                room_name=room_no,
                sharing_option=SharingOption.SINGLE.value,
                capacity=1,
                occupancy=0,
                available_beds=1,
                selectable=True,
                configured=False,
            ))
    return grid


def _capacity(room) -> int:
    if room.no_of_beds:
        return room.no_of_beds
    sharing = normalize_sharing_option(room.sharing_option)
    return SHARING_OPTION_BEDS.get(sharing, 1) if sharing else 1


class RoomAvailabilityIndex:
    """Occupancy-aware view of a property's rooms, keyed by floor number."""

    def __init__(self, property_id, property_type: str,
                 floors: Dict[int, List[RoomAvailabilityOut]], synthesized: bool = False):
        self.property_id = property_id
        self.property_type = (property_type or "").upper()
        self.floors = floors
        self.synthesized = synthesized

    @classmethod
    def from_property(cls, prop: Property, original_room: Optional[RoomRef] = None) -> "RoomAvailabilityIndex":
        floors = {}
        for floor in prop.floors or []:
            entries = []
            for room in floor.rooms:
                capacity = _capacity(room)
                occupancy = room.no_of_beds_occupied or 0
                is_original = bool(original_room) and (
                    original_room.matches(floor.floor_number, room.room_no)
                    or (room.room_name is not None
                        and original_room.matches(floor.floor_number, room.room_name))
                )
                entries.append(RoomAvailabilityOut(
                    room_id=room.id,
                    floor_number=floor.floor_number,
                    room_no=room.room_no,
                    room_name=room.room_name,
                    sharing_option=normalize_sharing_option(room.sharing_option) or "SINGLE",
                    capacity=capacity,
                    occupancy=occupancy,
                    available_beds=max(capacity - occupancy, 0),
                    rent=room.rent,
                    selectable=occupancy < capacity or is_original,
                    is_original_room=is_original,
                ))
            floors[floor.floor_number] = entries

        if not any(floors.values()):
            grid = fallback_grid(prop.total_floors, prop.rooms_per_floor)
            return cls(prop.id, prop.property_type, grid, synthesized=True)

        return cls(prop.id, prop.property_type, floors)

    @property
    def is_pg(self) -> bool:
        return self.property_type == "PG"

    def floor_numbers(self) -> List[int]:
        return sorted(self.floors)

    def rooms_on(self, floor_number) -> List[RoomAvailabilityOut]:
        try:
            return self.floors.get(int(floor_number), [])
        except (TypeError, ValueError):
            return []

    def find(self, floor_number, room_number) -> Optional[RoomAvailabilityOut]:
        if room_number is None:
            return None
        wanted = str(room_number)
        for room in self.rooms_on(floor_number):
            if room.room_no == wanted or room.room_name == wanted:
                return room
        return None

    def floor_summary(self, floor_number: int) -> FloorAvailabilityOut:
        rooms = self.rooms_on(floor_number)
        return FloorAvailabilityOut(
            floor_number=floor_number,
            rooms=rooms,
            available_rooms=sum(1 for r in rooms if r.selectable),
            total_rooms=len(rooms),
        )

    def to_schema(self) -> PropertyAvailabilityOut:
        summaries = [self.floor_summary(f) for f in self.floor_numbers()]
        return PropertyAvailabilityOut(
            property_id=self.property_id,
            property_type=self.property_type,
            synthesized=self.synthesized,
            floors=summaries,
            total_rooms=sum(s.total_rooms for s in summaries),
        )
