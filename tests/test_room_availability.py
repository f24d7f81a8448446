"""Tests for the room availability index."""

import uuid

from tenancy_service.app.crud.onboarding.room_availability import (
    RoomAvailabilityIndex,
    fallback_grid,
)
from tenancy_service.app.schemas.onboarding.wizard_schemas import RoomRef


class TestConfiguredProperty:

    def test_index_reflects_rooms(self, make_property):
        prop = make_property({
            1: [("101", 2, 2, "DOUBLE"), ("102", 3, 1, "TRIPLE")],
            2: [("201", 1, 0)],
        })

        index = RoomAvailabilityIndex.from_property(prop)

        assert index.floor_numbers() == [1, 2]
        assert index.synthesized is False
        full, partial = index.rooms_on(1)
        assert (full.capacity, full.occupancy, full.selectable) == (2, 2, False)
        assert (partial.available_beds, partial.selectable) == (2, True)
        assert partial.sharing_option == "TRIPLE"
        assert index.floor_summary(1).available_rooms == 1
        assert index.floor_summary(1).total_rooms == 2

    def test_original_room_stays_selectable(self, make_property):
        prop = make_property({1: [("101", 2, 2, "DOUBLE")]})

        index = RoomAvailabilityIndex.from_property(prop, RoomRef(floor=1, room_number="101"))
        room = index.find(1, "101")

        assert room.selectable is True
        assert room.is_original_room is True

    def test_find_by_room_name_and_string_floor(self, make_property):
        prop = make_property({3: [("301", 1, 0)]})
        index = RoomAvailabilityIndex.from_property(prop)

        assert index.find("3", "301").room_no == "301"
        assert index.find(3, "999") is None
        assert index.find("x", "301") is None


class TestFallbackGrid:

    def test_grid_from_metadata(self, make_property):
        prop = make_property(property_type="HOSTEL", total_floors=2, rooms_per_floor=4)

        index = RoomAvailabilityIndex.from_property(prop)

        assert index.synthesized is True
        assert index.floor_numbers() == [1, 2]
        assert [r.room_no for r in index.rooms_on(2)] == ["201", "202", "203", "204"]

    def test_defaults_are_deterministic(self):
        first = fallback_grid()
        second = fallback_grid()

        assert first == second
        assert sorted(first) == [1, 2, 3]
        assert len(first[1]) == 10
        assert first[1][0].room_no == "101"
        assert first[3][9].room_no == "310"
        for rooms in first.values():
            for room in rooms:
                assert room.occupancy == 0
                assert room.capacity == 1
                assert room.sharing_option == "SINGLE"
                assert room.configured is False
                assert room.selectable is True

    def test_to_schema(self):
        index = RoomAvailabilityIndex(uuid.uuid4(), "pg", fallback_grid(1, 2), synthesized=True)
        schema = index.to_schema()

        assert schema.property_type == "PG"
        assert schema.total_rooms == 2
        assert schema.floors[0].available_rooms == 2
