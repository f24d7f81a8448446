"""Tests for the property catalog and its versioned document writes."""

import uuid

import pytest
from pydantic import ValidationError

from shared.utils.exceptions import ConcurrentUpdateError, EntityNotFoundError
from tenancy_service.app.crud.onboarding.collaborators import PropertyCatalog, PropertyRepository
from tenancy_service.app.crud.property_catalog import properties_crud
from tenancy_service.app.schemas.property_catalog.property_schemas import (
    PropertyDocumentIn,
    PropertyListRequest,
    RoomIn,
)


def _document(version, rooms=None, **fields):
    return PropertyDocumentIn(
        property_name=fields.get("property_name", "Sunrise PG"),
        property_type="PG",
        version=version,
        floors=[{"floor_number": 1, "rooms": rooms or [
            {"room_no": "101", "sharing_option": "DOUBLE", "no_of_beds": 2, "no_of_beds_occupied": 1},
        ]}],
    )


class TestCatalog:

    def test_list_filters_by_owner_and_type(self, db, make_property):
        make_property({1: [("101", 1, 0)]}, name="Alpha PG")
        make_property(property_type="HOSTEL", name="Beta Hostel")

        result = properties_crud.get_all_properties(
            db, PropertyListRequest(owner_id="owner-1", property_type="pg"))

        assert result["total"] == 1
        assert result["properties"][0].property_name == "Alpha PG"
        assert result["properties"][0].floors[0].rooms[0].room_no == "101"
        assert [p.property_name for p in PropertyCatalog(db).list("owner-1")] == ["Alpha PG", "Beta Hostel"]
        assert PropertyCatalog(db).list("someone-else") == []

    def test_get_one_scoped_to_owner(self, db, make_property):
        prop = make_property()

        assert PropertyCatalog(db).get_one(prop.id, "owner-1").id == prop.id
        with pytest.raises(EntityNotFoundError):
            PropertyCatalog(db).get_one(prop.id, "someone-else")
        with pytest.raises(EntityNotFoundError):
            PropertyCatalog(db).get_one(uuid.uuid4())


class TestDocumentWrite:

    def test_write_replaces_rooms_and_bumps_version(self, db, make_property):
        prop = make_property({1: [("101", 1, 0), ("102", 1, 0)]})

        updated = PropertyRepository(db).update(prop.id, _document(1))

        assert updated.version == 2
        assert [r.room_no for r in updated.floors[0].rooms] == ["101"]
        assert updated.floors[0].rooms[0].no_of_beds == 2
        assert updated.floors[0].rooms[0].sharing_option == "DOUBLE"

    def test_stale_version_rejected(self, db, make_property):
        prop = make_property({1: [("101", 1, 0)]})
        repo = PropertyRepository(db)
        repo.update(prop.id, _document(1))

        with pytest.raises(ConcurrentUpdateError) as exc:
            repo.update(prop.id, _document(1, property_name="Overwritten"))

        assert (exc.value.expected_version, exc.value.actual_version) == (1, 2)
        db.expire_all()
        assert properties_crud.get_property(db, prop.id).property_name == "Sunrise PG"

    def test_expected_version_argument_wins(self, db, make_property):
        prop = make_property()

        with pytest.raises(ConcurrentUpdateError):
            PropertyRepository(db).update(prop.id, _document(1), expected_version=7)

    def test_occupied_beyond_capacity_rejected(self):
        with pytest.raises(ValidationError):
            RoomIn(room_no="101", no_of_beds=1, no_of_beds_occupied=2)

    def test_duplicate_room_numbers_rejected(self):
        room = {"room_no": "101"}
        with pytest.raises(ValidationError):
            _document(1, rooms=[room, room])

    def test_sharing_alias_normalized(self):
        assert RoomIn(room_no="1", sharing_option="fourSharing", no_of_beds=4).sharing_option == "FOUR"
