"""Pytest configuration and fixtures."""

import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OUTBOX_RETRY_INTERVAL_SECONDS", "0")

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.core.database import Base, get_tenancy_db
from tenancy_service.app.main import app
from tenancy_service.app.models.property_catalog.properties import (
    Floor,
    Property,
    Room,
    RoomOccupant,
)

OWNER_ID = "owner-1"
ASSIGNED_SINCE = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_tenancy_db] = override_get_db
    with TestClient(app) as test_client:
        test_client.headers.update({"X-Owner-Id": OWNER_ID})
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def make_property(db):
    """Seed a property.

    ``floors`` maps floor number to a list of room tuples:
    ``(room_no, beds, occupied)`` or ``(room_no, beds, occupied, sharing, occupants)``
    where ``occupants`` is a list of ``(tenant_id, tenant_name)``.
    """

    def _make(floors=None, property_type="PG", name="Sunrise PG", **meta):
        prop = Property(
            owner_id=OWNER_ID,
            property_name=name,
            property_type=property_type,
            city="Bengaluru",
            **meta,
        )
        for floor_number, rooms in (floors or {}).items():
            floor = Floor(floor_number=floor_number)
            for position, entry in enumerate(rooms):
                room_no, beds, occupied = entry[:3]
                sharing = entry[3] if len(entry) > 3 else "SINGLE"
                occupants = entry[4] if len(entry) > 4 else []
                room = Room(
                    position=position,
                    room_no=room_no,
                    room_name=room_no,
                    sharing_option=sharing,
                    no_of_beds=beds,
                    no_of_beds_occupied=occupied,
                    rent=Decimal("8000"),
                )
                for i, (tenant_id, tenant_name) in enumerate(occupants):
                    room.occupants.append(RoomOccupant(
                        tenant_id=tenant_id,
                        tenant_name=tenant_name,
                        assigned_at=ASSIGNED_SINCE + timedelta(days=i),
                    ))
                floor.rooms.append(room)
            prop.floors.append(floor)
        db.add(prop)
        db.commit()
        return prop

    return _make


@pytest.fixture
def tenant_values():
    """Complete, valid wizard values for a new tenant."""

    def _values(property_id, floor=2, room_number="202", room_type="TRIPLE",
                monthly_rent=8000, deposit=15000, **overrides):
        start = date.today() + timedelta(days=1)
        values = {
            "personal_info": {
                "first_name": "Asha",
                "last_name": "Rao",
                "father_first_name": "Mohan",
                "father_last_name": "Rao",
                "gender": "FEMALE",
                "marital_status": "SINGLE",
                "dob": "1998-04-12",
                "age": 26,
            },
            "contact_info": {
                "mobile_number": "9876543210",
                "alternative_number": "",
                "email": "asha.rao@gmail.com",
                "address": {
                    "address_line1": "12 MG Road",
                    "address_line2": "",
                    "city": "Mysuru",
                    "state": "Karnataka",
                    "pincode": "570001",
                    "country": "India",
                },
            },
            "education": "B.Com",
            "employment": {
                "designation": "Analyst",
                "present_employed_at": "Acme Corp",
                "office_mobile_number": "",
                "office_address": {},
            },
            "property_id": str(property_id),
            "property_name": "Sunrise PG",
            "room_details": {
                "floor": floor,
                "room_number": room_number,
                "room_type": room_type,
            },
            "financials": {
                "monthly_rent": monthly_rent,
                "deposit": deposit,
                "payment_method": "UPI",
                "rent_due_date": start.isoformat(),
            },
            "lease_details": {
                "lease_start_date": start.isoformat(),
                "lease_end_date": (start + timedelta(days=330)).isoformat(),
            },
            "emergency_contacts": [
                {"name": "Mohan Rao", "relation": "Father", "contact_number": "9123456780"},
            ],
            "status": "PENDING",
            "declaration": True,
            "notes": "",
        }
        values.update(overrides)
        return values

    return _values
