# app/schemas/property_catalog/property_schemas.py
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, model_validator

from shared.core.schemas import CommonQueryParams
from ...enum.property_catalog_enum import normalize_sharing_option


class OccupantOut(BaseModel):
    tenant_id: UUID
    tenant_name: Optional[str] = None

    model_config = {"from_attributes": True}


class RoomBase(BaseModel):
    room_no: str
    room_name: Optional[str] = None
    sharing_option: str = "SINGLE"
    no_of_beds: int = Field(1, ge=1)
    no_of_beds_occupied: int = Field(0, ge=0)
    rent: Optional[Decimal] = Decimal("0")

    @model_validator(mode="after")
    def check_capacity(self):
        self.sharing_option = normalize_sharing_option(
            self.sharing_option) or "SINGLE"
        if self.no_of_beds_occupied > self.no_of_beds:
            raise ValueError(
                f"Room {self.room_no}: occupied beds ({self.no_of_beds_occupied}) "
                f"exceed capacity ({self.no_of_beds})")
        return self


class RoomIn(RoomBase):
    occupants: List[OccupantOut] = []


class RoomOut(RoomBase):
    id: UUID
    occupants: List[OccupantOut] = []
    occupied_by: Optional[OccupantOut] = None

    model_config = {"from_attributes": True}


class FloorIn(BaseModel):
    floor_number: int = Field(..., ge=0)
    rooms: List[RoomIn] = []


class FloorOut(BaseModel):
    floor_number: int
    rooms: List[RoomOut] = []

    model_config = {"from_attributes": True}


class PropertyDocumentIn(BaseModel):
    """Whole property document as written back by the catalog editor."""
    property_name: str
    property_type: str = "PG"
    city: Optional[str] = None
    total_floors: Optional[int] = Field(None, ge=0)
    rooms_per_floor: Optional[int] = Field(None, ge=0)
    version: int = Field(..., ge=1, description="Version the client read")
    floors: List[FloorIn] = []

    @model_validator(mode="after")
    def check_unique_numbers(self):
        floor_numbers = [f.floor_number for f in self.floors]
        if len(floor_numbers) != len(set(floor_numbers)):
            raise ValueError("Floor numbers must be unique per property")
        for floor in self.floors:
            room_nos = [r.room_no for r in floor.rooms]
            if len(room_nos) != len(set(room_nos)):
                raise ValueError(
                    f"Room numbers must be unique within floor {floor.floor_number}")
        return self


class PropertyOut(BaseModel):
    id: UUID
    owner_id: str
    property_name: str
    property_type: str
    city: Optional[str] = None
    total_floors: Optional[int] = None
    rooms_per_floor: Optional[int] = None
    version: int
    floors: List[FloorOut] = []

    model_config = {"from_attributes": True}


class PropertyListRequest(CommonQueryParams):
    owner_id: Optional[str] = None
    property_id: Optional[UUID] = None
    property_name: Optional[str] = None
    property_type: Optional[str] = None
    city: Optional[str] = None


class PropertyListResponse(BaseModel):
    properties: List[PropertyOut]
    total: int
