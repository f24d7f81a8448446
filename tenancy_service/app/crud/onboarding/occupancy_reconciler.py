# app/crud/onboarding/occupancy_reconciler.py
import logging
from typing import Optional
from uuid import UUID

from shared.utils.exceptions import EntityNotFoundError, RoomNotFoundError, SideEffectFailure
from ...schemas.onboarding.wizard_schemas import ReconcileResult, RoomRef
from .collaborators import PropertyCatalog, PropertyRepository

logger = logging.getLogger(__name__)


class OccupancyReconciler:
    """Applies the bed-count change implied by a tenant's room assignment.

    Rooms are updated with per-room conditional counters, never by rewriting
    the property document. Nothing is committed here: the caller commits the
    changes together with whatever bookkeeping it keeps for the assignment.
    """

    def __init__(self, catalog: PropertyCatalog, properties: PropertyRepository):
        self.catalog = catalog
        self.properties = properties

    def _load(self, property_id: UUID):
        try:
            return self.catalog.get_one(property_id)
        except EntityNotFoundError as e:
            raise SideEffectFailure(str(e)) from e

    def reconcile(self, property_id: UUID, new_room: RoomRef, tenant_id: UUID,
                  tenant_name: Optional[str] = None, old_room: Optional[RoomRef] = None,
                  old_property_id: Optional[UUID] = None) -> ReconcileResult:
        prop = self._load(property_id)
        old_property_id = old_property_id or property_id

        if old_room is not None and old_property_id == property_id and old_room == new_room:
            room = self.properties.find_room(prop, new_room.floor, new_room.room_number)
            if self.properties.holds_bed(room, tenant_id):
                self.properties.ensure_occupant(room, tenant_id, tenant_name)
                return ReconcileResult(
                    property_id=prop.id,
                    room=new_room,
                    occupancy=room.no_of_beds_occupied,
                    unchanged=True,
                )
            # never got the bed, so this is a first assignment
            old_room = None

        result = ReconcileResult(property_id=prop.id, room=new_room, occupancy=0)

        if old_room is not None:
            old_prop = prop if old_property_id == property_id else self._load(old_property_id)
            try:
                old = self.properties.find_room(old_prop, old_room.floor, old_room.room_number)
            except RoomNotFoundError:
                logger.warning("Tenant %s: previous room %s/%s no longer exists on property %s",
                               tenant_id, old_room.floor, old_room.room_number, old_prop.id)
            else:
                remaining = self.properties.decrement_occupancy(old, tenant_id)
                if remaining is None:
                    logger.warning("Tenant %s holds no bed in room %s/%s on property %s, nothing to vacate",
                                   tenant_id, old_room.floor, old_room.room_number, old_prop.id)
                else:
                    result.vacated = old_room
                    result.vacated_occupancy = remaining
                    if old_prop.id != prop.id:
                        self.properties.touch(old_prop.id)

        room = self.properties.find_room(prop, new_room.floor, new_room.room_number)
        result.occupancy = self.properties.increment_occupancy(room, tenant_id, tenant_name)
        self.properties.touch(prop.id)

        logger.info("Tenant %s assigned to room %s/%s on property %s (%s/%s beds)",
                    tenant_id, new_room.floor, new_room.room_number, prop.id,
                    result.occupancy, room.no_of_beds)
        return result
