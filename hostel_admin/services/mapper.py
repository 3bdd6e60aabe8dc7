"""
Entity mapping.

Turns validated form values plus context (existing record, known managers,
uploaded images) into the field sets the persistence services store.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from hostel_admin.schemas.property import FloorAllocation, RoomTypeTemplate

logger = logging.getLogger(__name__)

NO_MANAGER = ("", "none")


@dataclass
class PropertyDraft:
    fields: Dict[str, Any]
    id: Optional[UUID] = None
    manager_unavailable: bool = False

    @property
    def is_create(self) -> bool:
        return self.id is None


@dataclass
class RoomDraft:
    fields: Dict[str, Any]
    id: Optional[UUID] = None

    @property
    def is_create(self) -> bool:
        return self.id is None


def _template(value: Any) -> RoomTypeTemplate:
    if isinstance(value, RoomTypeTemplate):
        return value
    return RoomTypeTemplate.model_validate(value)


def map_room_types(room_types: Sequence[Any]) -> List[Dict[str, Any]]:
    return [
        {
            "id": t.id,
            "name": t.name.strip(),
            "capacity": t.capacity,
            "price": t.price,
            "amenities": list(t.amenities),
        }
        for t in (_template(rt) for rt in room_types)
    ]


def resolve_manager(manager_id: Any, managers: Sequence[Any]):
    """
    Find the manager for ``manager_id``.

    Returns (manager, unavailable). An empty or "none" id is not an error;
    an id missing from ``managers`` is reported as unavailable.
    """
    if manager_id is None or str(manager_id).strip().lower() in NO_MANAGER:
        return None, False

    wanted = str(manager_id).strip()
    for manager in managers:
        if str(manager.id) == wanted:
            return manager, False

    logger.warning("Manager %s not found among available managers", wanted)
    return None, True


def map_property(
    values: Mapping[str, Any],
    room_types: Sequence[Any] = (),
    images: Optional[Sequence[str]] = None,
    managers: Sequence[Any] = (),
    existing: Optional[Any] = None,
) -> PropertyDraft:
    manager, unavailable = resolve_manager(values.get("manager_id"), managers)

    fields = {
        "name": str(values.get("name") or "").strip(),
        "type": str(values.get("type") or "").strip().lower(),
        "location": str(values.get("location") or "").strip(),
        "contact_info": str(values.get("contact_info") or "").strip(),
        "total_rooms": max(1, values.get("total_rooms") or 1),
        "total_beds": max(1, values.get("total_beds") or 1),
        "floors": max(1, values.get("floors") or 1),
        "images": list(images or []),
        "amenities": list(getattr(existing, "amenities", None) or []),
        "room_types": map_room_types(room_types),
        "revenue": getattr(existing, "revenue", None) or 0,
        "occupancy_rate": getattr(existing, "occupancy_rate", None) or 0,
        "monthly_rent": getattr(existing, "monthly_rent", None) or 0,
        "actual_occupancy": getattr(existing, "actual_occupancy", None) or 0,
        "total_capacity": getattr(existing, "total_capacity", None) or 0,
        "manager_id": manager.id if manager else None,
        "manager": manager.name if manager else None,
    }

    return PropertyDraft(
        fields=fields,
        id=existing.id if existing is not None else None,
        manager_unavailable=unavailable,
    )


def map_room(values: Mapping[str, Any], existing: Optional[Any] = None) -> RoomDraft:
    fields = {
        "number": str(values.get("number") or "").strip(),
        "type": str(values.get("type") or "").strip(),
        "capacity": max(1, values.get("capacity") or 1),
        "rent": max(0.0, float(values.get("rent") or 0)),
        "pg_id": UUID(str(values["pg_id"])),
        "status": values.get("status") or "vacant",
        "students": list(getattr(existing, "students", None) or []),
    }
    return RoomDraft(fields=fields, id=existing.id if existing is not None else None)


def rooms_from_allocations(
    allocations: Sequence[FloorAllocation],
    room_types: Sequence[Any] = (),
) -> List[Dict[str, Any]]:
    """
    Expand floor allocations into room rows.

    Rooms on floor ``f`` are numbered ``f*100 + 1``, ``f*100 + 2``, ... in
    allocation order. Capacity and rent come from the template of the same
    name.
    """
    templates = {t.name.strip(): t for t in (_template(rt) for rt in room_types)}
    rows = []

    for allocation in allocations:
        seq = 0
        for item in allocation.rooms:
            template = templates.get(item.room_type.strip())
            for _ in range(item.count):
                seq += 1
                rows.append({
                    "number": str(allocation.floor * 100 + seq),
                    "type": item.room_type.strip(),
                    "capacity": max(1, template.capacity) if template else 1,
                    "rent": max(0.0, template.price) if template else 0.0,
                    "status": "vacant",
                    "students": [],
                })

    return rows
