"""
Form validation.

Every rule runs on every call so one pass reports all violations. Nothing
here raises; callers check ``ValidationResult.ok``.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from hostel_admin.schemas.property import PropertyType
from hostel_admin.schemas.room import RoomStatus

PROPERTY_TYPES = tuple(t.value for t in PropertyType)
ROOM_STATUSES = tuple(s.value for s in RoomStatus)


@dataclass
class ValidationResult:
    values: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _is_blank(value: Any) -> bool:
    return value is None or _text(value) == ""


def validate_property_form(values: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult(values=dict(values))
    errors = result.errors

    name = _text(values.get("name"))
    location = _text(values.get("location"))
    total_rooms = _as_int(values.get("total_rooms"))
    floors = _as_int(values.get("floors"))
    pg_type = _text(values.get("type"))

    if not name:
        errors.append("PG name is required")
    if not location:
        errors.append("Location is required")
    if total_rooms is None or total_rooms < 1:
        errors.append("Total rooms must be at least 1")
    if floors is None or floors < 1:
        errors.append("Number of floors must be at least 1")
    if pg_type not in PROPERTY_TYPES:
        errors.append("Please select a valid PG type (Male, Female, or Unisex)")

    result.values.update(
        name=name,
        location=location,
        type=pg_type,
        total_rooms=total_rooms,
        floors=floors,
        total_beds=_as_int(values.get("total_beds")),
        contact_info=_text(values.get("contact_info")),
    )
    return result


def validate_room_form(values: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult(values=dict(values))
    errors = result.errors

    number = _text(values.get("number"))
    room_type = _text(values.get("type"))
    capacity = _as_int(values.get("capacity"))
    rent = _as_number(values.get("rent"))
    pg_id = _text(values.get("pg_id"))
    status = _text(values.get("status")).lower() or RoomStatus.VACANT.value

    if not number:
        errors.append("Room number is required.")
    if not room_type:
        errors.append("Room type is required.")
    if capacity is None or capacity < 1:
        errors.append("Capacity must be at least 1.")
    if rent is None and _is_blank(values.get("rent")):
        rent = 0.0
    if rent is None:
        errors.append("Rent must be a number.")
    elif rent < 0:
        errors.append("Rent must be 0 or greater.")
    if not _is_uuid(pg_id):
        errors.append("Please select a PG.")
    if status not in ROOM_STATUSES:
        errors.append("Please select a valid room status.")

    result.values.update(
        number=number,
        type=room_type,
        capacity=capacity,
        rent=rent,
        pg_id=pg_id,
        status=status,
    )
    return result


def validate_room_type_templates(templates: Sequence[Mapping[str, Any]]) -> List[str]:
    """Check room-type templates; returns violation messages."""
    errors = []
    seen = set()
    for idx, template in enumerate(templates, start=1):
        name = _text(template.get("name"))
        label = name or f"#{idx}"
        capacity = _as_int(template.get("capacity"))
        price = _as_number(template.get("price"))

        if not name:
            errors.append(f"Room type {label} needs a name")
        elif name.lower() in seen:
            errors.append(f"Room type {name} is listed more than once")
        seen.add(name.lower())

        if capacity is None or capacity < 1:
            errors.append(f"Room type {label} capacity must be at least 1")
        if price is None and not _is_blank(template.get("price")):
            errors.append(f"Room type {label} price must be a number")
        elif price is not None and price < 0:
            errors.append(f"Room type {label} price must be 0 or greater")
    return errors
