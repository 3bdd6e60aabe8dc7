"""
Reconciliation Service

Keeps derived state in line with the store after a mutation: pushes room-type
capacity edits down to the rooms of a property, and rebuilds the in-memory
read-model from a full reload.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hostel_admin.lib.database import AsyncSessionLocal
from hostel_admin.models.property import Property
from hostel_admin.models.room import Room
from hostel_admin.models.user import User
from hostel_admin.services.room_service import RoomService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapacityChange:
    room_type: str
    old_capacity: int
    new_capacity: int


@dataclass
class PropertyStats:
    property_id: UUID
    name: str
    room_count: int = 0
    total_capacity: int = 0
    actual_occupancy: int = 0
    monthly_rent: float = 0.0
    revenue: float = 0.0

    @property
    def occupancy_rate(self) -> float:
        if not self.total_capacity:
            return 0.0
        return round(self.actual_occupancy / self.total_capacity * 100, 1)


@dataclass
class ReadModel:
    properties: List[Property] = field(default_factory=list)
    rooms: List[Room] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    stats: Dict[UUID, PropertyStats] = field(default_factory=dict)
    loaded_at: Optional[datetime] = None

    @property
    def total_capacity(self) -> int:
        return sum(s.total_capacity for s in self.stats.values())

    @property
    def actual_occupancy(self) -> int:
        return sum(s.actual_occupancy for s in self.stats.values())

    @property
    def occupancy_rate(self) -> float:
        if not self.total_capacity:
            return 0.0
        return round(self.actual_occupancy / self.total_capacity * 100, 1)

    @property
    def revenue(self) -> float:
        return sum(s.revenue for s in self.stats.values())

    def rooms_for(self, property_id: UUID) -> List[Room]:
        return [r for r in self.rooms if r.pg_id == property_id]


def _capacity(template: Any) -> int:
    value = template.get("capacity") if isinstance(template, dict) else getattr(template, "capacity", 1)
    return int(value or 1)


def _name(template: Any) -> str:
    value = template.get("name") if isinstance(template, dict) else getattr(template, "name", "")
    return str(value or "").strip()


def diff_capacity_changes(
    old_templates: Sequence[Any], new_templates: Sequence[Any]
) -> List[CapacityChange]:
    """
    Compare room-type templates by name.

    A template whose name is missing from the old list (including a renamed
    one) is new and produces no change.
    """
    old_by_name = {_name(t): _capacity(t) for t in old_templates}
    changes = []
    for template in new_templates:
        name = _name(template)
        if name in old_by_name and old_by_name[name] != _capacity(template):
            changes.append(CapacityChange(name, old_by_name[name], _capacity(template)))
    return changes


def build_stats(properties: Sequence[Property], rooms: Sequence[Room]) -> Dict[UUID, PropertyStats]:
    stats = {p.id: PropertyStats(property_id=p.id, name=p.name) for p in properties}
    for room in rooms:
        entry = stats.get(room.pg_id)
        if entry is None:
            continue
        occupants = len(room.students or [])
        entry.room_count += 1
        entry.total_capacity += room.capacity
        entry.actual_occupancy += occupants
        entry.monthly_rent += room.rent
        entry.revenue += room.rent * occupants
    return stats


async def load_read_model(db: AsyncSession) -> ReadModel:
    """Load every property, room and user and compute the aggregates."""
    properties = list((await db.execute(select(Property).order_by(Property.name))).scalars().all())
    rooms = list((await db.execute(select(Room).order_by(Room.number))).scalars().all())
    users = list((await db.execute(select(User).order_by(User.name))).scalars().all())

    return ReadModel(
        properties=properties,
        rooms=rooms,
        users=users,
        stats=build_stats(properties, rooms),
        loaded_at=datetime.utcnow(),
    )


class ReconciliationService:
    def __init__(self, session_factory: async_sessionmaker = AsyncSessionLocal):
        self.session_factory = session_factory
        self.read_model = ReadModel()

    async def refresh(self) -> ReadModel:
        """Replace the read-model with a fresh full reload."""
        async with self.session_factory() as db:
            read_model = await load_read_model(db)
        self.read_model = read_model
        logger.debug(
            "Read-model reloaded: %d PG(s), %d room(s), %d user(s)",
            len(read_model.properties), len(read_model.rooms), len(read_model.users),
        )
        return read_model

    def clear(self) -> None:
        self.read_model = ReadModel()

    async def propagate_capacity_changes(
        self,
        db: AsyncSession,
        property_id: UUID,
        old_templates: Sequence[Any],
        new_templates: Sequence[Any],
    ) -> List[CapacityChange]:
        """Apply one bulk capacity update per changed template."""
        changes = diff_capacity_changes(old_templates, new_templates)
        rooms = RoomService(db)
        for change in changes:
            logger.info(
                "Updating capacity for room type %s from %d to %d",
                change.room_type, change.old_capacity, change.new_capacity,
            )
            await rooms.bulk_update_capacity(property_id, change.room_type, change.new_capacity)
        return changes
