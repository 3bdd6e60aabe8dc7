#!/usr/bin/env python3
"""Seed script to create development accounts and a sample PG."""
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hostel_admin.lib.config import settings
from hostel_admin.lib.database import AsyncSessionLocal
from hostel_admin.lib.logging import configure_logging
from hostel_admin.lib.security import get_password_hash
from hostel_admin.schemas.property import FloorAllocation, RoomTypeAllocation, RoomTypeTemplate
from hostel_admin.services.mapper import rooms_from_allocations
from hostel_admin.services.property_service import PropertyService
from hostel_admin.services.user_service import UserService

logger = logging.getLogger("seed")

ACCOUNTS = (
    ("Admin User", "admin@example.com", "admin", "admin123"),
    ("Manager User", "manager@example.com", "manager", "manager123"),
)
SAMPLE_PG = "Sunrise PG"


async def seed():
    async with AsyncSessionLocal() as session:
        users = UserService(session)
        manager = None
        for name, email, role, password in ACCOUNTS:
            user = await users.get_user_by_email(email)
            if user:
                logger.info("User already exists: %s", email)
            else:
                user = await users.create_user(
                    name=name,
                    email=email,
                    role=role,
                    assigned_pgs=[SAMPLE_PG],
                    password_hash=get_password_hash(password),
                )
                logger.info("Created user: %s (password: %s)", email, password)
            if role == "manager":
                manager = user

        properties = PropertyService(session)
        if await properties.name_exists(SAMPLE_PG):
            logger.info("PG already exists: %s", SAMPLE_PG)
            return

        room_types = [
            RoomTypeTemplate(id="single", name="Single", capacity=1, price=9000),
            RoomTypeTemplate(id="double", name="Double", capacity=2, price=6500),
        ]
        allocations = [
            FloorAllocation(floor=1, rooms=[
                RoomTypeAllocation(room_type="Single", count=2),
                RoomTypeAllocation(room_type="Double", count=2),
            ]),
            FloorAllocation(floor=2, rooms=[RoomTypeAllocation(room_type="Double", count=4)]),
        ]
        prop, created = await properties.create_property_with_rooms(
            {
                "name": SAMPLE_PG,
                "type": "unisex",
                "location": "MG Road, Bengaluru",
                "contact_info": "+91 98765 43210",
                "total_rooms": 8,
                "total_beds": 14,
                "floors": 2,
                "room_types": [t.model_dump() for t in room_types],
                "manager_id": manager.id if manager else None,
                "manager": manager.name if manager else None,
            },
            rooms_from_allocations(allocations, room_types),
        )
        logger.info("Created PG %s with %d room(s)", prop.name, created)


if __name__ == "__main__":
    configure_logging(settings.log_level)
    asyncio.run(seed())
