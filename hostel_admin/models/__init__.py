from hostel_admin.models.user import User
from hostel_admin.models.property import Property
from hostel_admin.models.room import Room

__all__ = [
    "User",
    "Property",
    "Room",
]
