from hostel_admin.services.auth_service import AuthService, Permissions
from hostel_admin.services.property_service import PropertyService
from hostel_admin.services.reconciliation_service import ReconciliationService, load_read_model
from hostel_admin.services.room_service import RoomService
from hostel_admin.services.session_service import AuthState, SessionManager
from hostel_admin.services.user_service import UserService

__all__ = [
    "AuthService",
    "Permissions",
    "PropertyService",
    "ReconciliationService",
    "load_read_model",
    "RoomService",
    "AuthState",
    "SessionManager",
    "UserService",
]
