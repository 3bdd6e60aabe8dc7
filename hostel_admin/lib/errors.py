"""
Typed error taxonomy for admin operations.

Store failures are translated into these classes once, at the persistence
boundary, and ``describe_error`` maps each class to the message shown to the
user.
"""
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError


class AdminError(Exception):
    """Base class for every failure an admin operation can report."""


class FormValidationError(AdminError):
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class ConstraintViolationError(AdminError):
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class InvalidReferenceError(AdminError):
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class NotFoundError(AdminError):
    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class PartialFailureError(AdminError):
    """The parent entity was saved but a dependent step failed."""

    def __init__(self, entity: Any, reason: str):
        self.entity = entity
        self.reason = reason
        super().__init__(reason)


class InvalidCredentialsError(AdminError):
    pass


class ProfileNotFoundError(AdminError):
    pass


class AuthenticationRequiredError(AdminError):
    pass


class PermissionDeniedError(AdminError):
    pass


class IdentityProviderError(AdminError):
    pass


class StoreError(AdminError):
    """The database refused or failed to carry out a statement."""


_UNIQUE_MARKERS = ("duplicate", "unique constraint", "unique violation")
_FOREIGN_KEY_MARKERS = ("foreign key constraint", "foreign key violation")


def translate_integrity_error(exc: IntegrityError, entity: str) -> AdminError:
    """Turn a driver-level integrity failure into a typed error."""
    detail = str(exc.orig if exc.orig is not None else exc).lower()

    if any(marker in detail for marker in _FOREIGN_KEY_MARKERS):
        return InvalidReferenceError(f"{entity} references a record that does not exist")
    if any(marker in detail for marker in _UNIQUE_MARKERS):
        return ConstraintViolationError(f"A {entity} with these details already exists")
    return StoreError(f"Failed to save {entity}: {detail}")


def translate_store_error(exc: SQLAlchemyError, entity: str) -> AdminError:
    """Turn any driver or connection failure into a typed error."""
    if isinstance(exc, IntegrityError):
        return translate_integrity_error(exc, entity)
    detail = str(exc.orig if getattr(exc, "orig", None) is not None else exc)
    return StoreError(f"Failed to save {entity}: {detail}")


def describe_error(exc: BaseException, action: str, subject: str = "PG") -> str:
    """
    Build the user-facing message for a failed ``action`` (e.g. "create PG").

    Lookup walks the exception's MRO so subclasses inherit the message of
    their nearest known ancestor.
    """
    messages = {
        FormValidationError: lambda e: ", ".join(e.errors),
        ConstraintViolationError: lambda e: (
            f"A {subject} with this name already exists. Please choose a different name."
        ),
        InvalidReferenceError: lambda e: (
            "Selected manager is not available. Please choose a different manager "
            f"or create the {subject} without a manager."
            if e.field in (None, "manager_id")
            else f"Failed to {action}: the selected {subject} no longer exists."
        ),
        NotFoundError: lambda e: f"Failed to {action}: it no longer exists.",
        PartialFailureError: lambda e: e.reason,
        InvalidCredentialsError: lambda e: "Invalid email or password.",
        ProfileNotFoundError: lambda e: "User profile not found in database.",
        AuthenticationRequiredError: lambda e: f"Please log in to {action}.",
        PermissionDeniedError: lambda e: f"You do not have permission to {action}.",
        IdentityProviderError: lambda e: f"Failed to {action}: identity service unavailable.",
        StoreError: lambda e: f"Failed to {action}: the database could not complete the change. Please try again.",
        AdminError: lambda e: f"Failed to {action}: {e}",
    }

    for cls in type(exc).__mro__:
        if cls in messages:
            return messages[cls](exc)
    return f"Failed to {action}. Please try again."
