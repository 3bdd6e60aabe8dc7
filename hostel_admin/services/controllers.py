"""
Form controllers for the embedded admin context.

Each controller runs a workflow in its own database session, reloads the
read-model after a successful mutation and reports the outcome through the
notifier. Failures are reported, not raised, except unexpected ones.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from hostel_admin.lib.errors import AdminError, FormValidationError, describe_error
from hostel_admin.lib.notifications import Severity
from hostel_admin.schemas.property import PropertySubmission
from hostel_admin.schemas.room import RoomForm
from hostel_admin.services.user_service import UserService
from hostel_admin.services.workflows import PropertyWorkflow, RoomWorkflow

logger = logging.getLogger(__name__)

# Store failures that slip past translation are still reported to the user
REPORTABLE_ERRORS = (AdminError, SQLAlchemyError)


class _Controller:
    def __init__(self, ctx):
        self.ctx = ctx

    def notify(self, title: str, message: str, severity: Severity = Severity.INFO) -> None:
        self.ctx.notifier.notify(title, message, severity)

    def report_failure(self, exc: Exception, action: str, subject: str = "PG") -> None:
        if isinstance(exc, FormValidationError):
            self.notify("Validation Errors", describe_error(exc, action, subject), Severity.ERROR)
        else:
            self.notify("Error", describe_error(exc, action, subject), Severity.ERROR)


class PropertyFormController(_Controller):
    def __init__(self, ctx):
        super().__init__(ctx)
        self.is_submitting = False

    async def submit(
        self, submission: PropertySubmission, property_id: Optional[UUID] = None
    ):
        """
        Save the property form.

        A submission that arrives while another is in flight is dropped and
        returns None. Returns the saved property, or None on failure.
        """
        if self.is_submitting:
            logger.info("Already submitting, ignoring duplicate submission")
            return None

        self.is_submitting = True
        action = "update PG" if property_id else "create PG"
        try:
            async with self.ctx.session_factory() as db:
                outcome = await PropertyWorkflow(
                    db, self.ctx.session.permissions, self.ctx.reconciler
                ).save(submission, property_id)

            for change in outcome.capacity_changes:
                self.notify(
                    "Room Capacities Updated",
                    f"All rooms of type {change.room_type} now have a capacity of {change.new_capacity}",
                )
            for warning in outcome.warnings:
                self.notify("Warning", warning, Severity.WARNING)

            await self.ctx.reconciler.refresh()

            prop = outcome.property
            if outcome.created:
                message = f"{prop.name} has been created successfully with {prop.total_rooms} rooms."
            else:
                message = f"{prop.name} has been updated successfully."
            self.notify("Success", message, Severity.SUCCESS)
            return prop
        except REPORTABLE_ERRORS as e:
            logger.error("Error in PG form submit: %s", e)
            self.report_failure(e, action)
            return None
        finally:
            self.is_submitting = False

    async def delete(self, property_id: UUID) -> bool:
        try:
            async with self.ctx.session_factory() as db:
                await PropertyWorkflow(
                    db, self.ctx.session.permissions, self.ctx.reconciler
                ).delete(property_id)
        except REPORTABLE_ERRORS as e:
            logger.error("Error deleting PG %s: %s", property_id, e)
            self.report_failure(e, "delete PG")
            return False

        await self.ctx.reconciler.refresh()
        self.notify("Success", "PG and all its rooms have been deleted successfully.", Severity.SUCCESS)
        return True


class RoomFormController(_Controller):
    async def save(self, form: RoomForm, room_id: Optional[UUID] = None):
        action = "update room" if room_id else "create room"
        try:
            async with self.ctx.session_factory() as db:
                room = await RoomWorkflow(db, self.ctx.session.permissions).save(form, room_id)
        except REPORTABLE_ERRORS as e:
            logger.error("Error saving room: %s", e)
            self.report_failure(e, action, subject="room")
            return None

        await self.ctx.reconciler.refresh()
        self.notify(
            "Success", f"Room {'updated' if room_id else 'created'} successfully.", Severity.SUCCESS
        )
        return room

    async def delete(self, room_id: UUID) -> bool:
        try:
            async with self.ctx.session_factory() as db:
                await RoomWorkflow(db, self.ctx.session.permissions).delete(room_id)
        except REPORTABLE_ERRORS as e:
            logger.error("Error deleting room %s: %s", room_id, e)
            self.report_failure(e, "delete room", subject="room")
            return False

        await self.ctx.reconciler.refresh()
        self.notify("Success", "Room deleted successfully.", Severity.SUCCESS)
        return True


class AccountController(_Controller):
    async def create_user(self, email, password, name, role, assigned_pgs=None):
        try:
            user = await self.ctx.session.create_user(email, password, name, role, assigned_pgs)
        except REPORTABLE_ERRORS as e:
            logger.error("Error creating user: %s", e)
            self.report_failure(e, "create user", subject="user")
            return None

        await self.ctx.reconciler.refresh()
        self.notify("Success", f"User {user.name} created successfully.", Severity.SUCCESS)
        return user

    async def update_user(self, user_id: UUID, **fields):
        try:
            user = await self.ctx.session.update_user(user_id, **fields)
        except REPORTABLE_ERRORS as e:
            logger.error("Error updating user %s: %s", user_id, e)
            self.report_failure(e, "update user", subject="user")
            return None

        await self.ctx.reconciler.refresh()
        self.notify("Success", f"User {user.name} updated successfully.", Severity.SUCCESS)
        return user

    async def delete_user(self, user_id: UUID) -> bool:
        try:
            await self.ctx.session.delete_user(user_id)
        except REPORTABLE_ERRORS as e:
            logger.error("Error deleting user %s: %s", user_id, e)
            self.report_failure(e, "delete user", subject="user")
            return False

        await self.ctx.reconciler.refresh()
        self.notify("Success", "User deleted successfully.", Severity.SUCCESS)
        return True

    async def assign_property(self, user_id: UUID, property_name: str):
        return await self._change_assignment(user_id, property_name, assign=True)

    async def remove_property(self, user_id: UUID, property_name: str):
        return await self._change_assignment(user_id, property_name, assign=False)

    async def _change_assignment(self, user_id: UUID, property_name: str, assign: bool):
        action = "assign PG" if assign else "remove PG assignment"
        try:
            self.ctx.session.permissions.require_admin(action)
            async with self.ctx.session_factory() as db:
                users = UserService(db)
                if assign:
                    user = await users.assign_property(user_id, property_name)
                else:
                    user = await users.remove_property(user_id, property_name)
        except REPORTABLE_ERRORS as e:
            logger.error("Error changing PG assignment for %s: %s", user_id, e)
            self.report_failure(e, action, subject="user")
            return None

        await self.ctx.reconciler.refresh()
        return user
