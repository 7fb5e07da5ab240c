"""Role policy for the HTTP boundary.

The engine never checks roles. Handlers resolve the caller once (see
``web.middlewares.auth_middleware``) and call the ``require_*`` helpers
below before invoking engine operations.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.exceptions import PermissionDeniedError


class Role(str, Enum):
    GUEST = "guest"
    MASTER = "master"
    ADMIN = "admin"


@dataclass(frozen=True)
class CurrentUser:
    """Resolved caller of a request."""
    id: str
    role: Role
    master_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_master(self) -> bool:
        return self.role == Role.MASTER

    @property
    def can_view_client_details(self) -> bool:
        return self.role in (Role.MASTER, Role.ADMIN)

    @property
    def can_manage_settings(self) -> bool:
        return self.is_admin

    def can_edit_appointments_of(self, master_id: str) -> bool:
        """Admins edit every calendar, a master only their own."""
        if self.is_admin:
            return True
        return self.is_master and self.master_id == master_id


GUEST = CurrentUser(id="guest", role=Role.GUEST)


def admin_user() -> CurrentUser:
    return CurrentUser(id="admin", role=Role.ADMIN)


def master_user(master_id: str) -> CurrentUser:
    return CurrentUser(id=f"master:{master_id}", role=Role.MASTER, master_id=master_id)


def require_admin(user: CurrentUser) -> None:
    if not user.can_manage_settings:
        raise PermissionDeniedError("Потрібні права адміністратора", role=user.role.value)


def require_staff(user: CurrentUser) -> None:
    if not user.can_view_client_details:
        raise PermissionDeniedError(role=user.role.value)


def require_appointment_access(user: CurrentUser, master_id: str) -> None:
    if not user.can_edit_appointments_of(master_id):
        raise PermissionDeniedError(
            "Можна керувати лише власними записами",
            role=user.role.value,
            master_id=master_id,
        )


def require_booking_access(user: CurrentUser, master_id: str) -> None:
    """Guests book with any master; masters book only into their own calendar."""
    if user.is_master and user.master_id != master_id:
        raise PermissionDeniedError(
            "Можна керувати лише власними записами",
            role=user.role.value,
            master_id=master_id,
        )
