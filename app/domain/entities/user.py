"""Domain entity representing a user."""

from dataclasses import dataclass
from datetime import datetime

from .role import Role, UserRole


@dataclass
class User:
    """Directory attributes of a platform user."""

    id: int | None
    role: Role
    name: str
    email: str
    is_active: bool
    deleted: bool
    created_at: datetime | None = None

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role alias matches ``alias``."""

        return self.role.alias.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` for administrators and super administrators."""

        return self.has_role(UserRole.ADMIN.value) or self.has_role(
            UserRole.SUPERADMIN.value
        )

    @property
    def recipient_id(self) -> str:
        """Identifier used to address notifications to this user."""

        return str(self.id)


__all__ = ["User"]
