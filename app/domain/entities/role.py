"""Domain entity representing a user role."""

from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    """Roles a platform user can hold."""

    CANDIDATE = "candidate"
    AGENT = "agent"
    HR = "hr"
    PARTNER = "partner"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


@dataclass
class Role:
    """Core attributes describing a role that can be assigned to a user."""

    id: int
    name: str
    alias: str


__all__ = ["Role", "UserRole"]
