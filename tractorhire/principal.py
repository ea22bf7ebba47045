"""Acting-user abstraction passed into every booking operation."""

from __future__ import annotations

from dataclasses import dataclass

from .core.enums import RoleName


@dataclass(frozen=True)
class Actor:
    """An already-authenticated user and the role they act under."""

    user_id: str
    role: RoleName

    @property
    def is_admin(self) -> bool:
        return RoleName(self.role) == RoleName.ADMIN

    @property
    def is_tractor_owner(self) -> bool:
        return RoleName(self.role) == RoleName.TRACTOR_OWNER
