"""
User domain model.
"""

from dataclasses import dataclass

ADMIN_LEVEL_NONE = 0
ADMIN_LEVEL_ADMIN = 1
ADMIN_LEVEL_SUPER = 2


@dataclass
class User:
    """
    Identity as seen by the escrow core.

    Owned by the external identity provider; the core only reads it for
    authorization checks.
    """

    user_id: str
    display_name: str
    admin_level: int = ADMIN_LEVEL_NONE
    suspended: bool = False
    created_at: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.admin_level >= ADMIN_LEVEL_ADMIN
