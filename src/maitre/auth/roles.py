"""User roles and their dominance order.

Learn: roles form a total order, staff < admin < super_admin. A guard
asks "does this user's role dominate the required one?" rather than
comparing for equality, so an admin passes a staff-level check.
"""

import enum


class Role(str, enum.Enum):
    STAFF = "staff"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def rank(self) -> int:
        return _RANK[self]

    def dominates(self, other: "Role") -> bool:
        """True if this role is at or above `other`."""
        return self.rank >= other.rank

    @property
    def is_global(self) -> bool:
        """Super admins are not bound to their own restaurant."""
        return self is Role.SUPER_ADMIN


_RANK = {Role.STAFF: 0, Role.ADMIN: 1, Role.SUPER_ADMIN: 2}
