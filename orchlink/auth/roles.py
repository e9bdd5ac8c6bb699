"""
Roles.

Role is the only authorization dimension: admins manage everything,
viewers read. The gate resolves it once per request; handlers receive
the enum value and never look at raw claims.
"""

from enum import Enum


class Role(str, Enum):
    """Who the session belongs to."""
    
    ADMIN = "admin"      # Can create, update and delete
    VIEWER = "viewer"    # Read-only access
    
    @classmethod
    def parse(cls, value: object) -> "Role | None":
        """Return the matching role, or None for anything else."""
        try:
            return cls(value)
        except ValueError:
            return None


# Fixed subject ids for the two shared accounts.
SUBJECT_IDS: dict[Role, str] = {
    Role.ADMIN: "admin-user",
    Role.VIEWER: "viewer-user",
}
