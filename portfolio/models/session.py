"""
Session user model stored in the signed session cookie.
"""
from pydantic import BaseModel

ADMIN_ROLE = "admin"


class SessionUser(BaseModel):
    """The authenticated user attached to a session."""
    id: str
    name: str
    email: str
    role: str = "viewer"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE
