from typing import Optional

from pymongo.database import Database

from database import find_user

ADMIN_ROLE = "admin"


def has_role(user: Optional[dict], required_role: str = ADMIN_ROLE) -> bool:
    """Authorization decision for an already-fetched user document."""
    if not user:
        return False
    return user.get("role") == required_role


# The caller asserts its own identity by email; there is no session or token.
def is_admin(db: Database, email: Optional[str]) -> bool:
    return has_role(find_user(db, email), ADMIN_ROLE)
