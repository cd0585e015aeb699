# ipd_core/common/actors.py
from __future__ import annotations

UNKNOWN_ACTOR = "unknown"


def actor_for_user(user) -> str:
    """
    Stable contributor identifier for a Django user: email, else username.
    Falls back to "unknown" instead of failing the operation.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return UNKNOWN_ACTOR

    email = (getattr(user, "email", "") or "").strip()
    if email:
        return email

    username = (getattr(user, "username", "") or "").strip()
    return username or UNKNOWN_ACTOR


def current_actor(request) -> str:
    return actor_for_user(getattr(request, "user", None))
