# Overview: Principal value type and its resolution from an already-authenticated user id.

"""
Principal Resolution

Authentication (token issuance, passwords) happens upstream. By the time a
request reaches the core, a gateway has verified who the caller is and
forwarded the user id. This module turns that id into a Principal whose role
comes from the User record, never from the client.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import Role
from ..extensions import db
from ..models import User


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: str
    ip_address: str | None = None
    user_agent: str | None = None


def resolve_principal(
    user_id,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> Principal | None:
    """
    Returns:
        Principal for an active user with a known role, or None
    """
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        return None

    user = db.session.get(User, user_id)
    if not user or not user.is_active or user.role not in Role.ALL:
        return None

    return Principal(
        user_id=user.id,
        role=user.role,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:255] or None,
    )
