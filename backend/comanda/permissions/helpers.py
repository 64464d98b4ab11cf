# Overview: Lookups over the permission definitions and default role grants.

from .definitions import PERMISSION_DEFINITIONS, STATUS_TRANSITION_PERMISSIONS
from .roles import DEFAULT_ROLE_PERMISSIONS


def _as_dict(perm):
    code, name, description, category = perm
    return {"code": code, "name": name, "description": description, "category": category}


def get_all_permission_codes():
    """Every defined permission code, in definition order."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def validate_permission_code(code):
    return code in get_all_permission_codes()


def get_permission_definition(code):
    """Definition dict for a code, or None if the code is unknown."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == code:
            return _as_dict(perm)
    return None


def get_permissions_by_category(category):
    """Definition tuples in one category."""
    return [perm for perm in PERMISSION_DEFINITIONS if perm[3] == category]


def get_role_permission_definitions(role):
    """Definition dicts granted to a role by default; empty for unknown roles."""
    granted = set(DEFAULT_ROLE_PERMISSIONS.get(role, ()))
    return [_as_dict(perm) for perm in PERMISSION_DEFINITIONS if perm[0] in granted]


def get_status_edges_for_permission(code):
    """(from, to) status edges that a STATUS_* permission unlocks."""
    return sorted(edge for edge, permission in STATUS_TRANSITION_PERMISSIONS.items() if permission == code)
