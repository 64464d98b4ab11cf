# Overview: Permission system package.
# Re-exports all public APIs for convenient imports.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    ORDER_PERMISSIONS,
    STATUS_PERMISSIONS,
    CASH_PERMISSIONS,
    VIEW_PERMISSIONS,
    STATUS_TRANSITION_PERMISSIONS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    get_role_permission_definitions,
    get_status_edges_for_permission,
    validate_permission_code,
)
from .matrix import PermissionMatrix, build_default_matrix

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "ORDER_PERMISSIONS",
    "STATUS_PERMISSIONS",
    "CASH_PERMISSIONS",
    "VIEW_PERMISSIONS",
    "STATUS_TRANSITION_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "get_role_permission_definitions",
    "get_status_edges_for_permission",
    "validate_permission_code",
    "PermissionMatrix",
    "build_default_matrix",
]
