# Overview: Access policy combining the permission matrix and the transition table.

"""
Single place where authorization questions are answered.

Services never compare role names; they ask the policy. The policy is built
once in create_app() and stored in app.extensions, so every request sees the
same immutable tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from flask import current_app

from .errors import ForbiddenError
from .permissions import STATUS_TRANSITION_PERMISSIONS, PermissionMatrix, build_default_matrix
from .services.lifecycle_service import TransitionTable, build_default_transitions


EXTENSION_KEY = "comanda.policy"


@dataclass(frozen=True)
class AccessPolicy:
    matrix: PermissionMatrix
    transitions: TransitionTable
    transition_permissions: Mapping[tuple[str, str], str] = field(
        default_factory=lambda: MappingProxyType(dict(STATUS_TRANSITION_PERMISSIONS))
    )

    def has_permission(self, role: str, permission: str) -> bool:
        return self.matrix.has_permission(role, permission)

    def require(self, principal, permission: str, message: str | None = None) -> None:
        """
        Raises:
            ForbiddenError: If the principal's role lacks the permission
        """
        if not self.matrix.has_permission(principal.role, permission):
            raise ForbiddenError(
                message or f"Role {principal.role} lacks permission {permission}",
                permission=permission,
            )

    def is_valid_transition(self, from_status: str, to_status: str) -> bool:
        return self.transitions.is_valid_transition(from_status, to_status)

    def transition_permission(self, from_status: str, to_status: str) -> str | None:
        return self.transition_permissions.get((from_status, to_status))

    def can_role_change_status(self, role: str, from_status: str, to_status: str) -> bool:
        """A role may take an edge only if it is legal AND the role holds that edge's permission."""
        if not self.transitions.is_valid_transition(from_status, to_status):
            return False
        permission = self.transition_permission(from_status, to_status)
        return permission is not None and self.matrix.has_permission(role, permission)


def build_default_policy() -> AccessPolicy:
    return AccessPolicy(matrix=build_default_matrix(), transitions=build_default_transitions())


def current_policy() -> AccessPolicy:
    """Policy installed on the running app (requires an app context)."""
    return current_app.extensions[EXTENSION_KEY]
