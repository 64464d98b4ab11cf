# Overview: Immutable role -> permission lookup table.

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Iterable

from .helpers import validate_permission_code
from .roles import DEFAULT_ROLE_PERMISSIONS


class PermissionMatrix:
    """
    Exhaustive (role, permission) grant table.

    Lookups are exact: no permission implies another and unknown roles hold
    nothing. Built once at startup; there is no API to change it afterwards.
    """

    __slots__ = ("_grants",)

    def __init__(self, grants: Mapping[str, Iterable[str]]):
        frozen = {}
        for role, codes in grants.items():
            codes = frozenset(codes)
            unknown = sorted(code for code in codes if not validate_permission_code(code))
            if unknown:
                raise ValueError(f"Unknown permission codes for role {role}: {unknown}")
            frozen[role] = codes
        object.__setattr__(self, "_grants", MappingProxyType(frozen))

    def __setattr__(self, name, value):
        raise AttributeError("PermissionMatrix is immutable")

    def has_permission(self, role: str, permission: str) -> bool:
        return permission in self._grants.get(role, frozenset())

    def permissions_for(self, role: str) -> frozenset[str]:
        return self._grants.get(role, frozenset())


def build_default_matrix() -> PermissionMatrix:
    return PermissionMatrix(DEFAULT_ROLE_PERMISSIONS)
