# Overview: Static order-status transition table.

"""
Comanda Order Lifecycle

================================================================================
PURPOSE: Answer "is this status edge structurally legal?"
================================================================================

STATE MACHINE:
    RECEIVED -> IN_PREP -> READY -> DELIVERED
        |           |         |
        +-----------+---------+--> CANCELLED

    RECEIVED:  Created by a waiter or cashier, waiting for the kitchen
    IN_PREP:   Kitchen is preparing it
    READY:     Waiting to be taken to the customer
    DELIVERED: Terminal
    CANCELLED: Terminal, reached only through a cancellation with a reason

RULES:
1. Cannot skip states (RECEIVED -> READY is forbidden)
2. Cannot reverse states (READY -> IN_PREP is forbidden)
3. Terminal states accept no further move
4. This table says nothing about WHO may take an edge; role rights are
   checked separately by the access policy

paid_at is orthogonal to status: it is not a state and does not appear here.

================================================================================
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from ..constants import OrderStatus
from ..errors import ValidationError


DEFAULT_TRANSITIONS = {
    OrderStatus.RECEIVED: (OrderStatus.IN_PREP, OrderStatus.CANCELLED),
    OrderStatus.IN_PREP: (OrderStatus.READY, OrderStatus.CANCELLED),
    OrderStatus.READY: (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}


def validate_status(status: str) -> None:
    """
    Raises:
        ValidationError: If status is not one of OrderStatus.ALL
    """
    if status not in OrderStatus.ALL:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(OrderStatus.ALL)}"
        )


class TransitionTable:
    """Immutable adjacency table over order statuses."""

    __slots__ = ("_edges",)

    def __init__(self, edges: Mapping[str, Iterable[str]]):
        frozen = {}
        for source, targets in edges.items():
            validate_status(source)
            targets = frozenset(targets)
            for target in targets:
                validate_status(target)
            frozen[source] = targets
        object.__setattr__(self, "_edges", MappingProxyType(frozen))

    def __setattr__(self, name, value):
        raise AttributeError("TransitionTable is immutable")

    def is_valid_transition(self, from_status: str, to_status: str) -> bool:
        return to_status in self._edges.get(from_status, frozenset())

    def allowed_targets(self, from_status: str) -> frozenset[str]:
        return self._edges.get(from_status, frozenset())

    def is_terminal(self, status: str) -> bool:
        return not self._edges.get(status)

    def edges(self) -> list[tuple[str, str]]:
        return [
            (source, target)
            for source in OrderStatus.ALL
            for target in OrderStatus.ALL
            if target in self._edges.get(source, frozenset())
        ]


def build_default_transitions() -> TransitionTable:
    return TransitionTable(DEFAULT_TRANSITIONS)
