"""Transition table tests."""

import pytest

from comanda.constants import OrderStatus
from comanda.errors import ValidationError
from comanda.services.lifecycle_service import (
    TransitionTable,
    build_default_transitions,
    validate_status,
)


S = OrderStatus


@pytest.mark.parametrize(
    "from_status,to_status",
    [
        (S.RECEIVED, S.IN_PREP),
        (S.IN_PREP, S.READY),
        (S.READY, S.DELIVERED),
        (S.RECEIVED, S.CANCELLED),
        (S.IN_PREP, S.CANCELLED),
        (S.READY, S.CANCELLED),
    ],
)
def test_valid_edges(from_status, to_status):
    assert build_default_transitions().is_valid_transition(from_status, to_status)


@pytest.mark.parametrize(
    "from_status,to_status",
    [
        (S.RECEIVED, S.READY),
        (S.RECEIVED, S.DELIVERED),
        (S.IN_PREP, S.RECEIVED),
        (S.READY, S.IN_PREP),
        (S.DELIVERED, S.CANCELLED),
        (S.CANCELLED, S.RECEIVED),
        (S.RECEIVED, S.RECEIVED),
        (S.READY, "SERVED"),
    ],
)
def test_invalid_edges(from_status, to_status):
    assert not build_default_transitions().is_valid_transition(from_status, to_status)


def test_terminal_states_have_no_targets():
    table = build_default_transitions()
    assert table.is_terminal(S.DELIVERED)
    assert table.is_terminal(S.CANCELLED)
    assert not table.is_terminal(S.READY)
    assert table.allowed_targets(S.DELIVERED) == frozenset()


def test_edges_listing():
    assert len(build_default_transitions().edges()) == 6


def test_table_is_immutable():
    table = build_default_transitions()
    with pytest.raises(AttributeError):
        table._edges = {}


def test_unknown_status_rejected():
    with pytest.raises(ValidationError):
        validate_status("SERVED")
    with pytest.raises(ValidationError):
        TransitionTable({S.RECEIVED: ["SERVED"]})
