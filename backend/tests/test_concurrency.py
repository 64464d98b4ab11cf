"""
Concurrency control tests.

A competing call is injected between the read and the conditional write by
wrapping update_if, which reproduces the interleaving of two polling clients
on one database session. Payments are also raced for real from two threads
against a file-backed SQLite database.
"""

import threading
from decimal import Decimal

import pytest

from comanda import create_app
from comanda.constants import Channel, OrderStatus, Role
from comanda.errors import ConcurrencyError, OverpaymentError
from comanda.extensions import db
from comanda.models import Order, OrderCancellation, User
from comanda.services import cash_service, order_service, payment_service
from comanda.services.concurrency import transaction, update_if
from comanda.services.session_service import resolve_principal


def _race_with(monkeypatch, competing_call):
    """Run competing_call once, just before the first conditional write."""
    real_update_if = order_service.update_if
    fired = []

    def racing_update_if(*args, **kwargs):
        if not fired:
            fired.append(True)
            competing_call()
        return real_update_if(*args, **kwargs)

    monkeypatch.setattr(order_service, "update_if", racing_update_if)


class TestUpdateIf:

    def test_matches_expected_value(self, counter_order):
        matched = update_if(Order, counter_order["id"], {"status": OrderStatus.RECEIVED}, {"status": OrderStatus.IN_PREP})
        db.session.commit()
        assert matched == 1
        assert db.session.get(Order, counter_order["id"]).status == OrderStatus.IN_PREP

    def test_stale_expected_value_matches_nothing(self, counter_order):
        matched = update_if(Order, counter_order["id"], {"status": OrderStatus.READY}, {"status": OrderStatus.DELIVERED})
        db.session.commit()
        assert matched == 0
        assert db.session.get(Order, counter_order["id"]).status == OrderStatus.RECEIVED

    def test_none_means_is_null(self, counter_order):
        assert update_if(Order, counter_order["id"], {"paid_at": None}, {"requested_bill": True}) == 1
        db.session.commit()

    def test_transaction_rolls_back(self, counter_order):
        with pytest.raises(RuntimeError):
            with transaction():
                update_if(Order, counter_order["id"], {}, {"status": OrderStatus.IN_PREP})
                raise RuntimeError("boom")
        assert db.session.get(Order, counter_order["id"]).status == OrderStatus.RECEIVED


class TestStatusRaces:

    def test_kitchen_ready_loses_to_cashier_cancel(self, monkeypatch, kitchen, cashier, counter_order):
        order_id = counter_order["id"]
        order_service.change_status(kitchen, order_id, OrderStatus.IN_PREP)

        _race_with(monkeypatch, lambda: order_service.cancel_order(cashier, order_id, "Customer left"))

        with pytest.raises(ConcurrencyError):
            order_service.change_status(kitchen, order_id, OrderStatus.READY)

        order = db.session.get(Order, order_id)
        assert order.status == OrderStatus.CANCELLED
        assert db.session.query(OrderCancellation).filter_by(order_id=order_id).count() == 1

    def test_cancel_loses_to_status_change(self, monkeypatch, kitchen, cashier, counter_order):
        order_id = counter_order["id"]

        _race_with(monkeypatch, lambda: order_service.change_status(kitchen, order_id, OrderStatus.IN_PREP))

        with pytest.raises(ConcurrencyError):
            order_service.cancel_order(cashier, order_id, "Customer left")

        # Cancellation record rolled back with the failed status write
        assert db.session.get(Order, order_id).status == OrderStatus.IN_PREP
        assert db.session.query(OrderCancellation).count() == 0

    def test_same_read_two_targets_one_winner(self, monkeypatch, cashier, counter_order):
        order_id = counter_order["id"]
        order_service.change_status(cashier, order_id, OrderStatus.IN_PREP)
        order_service.change_status(cashier, order_id, OrderStatus.READY)

        winners = []

        def deliver():
            winners.append(order_service.change_status(cashier, order_id, OrderStatus.DELIVERED))

        _race_with(monkeypatch, deliver)

        with pytest.raises(ConcurrencyError):
            order_service.change_status(cashier, order_id, OrderStatus.CANCELLED, reason="Wrong table")

        assert len(winners) == 1
        assert db.session.get(Order, order_id).status == OrderStatus.DELIVERED

    def test_retry_after_conflict_sees_new_state(self, monkeypatch, kitchen, counter_order):
        order_id = counter_order["id"]
        _race_with(monkeypatch, lambda: order_service.change_status(kitchen, order_id, OrderStatus.IN_PREP))

        with pytest.raises(ConcurrencyError):
            order_service.change_status(kitchen, order_id, OrderStatus.IN_PREP)

        order = order_service.change_status(kitchen, order_id, OrderStatus.READY)
        assert order["status"] == OrderStatus.READY


# =============================================================================
# CONCURRENT PAYMENTS
# =============================================================================


@pytest.fixture
def file_app(tmp_path):
    """App on a file-backed SQLite database, so each thread gets its own connection."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'payments.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'check_same_thread': False, 'timeout': 30}},
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


class TestConcurrentPayments:

    def test_overlapping_payments_cannot_overpay(self, file_app, monkeypatch):
        with file_app.app_context():
            user = User(name="Cashier", email="cashier@comanda.test", role=Role.CASHIER, is_active=True)
            db.session.add(user)
            db.session.commit()
            cashier = resolve_principal(user.id)
            cash_service.open_session(cashier, "0.00")
            order_id = order_service.create_order(
                cashier,
                Channel.COUNTER,
                [{"product_name": "Paella", "quantity": 1, "unit_price": "25.00"}],
            )["id"]

        # Holds each caller at the balance read until the other one arrives.
        # Callers that are serialized never meet: the first times out and
        # breaks the barrier, the second finds it broken and reads straight away.
        both_reading = threading.Barrier(2, timeout=2)
        real_paid_total = payment_service.calculate_paid_total

        def paid_total_when_both_arrive(order_id):
            try:
                both_reading.wait()
            except threading.BrokenBarrierError:
                pass
            return real_paid_total(order_id)

        monkeypatch.setattr(payment_service, "calculate_paid_total", paid_total_when_both_arrive)

        outcomes = []

        def pay():
            with file_app.app_context():
                try:
                    payment_service.create_payment(cashier, order_id, "CASH", "15.00")
                    outcomes.append("accepted")
                except OverpaymentError:
                    outcomes.append("rejected")

        threads = [threading.Thread(target=pay) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert sorted(outcomes) == ["accepted", "rejected"]

        with file_app.app_context():
            order = db.session.get(Order, order_id)
            paid = real_paid_total(order_id)
            assert paid == Decimal("15.00")
            assert paid <= Decimal(order.total)
            assert order.paid_at is None
