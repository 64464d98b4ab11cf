"""Kitchen and waiter view tests."""

import pytest

from comanda.constants import Channel, OrderStatus
from comanda.errors import ForbiddenError, ValidationError
from comanda.services import kitchen_service, order_service, payment_service, waiter_service


PRICE_KEYS = {"unit_price", "line_total", "total", "price"}


class TestKitchenView:

    def test_queue_hides_prices(self, kitchen, table_order):
        """Scenario A, kitchen side."""
        queue = kitchen_service.kitchen_queue(kitchen)
        assert len(queue) == 1
        order = queue[0]
        assert not PRICE_KEYS & set(order)
        assert [(i["product_name"], i["quantity"]) for i in order["items"]] == [("Burger", 2), ("Soda", 1)]
        for item in order["items"]:
            assert not PRICE_KEYS & set(item)

    def test_queue_oldest_first_and_scoped(self, kitchen, cashier, table_order, counter_order):
        order_service.change_status(cashier, counter_order["id"], OrderStatus.IN_PREP)
        assert [o["id"] for o in kitchen_service.kitchen_queue(kitchen)] == [table_order["id"], counter_order["id"]]

        order_service.change_status(cashier, counter_order["id"], OrderStatus.READY)
        assert [o["id"] for o in kitchen_service.kitchen_queue(kitchen)] == [table_order["id"]]

        order_service.cancel_order(cashier, table_order["id"], "Customer left")
        assert kitchen_service.kitchen_queue(kitchen) == []

    def test_paid_orders_leave_queue(self, kitchen, cashier, counter_order, open_cash_session):
        payment_service.create_payment(cashier, counter_order["id"], "CASH", "20.00")
        assert kitchen_service.kitchen_queue(kitchen) == []

    def test_start_and_ready(self, kitchen, table_order):
        started = kitchen_service.start_preparation(kitchen, table_order["id"])
        assert started["status"] == OrderStatus.IN_PREP
        ready = kitchen_service.mark_ready(kitchen, table_order["id"])
        assert ready["status"] == OrderStatus.READY
        assert not PRICE_KEYS & set(ready)

    def test_kitchen_order(self, kitchen, table_order):
        order = kitchen_service.kitchen_order(kitchen, table_order["id"])
        assert order["table"] == "Table 1"

    def test_waiter_has_no_kitchen_view(self, waiter, table_order):
        with pytest.raises(ForbiddenError):
            kitchen_service.kitchen_queue(waiter)


class TestWaiterView:

    def test_table_board(self, waiter, table, second_table, table_order):
        board = waiter_service.table_board(waiter)
        assert [entry["table"]["number"] for entry in board] == [1, 2]
        assert board[0]["is_occupied"] is True
        assert board[0]["active_order_id"] == table_order["id"]
        assert board[0]["active_order_status"] == "RECEIVED"
        assert board[0]["requested_bill"] is False
        assert board[0]["order"]["total"] == "25.00"
        assert board[1]["is_occupied"] is False
        assert board[1]["order"] is None

    def test_ready_filter_and_deliver(self, waiter, kitchen, table_order, counter_order):
        kitchen_service.start_preparation(kitchen, table_order["id"])
        kitchen_service.mark_ready(kitchen, table_order["id"])

        ready = waiter_service.waiter_orders(waiter, ready_only=True)
        assert [o["id"] for o in ready] == [table_order["id"]]

        delivered = waiter_service.deliver(waiter, table_order["id"])
        assert delivered["status"] == OrderStatus.DELIVERED
        assert waiter_service.waiter_orders(waiter, ready_only=True) == []

    def test_filters(self, waiter, table_order, counter_order):
        assert [o["id"] for o in waiter_service.waiter_orders(waiter, channel=Channel.TABLE)] == [table_order["id"]]
        assert len(waiter_service.waiter_orders(waiter, status="received")) == 2
        with pytest.raises(ValidationError):
            waiter_service.waiter_orders(waiter, status="EATEN")

    def test_waiter_order(self, waiter, table_order):
        assert waiter_service.waiter_order(waiter, table_order["id"])["items"][1]["unit_price"] == "5.00"

    def test_kitchen_has_no_waiter_view(self, kitchen, table):
        with pytest.raises(ForbiddenError):
            waiter_service.table_board(kitchen)
