"""
CLI command tests.

Verifies:
- Seeding is idempotent
- Permission listing by role and by category
- Permission checks against a stored user's role
"""

from comanda.constants import Role
from comanda.models import DiningTable, User


class TestSystemCommands:

    def test_seed_is_idempotent(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["system", "seed", "--tables", "3"])
        assert result.exit_code == 0, result.output
        assert "PASS Seed complete." in result.output

        result = runner.invoke(args=["system", "seed", "--tables", "3"])
        assert result.exit_code == 0, result.output
        assert "SKIP  User cashier@comanda.local" in result.output

        assert db_session.query(User).count() == 3
        assert db_session.query(DiningTable).count() == 3


class TestPermsCommands:

    def test_list_for_kitchen_has_no_prices(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["perms", "list", "--role", "kitchen"])
        assert result.exit_code == 0, result.output
        assert "Permissions for role: KITCHEN" in result.output
        assert "VIEW_KITCHEN_QUEUE" in result.output
        assert "VIEW_PRICES" not in result.output
        assert "Total: 4 permissions" in result.output

    def test_list_status_category_shows_edges(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["perms", "list", "--category", "STATUS"])
        assert result.exit_code == 0, result.output
        assert "STATUS_TO_CANCELLED" in result.output
        assert "READY -> CANCELLED" in result.output
        assert "RECEIVED -> IN_PREP" in result.output

    def test_list_all(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["perms", "list"])
        assert result.exit_code == 0, result.output
        assert "CATEGORY CASH" in result.output
        assert "VIEW_FINANCIAL_REPORTS" in result.output

    def test_check(self, app, cashier_user, kitchen_user):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["perms", "check", str(cashier_user.id), "VIEW_FINANCIAL_REPORTS"])
        assert result.exit_code == 0, result.output
        assert f"PASS User {cashier_user.id} ({Role.CASHIER}) HAS" in result.output

        result = runner.invoke(args=["perms", "check", str(kitchen_user.id), "view_prices"])
        assert result.exit_code == 0, result.output
        assert "DOES NOT HAVE permission 'VIEW_PRICES'" in result.output

    def test_check_unknown_code(self, app, cashier_user):
        result = app.test_cli_runner().invoke(args=["perms", "check", str(cashier_user.id), "NOPE"])
        assert result.exit_code != 0
        assert "Unknown permission" in result.output

    def test_check_unknown_user(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["perms", "check", "999", "VIEW_PRICES"])
        assert result.exit_code != 0
        assert "User 999 not found" in result.output
