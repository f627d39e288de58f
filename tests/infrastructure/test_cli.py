"""End-to-end tests for the click CLI against a temporary JSON store.

Notifications and the payment gateway are swapped for in-memory fakes.
"""

import pytest
from click.testing import CliRunner

from storefront.config import set_config_for_test
from storefront.infrastructure.cli import order_commands
from storefront.infrastructure.cli.main import cli
from tests.fakes import FakePaymentGateway, RecordingNotifier

PASSWORD = "letmein"


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.delenv("STOREFRONT_ADMIN_TOKEN", raising=False)
    set_config_for_test(_env_file=None, data_dir=str(tmp_path), admin_password=PASSWORD)
    monkeypatch.setattr(order_commands, "notifier", RecordingNotifier)
    gateway = FakePaymentGateway()
    monkeypatch.setattr(order_commands, "payment_gateway", lambda: gateway)
    runner = CliRunner()
    result = runner.invoke(cli, ["seed"])
    assert result.exit_code == 0, result.output
    return runner


def _token(runner: CliRunner) -> str:
    result = runner.invoke(cli, ["admin", "login", "--password", PASSWORD])
    assert result.exit_code == 0, result.output
    return result.output.splitlines()[0].strip()


CHECKOUT = [
    "order", "checkout", "--name", "Ada", "--email", "ada@example.com",
    "--items", "4:1", "--zone", "lagos_mainland",
]


class TestCatalogCommands:

    def test_seed_is_repeatable(self, runner):
        result = runner.invoke(cli, ["seed"])
        assert result.exit_code == 0
        assert "none added" in result.output

    def test_product_list(self, runner):
        result = runner.invoke(cli, ["product", "list", "--category", "grocery"])
        assert result.exit_code == 0
        assert "Long Grain Rice (50kg)" in result.output

    def test_zone_quote(self, runner):
        result = runner.invoke(cli, ["zone", "quote", "--zone", "lagos_mainland", "--subtotal", "50000"])
        assert result.exit_code == 0
        assert "Grand total: ₦53,000" in result.output

    def test_uncovered_zone_quote_reports_status(self, runner):
        result = runner.invoke(cli, ["zone", "quote", "--zone", "outside_coverage", "--subtotal", "1000"])
        assert result.exit_code == 0
        assert "Delivery is not available" in result.output


class TestCheckoutCommands:

    def test_whatsapp_checkout(self, runner):
        result = runner.invoke(cli, CHECKOUT + ["--channel", "whatsapp"])
        assert result.exit_code == 0, result.output
        assert "status=processing" in result.output
        assert "₦78,000" in result.output

    def test_card_checkout_prints_payment_link(self, runner):
        result = runner.invoke(cli, CHECKOUT)
        assert result.exit_code == 0, result.output
        assert "status=pending_payment" in result.output
        assert "Pay here: https://checkout.example/VB-" in result.output

    def test_uncovered_zone_is_an_error(self, runner):
        args = CHECKOUT[:-1] + ["outside_coverage"]
        result = runner.invoke(cli, args)
        assert result.exit_code != 0
        assert "Choose another delivery location" in result.output

    def test_bad_items_format(self, runner):
        args = [a if a != "4:1" else "4x1" for a in CHECKOUT]
        result = runner.invoke(cli, args)
        assert result.exit_code == 2
        assert "ProductId:Quantity" in result.output


class TestAdminCommands:

    def test_login_with_wrong_password(self, runner):
        result = runner.invoke(cli, ["admin", "login", "--password", "nope"])
        assert result.exit_code == 1
        assert "Invalid credentials" in result.output

    def test_admin_command_needs_token(self, runner):
        result = runner.invoke(cli, ["order", "list"])
        assert result.exit_code == 1
        assert "Admin token is missing" in result.output

    def test_status_change_with_token(self, runner):
        runner.invoke(cli, CHECKOUT + ["--channel", "whatsapp"])
        token = _token(runner)

        result = runner.invoke(cli, ["order", "status", "--id", "1", "--to", "delivered", "--token", token])
        assert result.exit_code == 0, result.output
        assert "Order #1 is now delivered." in result.output

        listing = runner.invoke(cli, ["order", "list", "--token", token])
        assert "delivered" in listing.output

    def test_token_from_environment(self, runner):
        token = _token(runner)
        result = runner.invoke(
            cli,
            ["coupon", "add", "--code", "save10", "--type", "percent", "--value", "10"],
            env={"STOREFRONT_ADMIN_TOKEN": token},
        )
        assert result.exit_code == 0, result.output
        assert "Coupon SAVE10 created" in result.output

    def test_product_delete(self, runner):
        token = _token(runner)
        result = runner.invoke(cli, ["product", "delete", "--id", "4", "--token", token])
        assert result.exit_code == 0, result.output
        assert "Product #4 'Long Grain Rice (50kg)' deleted" in result.output

        again = runner.invoke(cli, ["product", "delete", "--id", "4", "--token", token])
        assert again.exit_code == 1
        assert "Product #4 not found" in again.output

    def test_low_stock_summary_without_email_setup(self, runner):
        token = _token(runner)
        result = runner.invoke(cli, ["product", "low-stock-summary", "--token", token])
        assert result.exit_code == 0, result.output
        assert "Low-stock alerts: 4" in result.output
        assert "In-stock products tracked: 8" in result.output
        assert "#3 2019 Mercedes GLK: 1 / threshold 5" in result.output
        assert "Email skipped" in result.output

    def test_order_list_by_account(self, runner):
        runner.invoke(cli, CHECKOUT + ["--user-id", "7"])
        guest = [a if a != "ada@example.com" else "guest@example.com" for a in CHECKOUT]
        runner.invoke(cli, guest)
        token = _token(runner)

        result = runner.invoke(cli, ["order", "list", "--user-id", "7", "--token", token])
        assert result.exit_code == 0, result.output
        assert "ada@example.com" in result.output
        assert "guest@example.com" not in result.output
