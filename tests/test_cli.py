"""Tests for CLI commands."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from folio.cli import common
from folio.cli.main import app
from folio.config import get_settings
from folio.core.errors import ProviderConfigurationError, ProviderFetchError
from folio.core.portfolio import Portfolio, PortfolioRepository, PriceItem, WatchItem

from conftest import FakeQuoteProvider, MisconfiguredProvider, make_quote

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep the 11-column table from wrapping in captured output."""
    monkeypatch.setattr(common.console, "width", 200)


@pytest.fixture
def repo():
    return PortfolioRepository(get_settings().portfolio_path)


def saved(repo, *symbols):
    repo.save(Portfolio(default_currency="USD", items=[WatchItem(symbol=s) for s in symbols]))


class TestShowCommand:
    """Tests for `folio show`."""

    def test_creates_example_portfolio(self, repo):
        """First run writes the example file and shows its symbols."""
        provider = FakeQuoteProvider()
        with patch("folio.cli.common.get_quote_provider", return_value=provider):
            result = runner.invoke(app, ["show"])

        assert result.exit_code == 0, result.output
        assert "creating an example" in result.output
        assert repo.path.exists()
        for symbol in ("AAPL", "AMZN", "MSFT"):
            assert symbol in result.output
        assert provider.calls == ["AAPL", "AMZN", "MSFT"]

    def test_shows_quote_values(self, repo):
        """Prices and change appear in the table."""
        saved(repo, "AAPL")
        provider = FakeQuoteProvider(
            quotes={"AAPL": make_quote("AAPL", price="187.44", change="1.00", percent=3.0)}
        )
        with patch("folio.cli.common.get_quote_provider", return_value=provider):
            result = runner.invoke(app, ["show"])

        assert result.exit_code == 0, result.output
        assert "$187.44" in result.output
        assert "+$1.00 ↑3.0%" in result.output

    def test_fetch_error_shows_no_table(self, repo):
        """A failed fetch exits non-zero naming the symbol, without a table."""
        saved(repo, "AAPL", "BAD", "MSFT")
        provider = FakeQuoteProvider(errors={"BAD": "HTTP 500"})
        with patch("folio.cli.common.get_quote_provider", return_value=provider):
            result = runner.invoke(app, ["show"])

        assert result.exit_code == 1
        assert "BAD" in result.output
        assert "AAPL" not in result.output
        assert "MSFT" not in result.output

    def test_provider_configuration_error(self, repo):
        """Configuration problems are reported before any fetch."""
        saved(repo, "AAPL")
        with patch(
            "folio.cli.common.get_quote_provider",
            side_effect=ProviderConfigurationError("missing token"),
        ):
            result = runner.invoke(app, ["show"])

        assert result.exit_code == 1
        assert "Error configuring provider" in result.output

    def test_configuration_error_during_fetch(self, repo):
        """A provider that rejects its credentials mid-fetch is reported, not raised."""
        saved(repo, "AAPL")
        with patch("folio.cli.common.get_quote_provider", return_value=MisconfiguredProvider()):
            result = runner.invoke(app, ["show"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, ProviderConfigurationError)
        assert "Error configuring provider: API token expired" in result.output

    def test_malformed_file(self, repo):
        """A broken holdings file is reported, not overwritten."""
        repo.path.write_text("holdings: [unclosed\n")
        result = runner.invoke(app, ["show"])

        assert result.exit_code == 1
        assert "Cannot load portfolio" in result.output
        assert repo.path.read_text() == "holdings: [unclosed\n"


class TestWatchCommand:
    """Tests for `folio watch`."""

    def test_passes_delay_and_renders(self, repo):
        """The delay option reaches the loop and renders are printed."""
        saved(repo, "AAPL")
        provider = FakeQuoteProvider()

        def fake_loop(portfolio, provider, delay, on_render, on_error, tolerate_errors, ctx):
            from folio.core.quotes import render_once

            assert delay == 5
            assert tolerate_errors is True
            on_render(render_once(portfolio, provider, ctx))
            on_error(ProviderFetchError("AAPL", "HTTP 503"))

        with patch("folio.cli.common.get_quote_provider", return_value=provider), patch(
            "folio.cli.quotes.run_refresh_loop", side_effect=fake_loop
        ):
            result = runner.invoke(app, ["watch", "-d", "5"])

        assert result.exit_code == 0, result.output
        assert "AAPL" in result.output
        assert "Last updated" in result.output
        assert "Refresh failed" in result.output
        assert "retrying in 5s" in result.output

    def test_stop_on_error(self, repo):
        """--stop-on-error disables tolerance and exits non-zero on failure."""
        saved(repo, "AAPL")

        def fake_loop(portfolio, provider, delay, on_render, on_error, tolerate_errors, ctx):
            assert tolerate_errors is False
            error = ProviderFetchError("AAPL", "HTTP 503")
            on_error(error)
            raise error

        with patch("folio.cli.common.get_quote_provider", return_value=FakeQuoteProvider()), patch(
            "folio.cli.quotes.run_refresh_loop", side_effect=fake_loop
        ):
            result = runner.invoke(app, ["watch", "--stop-on-error"])

        assert result.exit_code == 1
        assert "Refresh failed" in result.output
        assert "retrying" not in result.output

    def test_configuration_error_ends_watch(self, repo):
        """Configuration errors stop the loop even though fetch errors are tolerated."""
        saved(repo, "AAPL")
        provider = MisconfiguredProvider()
        with patch("folio.cli.common.get_quote_provider", return_value=provider):
            result = runner.invoke(app, ["watch", "-d", "5"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, ProviderConfigurationError)
        assert "Error configuring provider: API token expired" in result.output
        assert provider.calls == ["AAPL"]

    def test_rejects_zero_delay(self, repo):
        """Delays below the minimum are refused by the option parser."""
        saved(repo, "AAPL")
        result = runner.invoke(app, ["watch", "-d", "0"])
        assert result.exit_code != 0


class TestHoldingsCommands:
    """Tests for `folio holdings`, `add` and `delete`."""

    def test_add_watch(self, repo):
        """A bare symbol is added as a watch."""
        saved(repo, "AAPL")
        result = runner.invoke(app, ["add", "TSLA"])

        assert result.exit_code == 0, result.output
        items = repo.load().items
        assert [i.symbol for i in items] == ["AAPL", "TSLA"]
        assert isinstance(items[-1], WatchItem)

    def test_add_priced(self, repo):
        """Price, quantity and date create a holding in the default currency."""
        saved(repo)
        result = runner.invoke(
            app, ["add", "MSFT", "-p", "250.10", "-q", "10", "-d", "2024-03-01"]
        )

        assert result.exit_code == 0, result.output
        (item,) = repo.load().items
        assert isinstance(item, PriceItem)
        assert item.holding.quantity == 10
        assert item.holding.purchase_price.minor == 25010
        assert item.holding.purchase_price.currency == "USD"
        assert str(item.holding.purchase_date) == "2024-03-01"

    def test_add_duplicate_allowed(self, repo):
        """Adding a tracked symbol again appends another entry."""
        saved(repo, "AAPL")
        result = runner.invoke(app, ["add", "AAPL", "-q", "1", "-p", "100"])

        assert result.exit_code == 0, result.output
        assert [i.symbol for i in repo.load().items] == ["AAPL", "AAPL"]

    @pytest.mark.parametrize(
        "args,message",
        [
            (["add", "MSFT", "-p", "abc"], "Invalid price"),
            (["add", "MSFT", "-p", "-5"], "must not be negative"),
            (["add", "MSFT", "-q", "1", "-d", "03/01/2024"], "Invalid date"),
        ],
    )
    def test_add_invalid_input(self, repo, args, message):
        """Bad input exits non-zero and leaves the file alone."""
        saved(repo, "AAPL")
        result = runner.invoke(app, args)

        assert result.exit_code == 1
        assert message in result.output
        assert [i.symbol for i in repo.load().items] == ["AAPL"]

    def test_delete_removes_all_entries(self, repo):
        """--force skips the prompt and removes every entry for the symbol."""
        saved(repo, "AAPL", "MSFT", "AAPL")
        result = runner.invoke(app, ["delete", "AAPL", "--force"])

        assert result.exit_code == 0, result.output
        assert [i.symbol for i in repo.load().items] == ["MSFT"]

    def test_delete_cancelled(self, repo):
        """Declining the prompt keeps the file unchanged."""
        saved(repo, "AAPL")
        result = runner.invoke(app, ["delete", "AAPL"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert [i.symbol for i in repo.load().items] == ["AAPL"]

    def test_delete_unknown(self, repo):
        """Deleting an untracked symbol is an error."""
        saved(repo, "AAPL")
        result = runner.invoke(app, ["delete", "MSFT", "-f"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_holdings_listing(self, repo):
        """Priced holdings are tabled and watches listed after."""
        saved(repo, "AAPL")
        runner.invoke(app, ["add", "MSFT", "-p", "250.10", "-q", "10"])
        result = runner.invoke(app, ["holdings"])

        assert result.exit_code == 0, result.output
        assert "MSFT" in result.output
        assert "$250.10" in result.output
        assert "Also watching: AAPL" in result.output

    def test_version(self):
        """Version command prints the product version."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output
