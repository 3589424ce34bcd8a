from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from auxidien.cli import watcher as watcher_module
from auxidien.cli.main import create_app
from auxidien.core.config import WatcherSettings
from auxidien.core.exceptions import ConfigurationError
from auxidien.core.gateway import LocalRecordClient
from auxidien.core.providers import FailingSpotPriceProvider, StaticSpotPriceProvider
from auxidien.core.record import PriceRecord


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def local_settings() -> WatcherSettings:
    return WatcherSettings(
        _env_file=None,
        record_mode="local",
        goldapi_key="test-key",
        courtesy_delay_seconds=0,
        poll_interval_seconds=0.01,
    )


@pytest.fixture
def local_record(clock) -> PriceRecord:
    return PriceRecord("admin", updaters=["watcher"], clock=clock)


@pytest.fixture
def patched_watcher(monkeypatch, local_settings, local_record, metrics):
    monkeypatch.setattr(watcher_module, "get_settings", lambda: local_settings)
    monkeypatch.setattr(watcher_module, "get_provider", lambda settings: StaticSpotPriceProvider())
    monkeypatch.setattr(
        watcher_module, "get_record_client", lambda settings: LocalRecordClient(local_record, "watcher")
    )
    return local_record


def test_weights_defaults(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--log-level", "ERROR", "weights"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["regime"] == "MEDIUM"
    assert payload["target"]["XAU"] == pytest.approx(0.386055, abs=1e-5)
    assert payload["target"]["XPD"] == pytest.approx(0.151263, abs=1e-5)
    assert payload["target_sum"] == pytest.approx(1.0)
    assert payload["overshoot"]["XPT"] == pytest.approx(0.002106, abs=1e-5)
    assert payload["max_overshoot_bound"]["XPT"] == pytest.approx(0.0625, abs=1e-6)
    assert "weights" not in payload


def test_weights_with_overrides_and_steps(runner: CliRunner) -> None:
    result = runner.invoke(
        create_app(),
        ["--log-level", "ERROR", "weights", "--vol", "xau=0.10", "--vol", "silver=0.40", "--steps", "3"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["volatilities"]["XAU"] == 0.1
    assert payload["volatilities"]["XAG"] == 0.4
    assert payload["steps"] == 3
    assert sum(payload["weights"].values()) == pytest.approx(1.0, abs=1e-5)


def test_weights_rejects_non_positive_volatility(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--log-level", "ERROR", "weights", "--vol", "XAU=0"])

    assert result.exit_code == 2
    assert "VALIDATION_ERROR" in result.output


def test_weights_rejects_malformed_option(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--log-level", "ERROR", "weights", "--vol", "XAU"])

    assert result.exit_code == 2


def test_unknown_log_level_is_rejected(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--log-level", "LOUD", "weights"])

    assert result.exit_code == 2


def test_tick_publishes_to_local_record(runner: CliRunner, patched_watcher: PriceRecord) -> None:
    result = runner.invoke(create_app(), ["--log-level", "ERROR", "tick"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["result"]["accepted"] is True
    assert payload["record_price"] == payload["fixed_price"]
    assert patched_watcher.price() == payload["fixed_price"]


def test_tick_upstream_failure_exit_code(runner: CliRunner, monkeypatch, patched_watcher) -> None:
    monkeypatch.setattr(watcher_module, "get_provider", lambda settings: FailingSpotPriceProvider())

    result = runner.invoke(create_app(), ["--log-level", "ERROR", "tick"])

    assert result.exit_code == 3
    assert "UPSTREAM_FETCH_ERROR" in result.output
    assert patched_watcher.price() == 0


def test_missing_configuration_exit_code(runner: CliRunner, monkeypatch) -> None:
    def missing() -> WatcherSettings:
        raise ConfigurationError("missing required settings", missing=["AUXIDIEN_GOLDAPI_KEY"])

    monkeypatch.setattr(watcher_module, "get_settings", missing)

    result = runner.invoke(create_app(), ["--log-level", "ERROR", "run"])

    assert result.exit_code == 4
    assert "AUXIDIEN_GOLDAPI_KEY" in result.output


def test_run_reports_final_state(runner: CliRunner, patched_watcher: PriceRecord) -> None:
    result = runner.invoke(create_app(), ["--log-level", "ERROR", "run", "--max-ticks", "2"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["ticks"] == 2
    assert payload["published"] == 1
    assert payload["rejected"] == 1
    assert set(payload["weights"]) == {"XAU", "XAG", "XPT", "XPD"}


def test_local_record_client_factory() -> None:
    settings = WatcherSettings(_env_file=None, record_mode="local", goldapi_key="key")

    client = watcher_module.get_record_client(settings)

    assert isinstance(client, LocalRecordClient)
    assert client.caller == "watcher"
