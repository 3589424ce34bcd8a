"""
Configuration management for auxidien.

Settings come from environment variables (``AUXIDIEN_`` prefix for the
watcher, ``AUXIDIEN_RECORD_`` for the record service) and an optional
``.env`` file.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from auxidien.core.exceptions import ConfigurationError


class WatcherSettings(BaseSettings):
    """Settings for the index watcher: upstream polling, weighting and publication."""

    model_config = SettingsConfigDict(
        env_prefix="AUXIDIEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Record
    record_mode: Literal["http", "local"] = Field(
        "http", description="Publish to a remote record service or an in-process record"
    )
    record_url: str | None = Field(None, description="Base URL of the record service")
    signing_key: str | None = Field(None, description="Bearer credential identifying the publisher")
    local_caller: str = Field("watcher", description="Publisher account used in local mode")

    # Upstream
    goldapi_key: str | None = Field(None, description="Upstream spot price API credential")
    goldapi_base_url: str = Field("https://www.goldapi.io/api", description="Upstream API base URL")
    request_timeout: float = Field(30.0, gt=0, description="Upstream request timeout in seconds")
    courtesy_delay_seconds: float = Field(1.5, ge=0, description="Pause between upstream calls")

    # Processing
    poll_interval_seconds: float = Field(300.0, gt=0, description="Tick interval")
    smoothing_lambda: float = Field(0.08, gt=0, le=1, description="Weight transition factor")
    history_capacity: int = Field(288, ge=2, description="Samples kept per metal")

    # Logging
    log_level: str = Field("INFO", description="Log level")
    log_json: bool = Field(False, description="Emit JSON log lines")
    log_file: str | None = Field(None, description="Optional JSON log file")

    def missing_for_publishing(self) -> list[str]:
        missing: list[str] = []
        if self.record_mode == "http":
            if not self.record_url:
                missing.append("AUXIDIEN_RECORD_URL")
            if not self.signing_key:
                missing.append("AUXIDIEN_SIGNING_KEY")
        if not self.goldapi_key:
            missing.append("AUXIDIEN_GOLDAPI_KEY")
        return missing

    def require_publishing(self) -> "WatcherSettings":
        """Raise :class:`ConfigurationError` naming every missing setting."""
        missing = self.missing_for_publishing()
        if missing:
            raise ConfigurationError(f"missing required settings: {', '.join(missing)}", missing=missing)
        return self


class RecordServiceSettings(BaseSettings):
    """Settings for the record web service."""

    model_config = SettingsConfigDict(
        env_prefix="AUXIDIEN_RECORD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    admin_account: str = Field("admin", description="Account holding the ADMIN role")
    # token -> account, e.g. AUXIDIEN_RECORD_API_TOKENS='{"s3cret": "watcher"}'
    api_tokens: dict[str, str] = Field(default_factory=dict, description="Bearer tokens by account")
    updaters: list[str] = Field(default_factory=list, description="Accounts granted UPDATER at start")
    min_update_interval: int = Field(300, ge=0, description="Seconds between accepted updates")
    max_change_rate_bps: int = Field(500, gt=0, le=10_000, description="Max change per update in bps")
    journal_path: str | None = Field(None, description="DuckDB file for the event journal")
    host: str = Field("0.0.0.0", description="Bind host")
    port: int = Field(8000, description="Bind port")

    @model_validator(mode="after")
    def _admin_has_token(self) -> "RecordServiceSettings":
        if self.api_tokens and self.admin_account not in self.api_tokens.values():
            raise ValueError(f"no API token maps to admin account {self.admin_account!r}")
        return self


def load_watcher_settings(**overrides: object) -> WatcherSettings:
    """Load watcher settings, converting validation failures to :class:`ConfigurationError`."""
    try:
        return WatcherSettings(**overrides)
    except ValueError as exc:
        raise ConfigurationError(f"invalid watcher settings: {exc}") from exc


__all__ = ["RecordServiceSettings", "WatcherSettings", "load_watcher_settings"]
