"""Configuration module."""

from .settings import RecordServiceSettings, WatcherSettings, load_watcher_settings

__all__ = ["RecordServiceSettings", "WatcherSettings", "load_watcher_settings"]
