"""Web helpers."""

from fastapi import Request

from auxidien.core.record import DuckDBEventJournal, PriceRecord


def get_request_id(request: Request) -> str | None:
    """Return the caller supplied ``X-Request-ID`` header, if any."""
    return request.headers.get("X-Request-ID")


def get_record(request: Request) -> PriceRecord:
    return request.app.state.record


def get_journal(request: Request) -> DuckDBEventJournal | None:
    return request.app.state.journal
