"""
Record clients used by the publication gateway.

``LocalRecordClient`` talks to an in-process :class:`PriceRecord`;
``HttpRecordClient`` talks to the record web service. Both return the
record's :class:`UpdateResult`, so a rejection is a value on either path.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import httpx
from loguru import logger

from auxidien.core.exceptions import (
    AdmissionError,
    AuthorizationError,
    MagnitudeError,
    RateLimitError,
    RecordUnavailableError,
    ValidationError,
)
from auxidien.core.models import Metal
from auxidien.core.record import PriceReading, PriceRecord, UpdateResult, event_from_payload

API_PREFIX = "/api/v1/record"

_ADMISSION_ERRORS: dict[str, type[AdmissionError]] = {
    cls.code.value: cls for cls in (AuthorizationError, ValidationError, RateLimitError, MagnitudeError)
}


@runtime_checkable
class RecordClient(Protocol):
    """Write and read access to the authoritative record."""

    async def propose_update(self, price: int, constituents: Mapping[Metal, int] | None = None) -> UpdateResult:
        ...

    async def latest(self) -> PriceReading:
        ...

    async def aclose(self) -> None:
        ...


class LocalRecordClient:
    """Proposes updates to an in-process record as a fixed caller account."""

    def __init__(self, record: PriceRecord, caller: str) -> None:
        self.record = record
        self.caller = caller

    async def propose_update(self, price: int, constituents: Mapping[Metal, int] | None = None) -> UpdateResult:
        return self.record.propose_update(self.caller, price, constituents)

    async def latest(self) -> PriceReading:
        return self.record.latest()

    async def aclose(self) -> None:
        return None


class HttpRecordClient:
    """Record web service client authenticated with a bearer token."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "User-Agent": "auxidien-watcher/0.1.0",
            },
            transport=transport,
        )

    async def propose_update(self, price: int, constituents: Mapping[Metal, int] | None = None) -> UpdateResult:
        body: dict[str, Any] = {"price": price}
        if constituents is not None:
            body["constituents"] = {metal.value: value for metal, value in constituents.items()}
        response = await self._request("POST", f"{API_PREFIX}/price", json=body)

        if response.status_code == 200:
            events = response.json()["data"].get("events", [])
            return UpdateResult.ok(*(event_from_payload(item) for item in events))

        error = _rejection_from_response(response)
        if error is None:
            raise RecordUnavailableError(
                f"record service returned {response.status_code}: {response.text}",
                endpoint=str(response.request.url),
                details={"status_code": response.status_code},
            )
        return UpdateResult.reject(error)

    async def latest(self) -> PriceReading:
        response = await self._request("GET", f"{API_PREFIX}/latest")
        if response.is_error:
            raise RecordUnavailableError(
                f"record service returned {response.status_code}: {response.text}",
                endpoint=str(response.request.url),
                details={"status_code": response.status_code},
            )
        data = response.json()["data"]
        return PriceReading(price=int(data["price"]), updated_at=int(data["updated_at"]), decimals=int(data["decimals"]))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Record service request {} {} failed: {}", method, path, exc)
            raise RecordUnavailableError(
                f"record service unreachable: {exc}", endpoint=f"{self.base_url}{path}"
            ) from exc


def _rejection_from_response(response: httpx.Response) -> AdmissionError | None:
    """Rebuild the admission error carried by a ``{"error": {...}}`` body."""
    try:
        payload = response.json()
    except ValueError:
        return None
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        return None
    error_cls = _ADMISSION_ERRORS.get(error.get("code", ""))
    if error_cls is None:
        return None
    details = dict(error.get("details") or {})
    message = error.get("message", "")
    if error_cls is RateLimitError:
        return RateLimitError(message, retry_after=details.pop("retry_after", None), details=details)
    return error_cls(message, details)


__all__ = ["API_PREFIX", "HttpRecordClient", "LocalRecordClient", "RecordClient"]
