"""
Price record routes.

Reads are public. Writes take a bearer token; the account it maps to is
the caller the record checks roles against. A rejected operation is
raised as its ``AdmissionError`` and mapped to a status code by the
application's exception handlers.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, Request
from loguru import logger

from auxidien.core.monitoring import get_metrics_collector
from auxidien.core.record import DECIMALS, UpdateResult
from auxidien.web.auth import current_account
from auxidien.web.models import APIResponse, IntervalRequest, MaxChangeRateRequest, PriceUpdateRequest
from auxidien.web.utils import get_journal, get_record, get_request_id

router = APIRouter()


def _accepted(request: Request, result: UpdateResult, message: str) -> APIResponse:
    result.raise_for_rejection()
    return APIResponse(success=True, data=result.to_dict(), message=message, request_id=get_request_id(request))


@router.get("/price", response_model=APIResponse)
def read_price(request: Request) -> APIResponse:
    """Stored index price in fixed point."""
    record = get_record(request)
    return APIResponse(
        success=True,
        data={"price": record.price(), "decimals": DECIMALS},
        request_id=get_request_id(request),
    )


@router.get("/latest", response_model=APIResponse)
def read_latest(request: Request) -> APIResponse:
    """Stored price with the time it was accepted."""
    reading = get_record(request).latest()
    return APIResponse(success=True, data=asdict(reading), request_id=get_request_id(request))


@router.get("/constituents", response_model=APIResponse)
def read_constituents(request: Request) -> APIResponse:
    snapshot = get_record(request).constituents()
    return APIResponse(
        success=True,
        data=asdict(snapshot) if snapshot is not None else None,
        message=None if snapshot is not None else "no constituent snapshot recorded",
        request_id=get_request_id(request),
    )


@router.get("/stale", response_model=APIResponse)
def read_stale(
    request: Request,
    max_age: int = Query(..., ge=0, description="Maximum acceptable age in seconds"),
) -> APIResponse:
    stale = get_record(request).is_stale(max_age)
    return APIResponse(success=True, data={"stale": stale, "max_age": max_age}, request_id=get_request_id(request))


@router.get("/status", response_model=APIResponse)
def read_status(request: Request) -> APIResponse:
    """State, price and admission parameters in one payload."""
    return APIResponse(success=True, data=get_record(request).status(), request_id=get_request_id(request))


@router.get("/events", response_model=APIResponse)
def read_events(
    request: Request,
    event: str | None = Query(None, description="Filter by event name, e.g. price_updated"),
    limit: int | None = Query(None, ge=1, le=10000),
) -> APIResponse:
    journal = get_journal(request)
    if journal is None:
        return APIResponse(success=True, data=[], message="event journal disabled", request_id=get_request_id(request))
    return APIResponse(success=True, data=journal.entries(event=event, limit=limit), request_id=get_request_id(request))


@router.post("/price", response_model=APIResponse)
def propose_price(
    body: PriceUpdateRequest,
    request: Request,
    account: str = Depends(current_account),
) -> APIResponse:
    """Propose a new index price (UPDATER role)."""
    record = get_record(request)
    result = record.propose_update(account, body.price, body.constituents)
    metrics = get_metrics_collector()
    if result.accepted:
        metrics.set_record_price(record.price())
        logger.info("Accepted price {} from {}", body.price, account)
    else:
        metrics.record_rejection(result.reason or "unknown")
        logger.info("Rejected price {} from {}: {}", body.price, account, result.reason)
    return _accepted(request, result, "price updated")


@router.post("/roles/{target}", response_model=APIResponse)
def grant_updater(target: str, request: Request, account: str = Depends(current_account)) -> APIResponse:
    """Grant the UPDATER role (ADMIN role)."""
    result = get_record(request).grant_updater(account, target)
    return _accepted(request, result, f"updater role granted to {target}")


@router.delete("/roles/{target}", response_model=APIResponse)
def revoke_updater(target: str, request: Request, account: str = Depends(current_account)) -> APIResponse:
    """Revoke the UPDATER role (ADMIN role)."""
    result = get_record(request).revoke_updater(account, target)
    return _accepted(request, result, f"updater role revoked from {target}")


@router.put("/config/min-update-interval", response_model=APIResponse)
def set_min_update_interval(
    body: IntervalRequest,
    request: Request,
    account: str = Depends(current_account),
) -> APIResponse:
    result = get_record(request).set_min_update_interval(account, body.seconds)
    return _accepted(request, result, "minimum update interval changed")


@router.put("/config/max-change-rate", response_model=APIResponse)
def set_max_change_rate(
    body: MaxChangeRateRequest,
    request: Request,
    account: str = Depends(current_account),
) -> APIResponse:
    result = get_record(request).set_max_change_rate(account, body.bps)
    return _accepted(request, result, "max change rate changed")
