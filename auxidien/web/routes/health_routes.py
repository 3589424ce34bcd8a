"""
Health check routes.
"""

import time

from fastapi import APIRouter, Request

from auxidien import __version__
from auxidien.web.models import APIResponse
from auxidien.web.utils import get_record, get_request_id

router = APIRouter()


@router.get("/health", response_model=APIResponse)
def health_check(request: Request) -> APIResponse:
    """
    Liveness plus the record's state.

    A record that has never accepted an update reports ``UNINITIALIZED``;
    the service itself is still healthy.
    """
    record = get_record(request)
    return APIResponse(
        success=True,
        data={
            "status": "healthy",
            "version": __version__,
            "uptime_seconds": round(time.time() - request.app.state.start_time, 3),
            "record_state": record.state.value,
            "journal": request.app.state.journal is not None,
        },
        message="record service healthy",
        request_id=get_request_id(request),
    )
