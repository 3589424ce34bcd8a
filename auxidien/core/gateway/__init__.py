"""Publication of index values to the authoritative record."""

from .clients import API_PREFIX, HttpRecordClient, LocalRecordClient, RecordClient
from .publication import DEFAULT_COURTESY_DELAY, PublicationGateway, TickReport
from .scheduler import TickScheduler

__all__ = [
    "API_PREFIX",
    "DEFAULT_COURTESY_DELAY",
    "HttpRecordClient",
    "LocalRecordClient",
    "PublicationGateway",
    "RecordClient",
    "TickReport",
    "TickScheduler",
]
