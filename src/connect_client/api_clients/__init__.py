"""API Client Abstractions for the Connect XML API.

All network calls go through the request dispatcher of ConnectAPIClient;
every action answers with an Outcome (status envelope).
"""

from .base_client import ConnectAPIClient
from .sco_client import ScoAPIClient
from .status import Outcome, StatusCode, StatusSubCode, TypedResult
from .models import MeetingDetail, MeetingItem, MeetingUpdateItem, UserInfo
from .transport import HttpTransport, RawResponse, Transport
from .network_error_handler import (
    TransportError,
    NetworkConnectionError,
    NetworkTimeoutError,
    DNSResolutionError,
    SSLCertificateError,
    HTTPStatusError,
    ServerError,
    MalformedResponseError,
)

__all__ = [
    # Clients
    "ConnectAPIClient",
    "ScoAPIClient",
    # Status envelope
    "Outcome",
    "StatusCode",
    "StatusSubCode",
    "TypedResult",
    # Domain records
    "MeetingDetail",
    "MeetingItem",
    "MeetingUpdateItem",
    "UserInfo",
    # Transport
    "HttpTransport",
    "RawResponse",
    "Transport",
    # Transport errors
    "TransportError",
    "NetworkConnectionError",
    "NetworkTimeoutError",
    "DNSResolutionError",
    "SSLCertificateError",
    "HTTPStatusError",
    "ServerError",
    "MalformedResponseError",
]
