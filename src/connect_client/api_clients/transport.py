"""HTTP transport for the Connect XML API.

The transport performs the literal network call for one action: it encodes
the parameter string, issues ``GET <service-url>?action=<name>&...`` and
returns the raw reply. It keeps no cookies of its own: the session cookie of
a reply is handed back in the RawResponse and only sent again when the caller
passes it explicitly.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

import httpx

from ..config import ClientSettings
from .network_error_handler import NetworkErrorHandler

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "BREEZESESSION"


@dataclass(frozen=True)
class RawResponse:
    """Unclassified reply to one action."""

    status_code: int
    body: bytes
    session_cookie: Optional[str] = None


class Transport(Protocol):
    """Contract consumed by the request dispatcher."""

    async def process_request(
        self, action: str, params: Optional[str], session_cookie: Optional[str] = None
    ) -> RawResponse:
        ...

    async def aclose(self) -> None:
        ...


def split_params(params: Optional[str]) -> List[Tuple[str, str]]:
    """Split an unescaped ``k=v&k2=v2`` parameter string into pairs.

    Repeated keys are kept in order. A pair without ``=`` maps to an empty
    value; empty segments are dropped.
    """
    if not params:
        return []

    pairs = []
    for segment in params.split("&"):
        if not segment:
            continue
        key, _, value = segment.partition("=")
        pairs.append((key, value))
    return pairs


class HttpTransport:
    """Transport issuing XML API requests through an ``httpx.AsyncClient``."""

    def __init__(
        self,
        settings: ClientSettings,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the HTTP transport.

        Args:
            settings: Client settings (endpoint, proxy, timeout, SSL)
            http_transport: Optional httpx transport, e.g. an in-process app
        """
        self.settings = settings
        self._http_transport = http_transport
        self._session: Optional[httpx.AsyncClient] = None
        self._error_handler = NetworkErrorHandler()

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the HTTP session."""
        if self._session is None or self._session.is_closed:
            timeouts = httpx.Timeout(self.settings.timeout_seconds)

            limits = httpx.Limits(
                max_connections=10,
                max_keepalive_connections=5,
                keepalive_expiry=30.0,
            )

            client_kwargs = {
                "timeout": timeouts,
                "limits": limits,
                "headers": {"Accept": "text/xml, application/xml"},
                "follow_redirects": True,
                "verify": self.settings.verify_ssl,
            }
            if self._http_transport is not None:
                client_kwargs["transport"] = self._http_transport
            elif self.settings.proxy_url:
                client_kwargs["proxy"] = self.settings.proxy_url

            self._session = httpx.AsyncClient(**client_kwargs)
        return self._session

    async def process_request(
        self, action: str, params: Optional[str], session_cookie: Optional[str] = None
    ) -> RawResponse:
        """Perform one XML API call.

        Args:
            action: Action name, e.g. ``login`` or ``sco-update``
            params: Unescaped parameter string or None
            session_cookie: Session token to send as the session cookie

        Returns:
            RawResponse with the reply body and the session cookie, if any

        Raises:
            TransportError: Classified network failure or HTTP error status
        """
        query = [("action", action)] + split_params(params)
        headers = {}
        if session_cookie:
            headers["Cookie"] = f"{SESSION_COOKIE_NAME}={session_cookie}"
        logger.debug(f"Sending action '{action}' ({len(query) - 1} parameters)")

        try:
            response = await self.session.get(
                self.settings.service_url, params=query, headers=headers
            )
        except httpx.HTTPError as e:
            raise self._error_handler.classify_network_error(e) from e
        finally:
            # Server cookies must not be replayed on later requests
            if self._session is not None:
                self._session.cookies.clear()

        if response.status_code >= 400:
            raise self._error_handler.classify_http_status(response.status_code)

        return RawResponse(
            status_code=response.status_code,
            body=response.content,
            session_cookie=response.cookies.get(SESSION_COOKIE_NAME),
        )

    async def aclose(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()
