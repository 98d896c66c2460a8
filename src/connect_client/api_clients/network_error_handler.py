"""Network Error Handler for the Connect XML API Client.

Classifies transport-level failures (httpx exceptions, HTTP error statuses,
unreadable replies) into a small set of exception types and provides user
guidance for each of them. Classified errors are returned, not raised: the
dispatcher stores them on the outcome of the failed action.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, cast

import httpx

logger = logging.getLogger(__name__)


@dataclass
class UserGuidance:
    """User guidance information for transport errors."""

    error_type: str
    troubleshooting_steps: List[str]
    contact_info: Optional[str] = None
    additional_notes: List[str] = field(default_factory=list)

    def format_for_console(self) -> str:
        """Format guidance for rich console output."""
        content = []
        content.append(f"[bold red]Error Type:[/bold red] {self.error_type}")
        content.append("")
        content.append("[bold yellow]Troubleshooting Steps:[/bold yellow]")

        for i, step in enumerate(self.troubleshooting_steps, 1):
            content.append(f"{i}. {step}")

        if self.additional_notes:
            content.append("")
            content.append("[bold blue]Additional Notes:[/bold blue]")
            for note in self.additional_notes:
                content.append(f"• {note}")

        if self.contact_info:
            content.append("")
            content.append(f"[bold green]Support:[/bold green] {self.contact_info}")

        return "\n".join(content)


class TransportError(Exception):
    """Base exception for failures below the status envelope."""

    def __init__(self, message: str, user_guidance: Optional[str] = None):
        super().__init__(message)
        self.user_guidance = user_guidance or ""


class NetworkConnectionError(TransportError):
    """Exception raised for connection-related network failures."""

    pass


class NetworkTimeoutError(TransportError):
    """Exception raised for timeout-related network failures."""

    pass


class DNSResolutionError(TransportError):
    """Exception raised for DNS resolution failures."""

    pass


class SSLCertificateError(TransportError):
    """Exception raised for SSL certificate verification failures."""

    pass


class HTTPStatusError(TransportError):
    """Exception raised for non-success HTTP statuses other than 5xx."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        user_guidance: Optional[str] = None,
    ):
        super().__init__(message, user_guidance)
        self.status_code = status_code


class ServerError(HTTPStatusError):
    """Exception raised for server-side errors (5xx responses)."""

    pass


class MalformedResponseError(TransportError):
    """Exception raised when a reply is not a readable status document."""

    pass


class UserGuidanceProvider:
    """Provides user guidance for different transport error scenarios."""

    def __init__(self):
        self._guidance_mapping = {
            NetworkConnectionError: self._get_connection_error_guidance,
            DNSResolutionError: self._get_dns_resolution_guidance,
            SSLCertificateError: self._get_ssl_certificate_guidance,
            NetworkTimeoutError: self._get_timeout_guidance,
            ServerError: self._get_server_error_guidance,
            HTTPStatusError: self._get_http_status_guidance,
            MalformedResponseError: self._get_malformed_response_guidance,
        }

    def get_guidance(self, error: BaseException) -> UserGuidance:
        """Get user guidance for a specific error."""
        guidance_func = self._guidance_mapping.get(
            type(error), self._get_generic_guidance
        )
        return cast(UserGuidance, guidance_func(error))

    def _get_connection_error_guidance(
        self, error: NetworkConnectionError
    ) -> UserGuidance:
        return UserGuidance(
            error_type="Network Connection Error",
            troubleshooting_steps=[
                "Check that the service URL is correct",
                "Verify network connectivity to the server",
                "Check proxy and firewall settings",
            ],
            contact_info="Contact your system administrator if the problem persists",
            additional_notes=[
                "This error typically indicates the server is not reachable",
            ],
        )

    def _get_dns_resolution_guidance(self, error: DNSResolutionError) -> UserGuidance:
        return UserGuidance(
            error_type="DNS Resolution Error",
            troubleshooting_steps=[
                "Verify the server hostname in the service URL",
                "Check your internet connection",
                "Check your DNS server settings",
            ],
            additional_notes=[
                "DNS resolution issues are often temporary",
            ],
        )

    def _get_ssl_certificate_guidance(self, error: SSLCertificateError) -> UserGuidance:
        return UserGuidance(
            error_type="SSL Certificate Error",
            troubleshooting_steps=[
                "Check if the server certificate is valid and not expired",
                "Verify the server hostname matches the certificate",
                "Check if you need to update your certificate store",
            ],
            contact_info="Contact your system administrator for certificate issues",
        )

    def _get_timeout_guidance(self, error: NetworkTimeoutError) -> UserGuidance:
        return UserGuidance(
            error_type="Network Timeout Error",
            troubleshooting_steps=[
                "Try again - this may be a temporary issue",
                "Check if the server is under heavy load",
                "Consider increasing the timeout setting",
            ],
        )

    def _get_server_error_guidance(self, error: ServerError) -> UserGuidance:
        return UserGuidance(
            error_type="Server Error",
            troubleshooting_steps=[
                "The server is experiencing internal issues",
                "Please wait a few minutes and try again",
            ],
            contact_info="Contact the server administrator for persistent server errors",
        )

    def _get_http_status_guidance(self, error: HTTPStatusError) -> UserGuidance:
        return UserGuidance(
            error_type=f"HTTP Error {error.status_code}",
            troubleshooting_steps=[
                "Verify the service URL points at the XML API endpoint",
                "Check proxy authentication settings",
            ],
        )

    def _get_malformed_response_guidance(
        self, error: MalformedResponseError
    ) -> UserGuidance:
        return UserGuidance(
            error_type="Malformed Response",
            troubleshooting_steps=[
                "Verify the service URL points at the XML API endpoint",
                "Check whether a proxy or login page intercepted the request",
            ],
        )

    def _get_generic_guidance(self, error: BaseException) -> UserGuidance:
        return UserGuidance(
            error_type="Unknown Transport Error",
            troubleshooting_steps=[
                "Check your network connection",
                "Verify the server is accessible",
                "Try again in a few minutes",
            ],
        )


class NetworkErrorHandler:
    """Maps raw transport exceptions onto the TransportError hierarchy."""

    def __init__(self):
        self.guidance_provider = UserGuidanceProvider()
        self._dns_error_patterns = [
            r"name.*resolution.*failed",
            r"name.*or.*service.*not.*known",
            r"nodename.*nor.*servname.*provided",
            r"temporary.*failure.*in.*name.*resolution",
        ]
        self._ssl_error_patterns = [
            r"ssl.*certificate.*verification.*failed",
            r"certificate.*verify.*failed",
            r"ssl.*handshake.*failed",
            r"bad.*certificate",
        ]

    def classify_network_error(self, error: BaseException) -> TransportError:
        """Classify a transport exception.

        Args:
            error: Exception raised while performing the network call

        Returns:
            A TransportError subclass with user guidance attached and the
            original exception chained as ``__cause__``
        """
        if isinstance(error, TransportError):
            classified = error
        elif isinstance(error, httpx.ConnectError):
            classified = self._classify_connect_error(error)
        elif isinstance(error, httpx.TimeoutException):
            if "connect" in str(error).lower() or isinstance(
                error, httpx.ConnectTimeout
            ):
                classified = NetworkTimeoutError(
                    "Connection timed out. Check your network connection or try again later."
                )
            else:
                classified = NetworkTimeoutError(
                    "Request timed out. Check your network connection or try again later."
                )
        elif isinstance(error, httpx.HTTPStatusError):
            classified = self.classify_http_status(error.response.status_code)
        elif isinstance(error, (httpx.TransportError, OSError)):
            classified = NetworkConnectionError(f"Network error: {error}")
        else:
            classified = TransportError(f"Unexpected transport error: {error}")

        if classified is not error and classified.__cause__ is None:
            classified.__cause__ = error
        if not classified.user_guidance:
            guidance = self.guidance_provider.get_guidance(classified)
            classified.user_guidance = guidance.format_for_console()

        logger.debug(f"Classified transport failure as {type(classified).__name__}")
        return classified

    def classify_http_status(self, status_code: int) -> HTTPStatusError:
        """Classify a non-success HTTP status."""
        if 500 <= status_code < 600:
            return ServerError(
                f"Server is experiencing issues: HTTP {status_code}",
                status_code=status_code,
            )
        return HTTPStatusError(f"HTTP {status_code}", status_code=status_code)

    def _classify_connect_error(self, error: httpx.ConnectError) -> TransportError:
        error_message = str(error).lower()

        if any(re.search(p, error_message) for p in self._dns_error_patterns):
            return DNSResolutionError(
                "Cannot resolve server address. Check your internet connection and service URL."
            )

        if any(re.search(p, error_message) for p in self._ssl_error_patterns):
            return SSLCertificateError(
                "SSL certificate verification failed. Server may be using invalid certificate."
            )

        return NetworkConnectionError(f"Connection failed: {error}")
