"""Base Connect XML API Client.

Provides the request dispatcher every action goes through, session
management (login/logout) and the status envelope returned to callers.
"""

import asyncio
import logging
from typing import Optional

from ..config import ClientSettings
from .marshalling import from_element
from .models import UserInfo
from .network_error_handler import MalformedResponseError
from .results import resolve_full_url
from .session import SessionManager
from .status import Outcome, StatusCode, TypedResult
from .status_classifier import StatusClassifier
from .transport import HttpTransport, Transport

logger = logging.getLogger(__name__)


class ConnectAPIClient:
    """Base API client with session handling and action dispatch.

    Every method returns the classified outcome of its action. Business
    failures (bad credentials, denied access, invalid parameters) and
    transport failures are reported through ``Outcome.code`` and
    ``Outcome.error``; callers inspect the envelope instead of catching
    exceptions.
    """

    def __init__(
        self,
        settings: ClientSettings,
        transport: Optional[Transport] = None,
    ):
        """Initialize the client.

        Args:
            settings: Validated client settings
            transport: Transport to use; defaults to an HttpTransport

        Raises:
            ValueError: If settings are missing
        """
        if settings is None:
            raise ValueError("Argument 'settings' can not be None")

        self._settings = settings
        self._transport: Transport = transport or HttpTransport(settings)
        self._session = SessionManager()
        self._classifier = StatusClassifier()

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def session_token(self) -> Optional[str]:
        """Current session token, or None when not logged in."""
        return self._session.token

    async def dispatch(self, action: str, params: Optional[str] = None) -> Outcome:
        """Send one action, attaching the session when configured to.

        Args:
            action: Action name, e.g. ``common-info``
            params: Unescaped ``name=value&...`` parameter string

        Returns:
            Classified outcome of the action
        """
        return await self._process_request(action, params, attach_session=True)

    async def _process_request(
        self, action: str, params: Optional[str], attach_session: bool
    ) -> Outcome:
        token = self._session.token if attach_session else None
        session_cookie = None
        if token and self._settings.use_session_param:
            if params:
                params = f"session={token}&{params}"
            else:
                params = f"session={token}"
        elif token:
            session_cookie = token

        logger.debug(f"Dispatching action '{action}'")
        try:
            raw = await self._transport.process_request(
                action, params, session_cookie=session_cookie
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Action '{action}' failed in transport: {e}")
            return self._classifier.classify_failure(action, e)

        outcome = self._classifier.classify(action, raw)
        if not outcome.ok:
            logger.debug(f"Action '{action}' returned {outcome.describe()}")
        return outcome

    async def login(
        self, username: Optional[str] = None, password: Optional[str] = None
    ) -> TypedResult[bool]:
        """Log in and keep the issued session token.

        Credentials are sent unescaped in the parameter string, so a login
        or password containing ``&`` is split into a truncated value plus a
        stray parameter and the login fails.

        Args:
            username: Account login; defaults to the configured username
            password: Account password; defaults to the configured password

        Returns:
            TypedResult whose ``succeeded`` is True only when the server
            answered OK and issued a session token
        """
        if username is None:
            username = self._settings.username
        if password is None:
            password = self._settings.password

        # A stale session must not be replayed on login
        outcome = await self._process_request(
            "login",
            f"login={username or ''}&password={password or ''}",
            attach_session=False,
        )

        if outcome.code is not StatusCode.OK:
            logger.info(f"Login failed: {outcome.describe()}")
            return TypedResult.failure(outcome)

        if not outcome.session_token:
            logger.warning("Login answered OK without a session token")
            return TypedResult.failure(outcome)

        self._session._establish(outcome.session_token)
        return TypedResult.success(outcome, True)

    async def logout(self) -> bool:
        """Log out; the session is kept unless the server confirms.

        Returns:
            True if the server answered OK and the session was cleared
        """
        outcome = await self.dispatch("logout")
        if outcome.code is StatusCode.OK:
            self._session._clear()
            return True

        logger.warning(f"Logout failed, keeping session: {outcome.describe()}")
        return False

    async def get_user_info(self) -> TypedResult[UserInfo]:
        """Return the currently logged in user (``common-info``)."""
        outcome = await self.dispatch("common-info")
        if outcome.code is not StatusCode.OK or outcome.result_document is None:
            return TypedResult.failure(outcome)

        user_node = outcome.result_document.find(".//user")
        if user_node is None:
            return TypedResult.failure(
                outcome.as_format_failure(
                    MalformedResponseError("common-info reply has no user node")
                )
            )

        try:
            user_info = from_element(UserInfo, user_node)
        except ValueError as e:
            logger.warning(f"Failed to parse user info: {e}")
            return TypedResult.failure(outcome.as_format_failure(e))

        return TypedResult.success(outcome, user_info)

    def resolve_full_url(self, url_path: Optional[str]) -> str:
        """Resolve a server-relative path against the service host."""
        return resolve_full_url(self._settings.service_url, url_path)

    async def close(self) -> None:
        """Close the transport."""
        await self._transport.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
