"""Session token ownership for one client instance."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class SessionManager:
    """Holds the session token issued by a successful login.

    The token is read freely but only changed through ``_establish`` (after a
    successful login) and ``_clear`` (after a successful logout). Both replace
    a single reference, so concurrent readers never see a partial value.
    """

    def __init__(self):
        self._token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def _establish(self, token: str) -> None:
        if not token:
            raise ValueError("Session token must be a non-empty string")
        self._token = token
        logger.info("Session established")

    def _clear(self) -> None:
        self._token = None
        logger.info("Session cleared")
