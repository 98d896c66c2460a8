"""Status classification of raw XML API replies.

A reply looks like::

    <results>
      <status code="invalid">
        <invalid field="login" type="string" subcode="missing"/>
      </status>
      ...
    </results>

The classifier turns it into an :class:`Outcome` without interpreting the
payload; the root element is carried forward as the result document.
"""

import logging
from typing import Optional
from xml.etree import ElementTree

from .network_error_handler import MalformedResponseError, NetworkErrorHandler
from .status import Outcome, StatusCode, StatusSubCode
from .transport import RawResponse

logger = logging.getLogger(__name__)


class StatusClassifier:
    """Converts transport replies and transport failures into outcomes."""

    def __init__(self, error_handler: Optional[NetworkErrorHandler] = None):
        self._error_handler = error_handler or NetworkErrorHandler()

    def classify(self, action: str, raw: RawResponse) -> Outcome:
        """Classify a reply received from the transport."""
        try:
            root = ElementTree.fromstring(raw.body)
        except ElementTree.ParseError as e:
            logger.warning(f"Action '{action}' returned malformed XML: {e}")
            return self.classify_failure(
                action, MalformedResponseError(f"Malformed XML reply to '{action}': {e}")
            )

        status = root if root.tag == "status" else root.find("status")
        if status is None:
            return self.classify_failure(
                action,
                MalformedResponseError(f"Reply to '{action}' has no status node"),
            )

        code = StatusCode(status.get("code", "").strip().lower())
        sub_code = StatusSubCode.NONE
        invalid_field = None

        raw_sub_code = status.get("subcode")
        detail = next(iter(status), None)
        if detail is not None:
            raw_sub_code = raw_sub_code or detail.get("subcode")
            if detail.tag == "invalid":
                invalid_field = detail.get("field")
        if raw_sub_code:
            sub_code = StatusSubCode(raw_sub_code.strip().lower())

        return Outcome(
            action=action,
            code=code,
            sub_code=sub_code,
            session_token=self._extract_session_token(root, raw),
            result_document=root,
            invalid_field=invalid_field,
        )

    def classify_failure(self, action: str, error: BaseException) -> Outcome:
        """Classify an exception raised while performing an action."""
        return Outcome(
            action=action,
            code=StatusCode.NOT_SET,
            error=self._error_handler.classify_network_error(error),
        )

    @staticmethod
    def _extract_session_token(root, raw: RawResponse) -> Optional[str]:
        if raw.session_cookie:
            return raw.session_cookie

        cookie = root.find("./common/cookie")
        if cookie is not None and cookie.text and cookie.text.strip():
            return cookie.text.strip()
        return None
