"""Status envelope types shared by every API action.

Every dispatched action produces exactly one :class:`Outcome`. Operations that
also parse a domain value wrap it together with its outcome in a
:class:`TypedResult`.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Generic, Optional, TypeVar
from xml.etree.ElementTree import Element

T = TypeVar("T")


class StatusCode(str, Enum):
    """Values of the ``code`` attribute of the ``<status>`` node."""

    OK = "ok"
    INVALID = "invalid"
    NO_ACCESS = "no-access"
    NO_DATA = "no-data"
    TOO_MUCH_DATA = "too-much-data"
    # Client-side sentinel: no status could be read (transport or XML failure)
    NOT_SET = "not-set"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class StatusSubCode(str, Enum):
    """Values of the ``subcode`` attribute reported alongside a status code."""

    NONE = ""
    FORMAT = "format"
    DUPLICATE = "duplicate"
    ILLEGAL_OPERATION = "illegal-operation"
    MISSING = "missing"
    NO_SUCH_ITEM = "no-such-item"
    RANGE = "range"
    DENIED = "denied"
    NO_LOGIN = "no-login"
    ACCOUNT_EXPIRED = "account-expired"
    NO_QUOTA = "no-quota"
    NOT_AVAILABLE = "not-available"
    PENDING_ACTIVATION = "pending-activation"
    PENDING_LICENSE_AGREEMENT = "pending-license-agreement"
    SCO_EXPIRED = "sco-expired"
    SCO_NOT_STARTED = "sco-not-started"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        if value is None:
            return cls.NONE
        return cls.UNKNOWN


@dataclass(frozen=True)
class Outcome:
    """Classified result of one dispatched action."""

    action: str
    code: StatusCode
    sub_code: StatusSubCode = StatusSubCode.NONE
    session_token: Optional[str] = None
    result_document: Optional[Element] = None
    error: Optional[BaseException] = None
    invalid_field: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code is StatusCode.OK

    def as_format_failure(self, error: BaseException) -> "Outcome":
        """Return a copy reclassified as ``invalid``/``format`` carrying ``error``."""
        return replace(
            self,
            code=StatusCode.INVALID,
            sub_code=StatusSubCode.FORMAT,
            error=error,
        )

    def describe(self) -> str:
        parts = [f"{self.action}: {self.code.value}"]
        if self.sub_code is not StatusSubCode.NONE:
            parts.append(f"({self.sub_code.value})")
        if self.invalid_field:
            parts.append(f"field '{self.invalid_field}'")
        if self.error is not None:
            parts.append(f"- {self.error}")
        return " ".join(parts)


@dataclass(frozen=True)
class TypedResult(Generic[T]):
    """A parsed domain value bound to the outcome it was parsed from."""

    succeeded: bool
    outcome: Outcome
    value: Optional[T] = None

    @classmethod
    def failure(cls, outcome: Outcome) -> "TypedResult[T]":
        return cls(succeeded=False, outcome=outcome)

    @classmethod
    def success(cls, outcome: Outcome, value: Optional[T]) -> "TypedResult[T]":
        return cls(succeeded=True, outcome=outcome, value=value)

    @property
    def code(self) -> StatusCode:
        return self.outcome.code

    @property
    def sub_code(self) -> StatusSubCode:
        return self.outcome.sub_code

    @property
    def error(self) -> Optional[BaseException]:
        return self.outcome.error
