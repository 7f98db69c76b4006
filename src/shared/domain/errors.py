"""Domain error kinds shared by every bounded context.

Components report failures as :class:`Rejection` values (see
``shared.domain.results``).  The service layer turns a rejection into the
matching :class:`DomainError` subclass at the transaction boundary, so the
unit of work rolls back and the API layer can translate it into an HTTP
response.  Persistence and transport errors are never wrapped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Type


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    BUSINESS_RULE = "BUSINESS_RULE"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class Rejection:
    """Structured reason for a refused operation.

    ``code`` is stable and machine-readable (e.g. ``COUPON_INVALID``).
    ``context`` carries the ids involved so callers can explain the refusal.
    """

    kind: ErrorKind
    code: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def not_found(cls, code: str, message: str, **context: Any) -> Rejection:
        return cls(ErrorKind.NOT_FOUND, code, message, context)

    @classmethod
    def business_rule(cls, code: str, message: str, **context: Any) -> Rejection:
        return cls(ErrorKind.BUSINESS_RULE, code, message, context)

    @classmethod
    def conflict(cls, code: str, message: str, **context: Any) -> Rejection:
        return cls(ErrorKind.CONFLICT, code, message, context)

    def to_exception(
        self, error_class: Optional[Type[DomainError]] = None
    ) -> DomainError:
        """Build the exception for this rejection.

        ``error_class`` lets a module raise its own subclass; it must belong
        to the same kind.
        """
        cls = error_class or _ERROR_BY_KIND[self.kind]
        if cls.kind is not self.kind:
            raise TypeError(
                f"{cls.__name__} cannot carry a {self.kind.value} rejection."
            )
        return cls.from_rejection(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "context": _stringify(self.context),
        }


class DomainError(Exception):
    """Base class for expected, non-retryable domain failures."""

    kind: ClassVar[ErrorKind]
    default_code: ClassVar[str] = "DOMAIN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.context = dict(context or {})

    @classmethod
    def from_rejection(cls, rejection: Rejection) -> DomainError:
        return cls(rejection.message, code=rejection.code, context=rejection.context)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "code": self.code,
            "context": _stringify(self.context),
        }


class NotFound(DomainError):
    """A referenced entity does not exist for the tenant."""

    kind = ErrorKind.NOT_FOUND
    default_code = "NOT_FOUND"


class BusinessRuleViolation(DomainError):
    """A named domain constraint was violated."""

    kind = ErrorKind.BUSINESS_RULE
    default_code = "BUSINESS_RULE"


class Conflict(DomainError):
    """A concurrent request won a race; retrying with fresh state is safe."""

    kind = ErrorKind.CONFLICT
    default_code = "CONFLICT"


_ERROR_BY_KIND: Dict[ErrorKind, Type[DomainError]] = {
    ErrorKind.NOT_FOUND: NotFound,
    ErrorKind.BUSINESS_RULE: BusinessRuleViolation,
    ErrorKind.CONFLICT: Conflict,
}


def _stringify(context: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        key: value if isinstance(value, (int, bool)) or value is None else str(value)
        for key, value in context.items()
    }
