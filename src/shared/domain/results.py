"""Explicit success/failure values for domain components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar

from shared.domain.errors import DomainError, Rejection

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a :class:`Rejection`, never both."""

    value: Optional[T] = None
    rejection: Optional[Rejection] = None

    @classmethod
    def ok(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, rejection: Rejection) -> Result[T]:
        return cls(rejection=rejection)

    @property
    def is_ok(self) -> bool:
        return self.rejection is None

    def unwrap(self, error_class: Optional[Type[DomainError]] = None) -> T:
        """Return the value or raise the rejection as a :class:`DomainError`."""
        if self.rejection is not None:
            raise self.rejection.to_exception(error_class)
        return self.value  # type: ignore[return-value]
