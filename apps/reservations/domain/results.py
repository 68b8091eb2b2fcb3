"""
Operation results

Every public operation of the reservation core returns a Result: either a
value or a typed Failure with a message suitable for display. Business
rule violations never raise; Result.unwrap() raises ResultError only when
a caller reads the value of a failed result, which is a programming error.
"""

from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import Generic, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


class FailureKind(str, Enum):
    VALIDATION_ERROR = 'validation_error'      # malformed or missing input
    NOT_FOUND = 'not_found'                    # unknown user/product/state/reservation
    INVALID_TRANSITION = 'invalid_transition'  # illegal state change
    UNAVAILABLE = 'unavailable'                # conflicts with a confirmed reservation
    TOO_EARLY = 'too_early'                    # completion before the end date
    PERSISTENCE_FAILURE = 'persistence_failure'  # unexpected collaborator error


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str

    def __str__(self):
        return f"{self.kind.value}: {self.message}"


class ResultError(Exception):
    """Raised when the value of a failed result is requested"""

    def __init__(self, failure: Failure):
        super().__init__(str(failure))
        self.failure = failure


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    failure: Failure | None = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, message: str) -> 'Result[T]':
        return cls(failure=Failure(kind, message))

    @classmethod
    def from_failure(cls, failure: Failure) -> 'Result[T]':
        return cls(failure=failure)

    @property
    def is_success(self) -> bool:
        return self.failure is None

    @property
    def kind(self) -> FailureKind | None:
        return self.failure.kind if self.failure else None

    @property
    def message(self) -> str:
        return self.failure.message if self.failure else ''

    def unwrap(self) -> T:
        if self.failure is not None:
            raise ResultError(self.failure)
        return self.value

    def __bool__(self):
        return self.is_success


def catch_unexpected(action: str):
    """
    Decorator for public operations of the core

    Any exception escaping the wrapped method is logged and turned into a
    PERSISTENCE_FAILURE result carrying the original error text.
    """

    def decorator(method):
        @wraps(method)
        def wrapper(*args, **kwargs):
            try:
                return method(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error {action}: {e}", exc_info=True)
                return Result.fail(FailureKind.PERSISTENCE_FAILURE, f"Error {action}: {e}")
        return wrapper

    return decorator
