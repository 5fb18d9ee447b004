"""
Typed results for remote calls.

Every call that crosses the network boundary goes through ``capture()``,
which turns exceptions into a ``Result`` tagged with an ``ErrorKind``.
The ``ERROR_POLICIES`` table decides, per kind, whether the caller falls
back to the local cache, whether the failure is logged, and whether it is
surfaced to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from .exceptions import InvalidCredentialsError, PersistenceWriteError, RecordNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(Enum):
    """Classification of a failed remote or local operation."""

    REMOTE_UNAVAILABLE = "remote_unavailable"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_FOUND = "not_found"
    PERSISTENCE_WRITE_FAILED = "persistence_write_failed"


@dataclass(frozen=True)
class ErrorPolicy:
    """What to do when an operation fails with a given ErrorKind.

    Attributes:
        fallback: Serve the local cache instead of failing
        log: Emit a log record for the failure
        surface: Re-raise to the caller
        log_level: Level used when ``log`` is set
    """

    fallback: bool
    log: bool
    surface: bool
    log_level: int = logging.WARNING


ERROR_POLICIES: dict[ErrorKind, ErrorPolicy] = {
    ErrorKind.REMOTE_UNAVAILABLE: ErrorPolicy(fallback=True, log=True, surface=False),
    ErrorKind.INVALID_CREDENTIALS: ErrorPolicy(
        fallback=True, log=True, surface=True, log_level=logging.ERROR
    ),
    ErrorKind.NOT_FOUND: ErrorPolicy(
        fallback=True, log=False, surface=False, log_level=logging.DEBUG
    ),
    ErrorKind.PERSISTENCE_WRITE_FAILED: ErrorPolicy(fallback=False, log=True, surface=False),
}


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a wrapped call: either a value or an ErrorKind."""

    value: T | None = None
    error: ErrorKind | None = None
    cause: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def policy(self) -> ErrorPolicy | None:
        if self.error is None:
            return None
        return ERROR_POLICIES[self.error]

    @property
    def falls_back(self) -> bool:
        """Whether the caller should serve the local cache instead."""
        policy = self.policy
        return policy is not None and policy.fallback

    def raise_if_surfaced(self) -> None:
        """Re-raise the cause when the policy surfaces this kind of failure."""
        policy = self.policy
        if policy is not None and policy.surface and self.cause is not None:
            raise self.cause

    @classmethod
    def success(cls, value: T | None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, cause: Exception | None = None) -> Result[T]:
        return cls(error=error, cause=cause)


def classify(exc: Exception) -> ErrorKind:
    """Map an exception raised by a collaborator onto an ErrorKind."""
    if isinstance(exc, InvalidCredentialsError):
        return ErrorKind.INVALID_CREDENTIALS
    if isinstance(exc, RecordNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, PersistenceWriteError):
        return ErrorKind.PERSISTENCE_WRITE_FAILED
    # Anything else from a remote SDK (network, HTTP, auth) degrades to the cache
    return ErrorKind.REMOTE_UNAVAILABLE


def report(operation: str, result: Result) -> None:
    """Log a failed result according to its policy."""
    policy = result.policy
    if policy is None or not policy.log:
        return
    logger.log(
        policy.log_level,
        f"{operation} failed ({result.error.value}), "
        f"{'falling back to local cache' if policy.fallback else 'continuing'}: {result.cause}",
    )


async def capture(operation: str, call: Awaitable[T]) -> Result[T]:
    """Await a remote call and convert any failure into a Result.

    Args:
        operation: Short label used in log messages (e.g. "fetch hotels/abc")
        call: The awaitable to run

    Returns:
        Result holding the value or the classified error
    """
    try:
        value = await call
    except Exception as e:
        result: Result[T] = Result.failure(classify(e), e)
        report(operation, result)
        return result
    return Result.success(value)
