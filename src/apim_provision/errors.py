"""Exception hierarchy and result values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class ApimProvisionError(Exception):
    """Base class for every error raised or returned by this package."""


class AuthenticationError(ApimProvisionError):
    """Login or token fetch failed."""


class ApimError(ApimProvisionError):
    """The management API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApimNotFoundError(ApimError):
    """The management API answered 404."""


class ProvisioningError(ApimProvisionError):
    """A precondition of a provisioning operation does not hold."""


class GroupSyncError(ProvisioningError):
    """Adding a user to a group failed partway through.

    ``added`` lists the groups that were added before the failing call;
    those memberships are not rolled back.
    """

    def __init__(self, message: str, group: str, added: list[str]) -> None:
        super().__init__(message)
        self.group = group
        self.added = list(added)


# ---------------------------------------------------------------------------
# Result values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the exception that describes it."""

    error: Exception

    @property
    def is_ok(self) -> bool:
        return False


Result = Ok[T] | Err
