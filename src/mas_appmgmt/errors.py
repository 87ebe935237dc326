"""Error taxonomy for application-lifecycle commands.

Two failure families are kept apart on purpose so callers can tell them
apart:

* ``RemoteCommandError``: the round trip to the automation server (or adb)
  failed.
* ``DecodeError``: the round trip succeeded but the returned value cannot be
  interpreted as the operation's result type.
"""

from __future__ import annotations

from typing import Any, Optional


class AppManagementError(RuntimeError):
    """Base class for every error raised by mas_appmgmt."""


class RemoteCommandError(AppManagementError):
    """Raised when a remote command fails (transport, remote rejection, etc.)."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.error = error
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        parts = []
        if self.command:
            parts.append(str(self.command))
        if self.error:
            parts.append(self.error)
        prefix = ": ".join(parts)
        return f"{prefix}: {self.message}" if prefix else self.message


class DecodeError(AppManagementError, ValueError):
    """Raised when a successful command returned an uninterpretable value."""


class UnknownStateCode(DecodeError):
    def __init__(self, code: Any) -> None:
        super().__init__(f"Application state {code!r} is unknown")
        self.code = code


class UnexpectedResultError(DecodeError):
    def __init__(self, command: str, value: Any, *, expected: str) -> None:
        super().__init__(
            f"{command} returned {type(value).__name__} {value!r}; expected {expected}"
        )
        self.command = command
        self.value = value
        self.expected = expected


class ConfigError(AppManagementError):
    """Raised when a driver profile is missing or invalid."""
