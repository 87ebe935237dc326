from __future__ import annotations

from datetime import timedelta
from typing import Any

from mas_appmgmt.appmanagement.state import ApplicationState
from mas_appmgmt.errors import UnexpectedResultError


def decode_bool(command: str, value: Any) -> bool:
    """Return a boolean command result unchanged; anything else is a decode error."""

    if not isinstance(value, bool):
        raise UnexpectedResultError(str(command), value, expected="bool")
    return value


def decode_app_state(value: Any) -> ApplicationState:
    return ApplicationState.of_code(value)


def duration_to_seconds(duration: timedelta) -> float:
    """Whole milliseconds of ``duration`` expressed as (fractional) seconds.

    Zero and negative durations are passed through; the server treats them as
    "switch away and return immediately".
    """

    if not isinstance(duration, timedelta):
        raise TypeError(f"duration must be a timedelta, got {type(duration).__name__}")
    return (duration // timedelta(milliseconds=1)) / 1000.0
