from __future__ import annotations

from enum import IntEnum
from typing import Any

from mas_appmgmt.errors import UnknownStateCode


class ApplicationState(IntEnum):
    """Lifecycle state of an application, as reported by the automation server."""

    NOT_INSTALLED = 0
    NOT_RUNNING = 1
    RUNNING_IN_BACKGROUND_SUSPENDED = 2
    RUNNING_IN_BACKGROUND = 3
    RUNNING_IN_FOREGROUND = 4

    @classmethod
    def of_code(cls, code: Any) -> "ApplicationState":
        """Decode a raw state code; unknown codes raise ``UnknownStateCode``."""

        # bool is an int subclass but never a valid state code.
        if isinstance(code, bool) or not isinstance(code, int):
            raise UnknownStateCode(code)
        try:
            return cls(code)
        except ValueError:
            raise UnknownStateCode(code) from None
