"""Command identifiers and argument normalization.

Every application-lifecycle operation is sent to the executor as a
``(CommandId, arguments)`` pair. ``prepare_arguments`` builds the argument
mapping from parallel name/value sequences, omitting absent (``None``) values
instead of sending null placeholders.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Sequence


class CommandId(str, Enum):
    INSTALL_APP = "installApp"
    IS_APP_INSTALLED = "isAppInstalled"
    RUN_APP_IN_BACKGROUND = "runAppInBackground"
    REMOVE_APP = "removeApp"
    ACTIVATE_APP = "activateApp"
    QUERY_APP_STATE = "queryAppState"
    TERMINATE_APP = "terminateApp"

    def __str__(self) -> str:
        return self.value


# HTTP method and path template of each command on an Appium server.
COMMAND_ENDPOINTS: Dict[CommandId, tuple[str, str]] = {
    CommandId.INSTALL_APP: ("POST", "/session/{session_id}/appium/device/install_app"),
    CommandId.IS_APP_INSTALLED: ("POST", "/session/{session_id}/appium/device/app_installed"),
    CommandId.RUN_APP_IN_BACKGROUND: ("POST", "/session/{session_id}/appium/app/background"),
    CommandId.REMOVE_APP: ("POST", "/session/{session_id}/appium/device/remove_app"),
    CommandId.ACTIVATE_APP: ("POST", "/session/{session_id}/appium/device/activate_app"),
    CommandId.QUERY_APP_STATE: ("POST", "/session/{session_id}/appium/device/app_state"),
    CommandId.TERMINATE_APP: ("POST", "/session/{session_id}/appium/device/terminate_app"),
}

OPTIONS_KEY = "options"


def prepare_arguments(names: Sequence[str], values: Sequence[Any]) -> Dict[str, Any]:
    """Zip parameter names and values into an ordered argument mapping.

    Blank names and ``None`` values are skipped. A repeated name is an error:
    a later value must never silently shadow an earlier one.
    """

    if len(names) != len(values):
        raise ValueError(
            f"names and values must have the same length ({len(names)} != {len(values)})"
        )

    args: Dict[str, Any] = {}
    for name, value in zip(names, values):
        if not isinstance(name, str) or not name.strip() or value is None:
            continue
        if name in args:
            raise ValueError(f"Duplicate argument name: {name}")
        args[name] = value
    return args


def prepare_argument(name: str, value: Any) -> Dict[str, Any]:
    return prepare_arguments((name,), (value,))


def with_options(name: str, value: Any, options: Any | None) -> Dict[str, Any]:
    """Arguments for an operation taking one fixed parameter plus optional options."""

    if options is None:
        return prepare_argument(name, value)
    return prepare_arguments((name, OPTIONS_KEY), (value, options.build()))
