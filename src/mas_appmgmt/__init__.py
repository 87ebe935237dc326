"""mas-appmgmt: application-lifecycle commands for a device under test.

Typed install/remove/activate/terminate/background/state operations are
normalized into ``(CommandId, arguments)`` pairs and sent through a pluggable
command executor (an Appium server over HTTP, or adb directly).
"""

from mas_appmgmt.appmanagement import ApplicationState
from mas_appmgmt.commands import CommandId, prepare_arguments
from mas_appmgmt.driver import AppDriver
from mas_appmgmt.errors import (
    AppManagementError,
    ConfigError,
    DecodeError,
    RemoteCommandError,
    UnexpectedResultError,
    UnknownStateCode,
)
from mas_appmgmt.interacts import InteractsWithApps

__all__ = [
    "AppDriver",
    "AppManagementError",
    "ApplicationState",
    "CommandId",
    "ConfigError",
    "DecodeError",
    "InteractsWithApps",
    "RemoteCommandError",
    "UnexpectedResultError",
    "UnknownStateCode",
    "prepare_arguments",
]
