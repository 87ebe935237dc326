"""Application-management value types: states and option builders."""

from __future__ import annotations

from mas_appmgmt.appmanagement.options import (
    ActivateApplicationOptions,
    AndroidInstallApplicationOptions,
    AndroidRemoveApplicationOptions,
    AndroidTerminateApplicationOptions,
    ApplicationOptions,
    InstallApplicationOptions,
    IOSActivateApplicationOptions,
    RemoveApplicationOptions,
    TerminateApplicationOptions,
)
from mas_appmgmt.appmanagement.state import ApplicationState

__all__ = [
    "ActivateApplicationOptions",
    "AndroidInstallApplicationOptions",
    "AndroidRemoveApplicationOptions",
    "AndroidTerminateApplicationOptions",
    "ApplicationOptions",
    "ApplicationState",
    "InstallApplicationOptions",
    "IOSActivateApplicationOptions",
    "RemoveApplicationOptions",
    "TerminateApplicationOptions",
]
