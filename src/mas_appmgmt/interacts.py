"""Application-lifecycle operations as a mixin over a generic command executor.

A host class provides ``execute(command, arguments)``; every operation here is
a fixed composition of argument normalization, a single ``execute`` call and
(optionally) a result decoder. Omitting ``options`` is the same as passing
``options=None``: no ``options`` key is sent.
"""

from __future__ import annotations

import abc
from datetime import timedelta
from typing import Any, Mapping, Optional

from mas_appmgmt.appmanagement.options import (
    ActivateApplicationOptions,
    InstallApplicationOptions,
    RemoveApplicationOptions,
    TerminateApplicationOptions,
)
from mas_appmgmt.appmanagement.state import ApplicationState
from mas_appmgmt.commands import CommandId, prepare_argument, with_options
from mas_appmgmt.decoders import decode_app_state, decode_bool, duration_to_seconds


class InteractsWithApps(abc.ABC):
    @abc.abstractmethod
    def execute(self, command: CommandId, arguments: Mapping[str, Any]) -> Any:
        """Run ``command`` with ``arguments`` and return the raw result value."""

    def install_app(
        self, app_path: str, options: Optional[InstallApplicationOptions] = None
    ) -> None:
        """Install an app from a local path or remote URL on the device."""

        self.execute(CommandId.INSTALL_APP, with_options("appPath", app_path, options))

    def is_app_installed(self, bundle_id: str) -> bool:
        result = self.execute(CommandId.IS_APP_INSTALLED, prepare_argument("bundleId", bundle_id))
        return decode_bool(CommandId.IS_APP_INSTALLED, result)

    def run_app_in_background(self, duration: timedelta) -> None:
        """Send the current app to the background for ``duration``.

        Blocks for the whole duration. Millisecond resolution; zero or negative
        durations switch to the home screen and return immediately.
        """

        self.execute(
            CommandId.RUN_APP_IN_BACKGROUND,
            prepare_argument("seconds", duration_to_seconds(duration)),
        )

    def remove_app(
        self, bundle_id: str, options: Optional[RemoveApplicationOptions] = None
    ) -> bool:
        """Uninstall an app. Returns True if the removal succeeded."""

        result = self.execute(CommandId.REMOVE_APP, with_options("bundleId", bundle_id, options))
        return decode_bool(CommandId.REMOVE_APP, result)

    def activate_app(
        self, bundle_id: str, options: Optional[ActivateApplicationOptions] = None
    ) -> None:
        """Bring an installed app to the foreground, launching it if needed."""

        self.execute(CommandId.ACTIVATE_APP, with_options("bundleId", bundle_id, options))

    def query_app_state(self, bundle_id: str) -> ApplicationState:
        result = self.execute(CommandId.QUERY_APP_STATE, prepare_argument("bundleId", bundle_id))
        return decode_app_state(result)

    def terminate_app(
        self, bundle_id: str, options: Optional[TerminateApplicationOptions] = None
    ) -> bool:
        """Stop an app. Returns True if it was running and has been stopped."""

        result = self.execute(
            CommandId.TERMINATE_APP, with_options("bundleId", bundle_id, options)
        )
        return decode_bool(CommandId.TERMINATE_APP, result)
