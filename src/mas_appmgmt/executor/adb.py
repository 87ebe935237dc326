"""Command executor backed directly by adb (no automation server).

Each lifecycle command is mapped onto one or a few adb invocations. Results
are returned in the same raw shape an Appium server would return (booleans,
integer state codes, ``None``) so the facade decodes them identically.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from mas_appmgmt.appmanagement.state import ApplicationState
from mas_appmgmt.commands import CommandId
from mas_appmgmt.errors import RemoteCommandError
from mas_appmgmt.runtime.android.controller import AndroidController, AndroidControllerError

logger = logging.getLogger(__name__)

_DEFAULT_TERMINATE_TIMEOUT_MS = 500


def _required_str(command: CommandId, arguments: Mapping[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str) or not value.strip():
        raise RemoteCommandError(
            f"missing or empty argument {key!r}",
            command=str(command),
            error="invalid argument",
        )
    return value.strip()


def _options(arguments: Mapping[str, Any]) -> Dict[str, Any]:
    opts = arguments.get("options")
    return dict(opts) if isinstance(opts, Mapping) else {}


def _timeout_s(opts: Mapping[str, Any]) -> Optional[float]:
    raw = opts.get("timeout")
    if raw is None:
        return None
    return float(raw) / 1000.0


class AdbCommandExecutor:
    def __init__(
        self,
        *,
        controller: AndroidController,
        poll_interval_s: float = 0.1,
    ) -> None:
        self._controller = controller
        self._poll_interval_s = float(poll_interval_s)
        self._handlers: Dict[CommandId, Callable[[Mapping[str, Any]], Any]] = {
            CommandId.INSTALL_APP: self._install_app,
            CommandId.IS_APP_INSTALLED: self._is_app_installed,
            CommandId.RUN_APP_IN_BACKGROUND: self._run_app_in_background,
            CommandId.REMOVE_APP: self._remove_app,
            CommandId.ACTIVATE_APP: self._activate_app,
            CommandId.QUERY_APP_STATE: self._query_app_state,
            CommandId.TERMINATE_APP: self._terminate_app,
        }

    @property
    def controller(self) -> AndroidController:
        return self._controller

    def execute(self, command: CommandId, arguments: Mapping[str, Any]) -> Any:
        handler = self._handlers.get(command)
        if handler is None:
            raise RemoteCommandError(
                "command is not supported by the adb backend",
                command=str(command),
                error="unknown command",
            )
        try:
            return handler(arguments)
        except AndroidControllerError as e:
            raise RemoteCommandError(str(e), command=str(command), error="adb error") from e

    # ------------------------------------ handlers ------------------------------------

    def _install_app(self, arguments: Mapping[str, Any]) -> None:
        app_path = _required_str(CommandId.INSTALL_APP, arguments, "appPath")
        opts = _options(arguments)
        res = self._controller.install(
            app_path,
            replace=bool(opts.get("replace", True)),
            allow_test_packages=bool(opts.get("allowTestPackages", False)),
            grant_permissions=bool(opts.get("grantPermissions", False)),
            use_sdcard=bool(opts.get("useSdcard", False)),
            timeout_s=_timeout_s(opts),
        )
        if not res.ok() or "Success" not in res.output:
            raise RemoteCommandError(
                res.output or f"adb install exited with rc={res.returncode}",
                command=str(CommandId.INSTALL_APP),
                error="install failed",
            )
        return None

    def _is_app_installed(self, arguments: Mapping[str, Any]) -> bool:
        package = _required_str(CommandId.IS_APP_INSTALLED, arguments, "bundleId")
        return self._controller.is_installed(package)

    def _run_app_in_background(self, arguments: Mapping[str, Any]) -> None:
        seconds = arguments.get("seconds")
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            raise RemoteCommandError(
                f"'seconds' must be a number, got {seconds!r}",
                command=str(CommandId.RUN_APP_IN_BACKGROUND),
                error="invalid argument",
            )
        package = self._controller.get_foreground().get("package")
        self._controller.press_home()
        if seconds <= 0:
            return None
        time.sleep(float(seconds))
        if package:
            self._controller.launch(package)
        else:
            logger.warning("no foreground app before backgrounding; nothing to restore")
        return None

    def _remove_app(self, arguments: Mapping[str, Any]) -> bool:
        package = _required_str(CommandId.REMOVE_APP, arguments, "bundleId")
        opts = _options(arguments)
        res = self._controller.uninstall(
            package,
            keep_data=bool(opts.get("keepData", False)),
            timeout_s=_timeout_s(opts),
        )
        removed = res.ok() and "Success" in res.output
        if not removed:
            logger.debug("uninstall %s did not succeed: %s", package, res.output)
        return removed

    def _activate_app(self, arguments: Mapping[str, Any]) -> None:
        package = _required_str(CommandId.ACTIVATE_APP, arguments, "bundleId")
        res = self._controller.launch(package)
        if not res.ok() or "No activities found" in res.output:
            raise RemoteCommandError(
                res.output or f"monkey exited with rc={res.returncode}",
                command=str(CommandId.ACTIVATE_APP),
                error="activation failed",
            )
        return None

    def _query_app_state(self, arguments: Mapping[str, Any]) -> int:
        package = _required_str(CommandId.QUERY_APP_STATE, arguments, "bundleId")
        if not self._controller.is_installed(package):
            return int(ApplicationState.NOT_INSTALLED)
        if not self._controller.pidof(package):
            return int(ApplicationState.NOT_RUNNING)
        if self._controller.get_foreground().get("package") == package:
            return int(ApplicationState.RUNNING_IN_FOREGROUND)
        return int(ApplicationState.RUNNING_IN_BACKGROUND)

    def _terminate_app(self, arguments: Mapping[str, Any]) -> bool:
        package = _required_str(CommandId.TERMINATE_APP, arguments, "bundleId")
        opts = _options(arguments)
        if not self._controller.pidof(package):
            return False

        self._controller.force_stop(package)
        timeout_ms = opts.get("timeout")
        if timeout_ms is None:
            timeout_ms = _DEFAULT_TERMINATE_TIMEOUT_MS
        deadline = time.monotonic() + float(timeout_ms) / 1000.0
        while True:
            if not self._controller.pidof(package):
                return True
            if time.monotonic() >= deadline:
                logger.warning("%s still running %sms after force-stop", package, timeout_ms)
                return False
            time.sleep(self._poll_interval_s)
