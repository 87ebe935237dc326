"""Android controller utilities.

A thin wrapper around ``adb`` exposing the package-management primitives the
adb command executor needs (install, uninstall, launch, force-stop, process
and foreground queries).

Notes
-----
* Every call is a single blocking ``adb`` subprocess.
* Intended for emulator/testbed use; no device-farm features.
"""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class AndroidControllerError(RuntimeError):
    """Raised when an adb operation fails."""


@dataclass(frozen=True)
class AdbResult:
    args: list[str]
    stdout: str
    stderr: str
    returncode: int

    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return (self.stdout + "\n" + self.stderr).strip()


def _parse_component(component: str) -> Tuple[Optional[str], Optional[str]]:
    """Parse Android component string 'pkg/.Act' or 'pkg/pkg.Act'."""

    component = str(component).strip()
    if "/" not in component:
        return None, None
    pkg, activity = component.split("/", 1)
    pkg = pkg.strip()
    activity = activity.strip()
    if not pkg or not activity:
        return None, None
    if activity.startswith("."):
        activity = pkg + activity
    return pkg, activity


def _extract_component_from_dumpsys_activity(txt: str) -> Optional[str]:
    patterns = (
        r"mResumedActivity:.*?\s([\w.]+/[\w.$]+)",
        r"mFocusedActivity:.*?\s([\w.]+/[\w.$]+)",
        # Android 15/16 style
        r"\bResumedActivity:\s*ActivityRecord\{.*?\s([\w.]+/[\w.$]+)\b",
        r"\bResumed:\s*ActivityRecord\{.*?\s([\w.]+/[\w.$]+)\b",
        r"\btopResumedActivity=ActivityRecord\{.*?\s([\w.]+/[\w.$]+)\b",
        r"\bmCurrentFocus=Window\{.*?\s([\w.]+/[\w.$]+)\}",
        r"\bmFocusedApp=ActivityRecord\{.*?\s([\w.]+/[\w.$]+)\b",
    )
    for pat in patterns:
        m = re.search(pat, txt)
        if m:
            return m.group(1)
    return None


def _extract_component_from_dumpsys_window(txt: str) -> Optional[str]:
    for pat in (
        r"mCurrentFocus=Window\{.*?\s([\w.]+/[\w.$]+)\}",
        r"mFocusedApp=.*?ActivityRecord\{.*?\s([\w.]+/[\w.$]+)\b",
    ):
        m = re.search(pat, txt)
        if m:
            return m.group(1)
    return None


def _adb_shell_cmd(parts: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(p)) for p in parts)


class AndroidController:
    """Thin wrapper around adb for package management and state queries."""

    def __init__(
        self,
        *,
        adb_path: str = "adb",
        serial: Optional[str] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self._adb_path = adb_path
        self._serial = serial
        self._timeout_s = timeout_s

    @property
    def serial(self) -> Optional[str]:
        return self._serial

    def _base_cmd(self) -> list[str]:
        cmd = [self._adb_path]
        if self._serial:
            cmd += ["-s", self._serial]
        return cmd

    def adb(self, *args: str, timeout_s: float | None = None, check: bool = True) -> AdbResult:
        """Run an adb command and return stdout/stderr/returncode."""

        cmd = self._base_cmd() + list(args)
        logger.debug("adb: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout_s if timeout_s is None else float(timeout_s),
            )
        except FileNotFoundError as e:
            raise AndroidControllerError(f"adb not found: {self._adb_path}") from e
        except subprocess.TimeoutExpired as e:
            raise AndroidControllerError(
                f"adb command timed out after {e.timeout}s: {' '.join(cmd)}"
            ) from e
        result = AdbResult(
            args=cmd,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            returncode=proc.returncode,
        )
        if check and not result.ok():
            raise AndroidControllerError(
                f"adb command failed (rc={result.returncode}): {' '.join(cmd)}\n"
                f"stdout: {result.stdout}\n"
                f"stderr: {result.stderr}"
            )
        return result

    def adb_shell(
        self,
        command: str,
        *,
        timeout_s: float | None = None,
        timeout_ms: int | None = None,
        check: bool = True,
    ) -> AdbResult:
        if timeout_ms is not None:
            timeout_s = float(timeout_ms) / 1000.0
        return self.adb("shell", command, timeout_s=timeout_s, check=check)

    # ------------------------------ Package management ------------------------------

    def install(
        self,
        app_path: str | Path,
        *,
        replace: bool = True,
        allow_test_packages: bool = False,
        grant_permissions: bool = False,
        use_sdcard: bool = False,
        timeout_s: float | None = None,
    ) -> AdbResult:
        flags: list[str] = []
        if replace:
            flags.append("-r")
        if allow_test_packages:
            flags.append("-t")
        if grant_permissions:
            flags.append("-g")
        if use_sdcard:
            flags.append("-s")
        return self.adb("install", *flags, str(app_path), timeout_s=timeout_s, check=False)

    def uninstall(
        self, package: str, *, keep_data: bool = False, timeout_s: float | None = None
    ) -> AdbResult:
        args = ["uninstall"]
        if keep_data:
            args.append("-k")
        args.append(package)
        return self.adb(*args, timeout_s=timeout_s, check=False)

    def is_installed(self, package: str, *, timeout_s: float | None = None) -> bool:
        res = self.adb_shell(_adb_shell_cmd(["pm", "path", package]), timeout_s=timeout_s, check=False)
        return res.ok() and any(
            line.strip().startswith("package:") for line in res.stdout.splitlines()
        )

    def pidof(self, package: str, *, timeout_s: float | None = None) -> list[int]:
        res = self.adb_shell(_adb_shell_cmd(["pidof", package]), timeout_s=timeout_s, check=False)
        if not res.ok():
            return []
        return [int(tok) for tok in res.stdout.split() if tok.isdigit()]

    def launch(self, package: str, *, timeout_s: float | None = None) -> AdbResult:
        cmd = _adb_shell_cmd(
            ["monkey", "-p", package, "-c", "android.intent.category.LAUNCHER", "1"]
        )
        return self.adb_shell(cmd, timeout_s=timeout_s, check=False)

    def force_stop(self, package: str, *, timeout_s: float | None = None) -> AdbResult:
        return self.adb_shell(_adb_shell_cmd(["am", "force-stop", package]), timeout_s=timeout_s)

    def press_home(self, *, timeout_s: float | None = None) -> AdbResult:
        return self.adb_shell(
            _adb_shell_cmd(["input", "keyevent", "KEYCODE_HOME"]), timeout_s=timeout_s
        )

    def get_foreground(self, *, timeout_s: float | None = None) -> Dict[str, Any]:
        """Best-effort foreground app/activity."""

        component: Optional[str] = None
        res = self.adb_shell("dumpsys activity activities", timeout_s=timeout_s, check=False)
        if res.ok() and res.stdout:
            component = _extract_component_from_dumpsys_activity(res.stdout)

        if component is None:
            res2 = self.adb_shell("dumpsys window windows", timeout_s=timeout_s, check=False)
            if res2.ok() and res2.stdout:
                component = _extract_component_from_dumpsys_window(res2.stdout)

        pkg, activity = _parse_component(component) if component else (None, None)
        return {
            "package": pkg,
            "activity": activity,
            "component": component,
        }
