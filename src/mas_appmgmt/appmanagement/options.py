"""Per-platform option builders for application-lifecycle commands.

Each builder is an independent frozen dataclass; the only thing the command
layer relies on is ``build()``, which returns a fresh mapping of the options
that were explicitly set. Unset fields are not emitted so the server applies
its own defaults.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable


@runtime_checkable
class ApplicationOptions(Protocol):
    def build(self) -> Dict[str, Any]: ...


# Per-operation names for the same capability.
InstallApplicationOptions = ApplicationOptions
RemoveApplicationOptions = ApplicationOptions
ActivateApplicationOptions = ApplicationOptions
TerminateApplicationOptions = ApplicationOptions


def _timeout_ms(timeout: timedelta) -> int:
    return timeout // timedelta(milliseconds=1)


def _check_timeout(timeout: timedelta) -> timedelta:
    if not isinstance(timeout, timedelta):
        raise TypeError(f"timeout must be a timedelta, got {type(timeout).__name__}")
    if timeout < timedelta(0):
        raise ValueError("The timeout value cannot be negative")
    return timeout


@dataclass(frozen=True)
class AndroidInstallApplicationOptions:
    replace: Optional[bool] = None
    timeout: Optional[timedelta] = None
    allow_test_packages: Optional[bool] = None
    use_sdcard: Optional[bool] = None
    grant_permissions: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.timeout is not None:
            _check_timeout(self.timeout)

    def with_replace_enabled(self) -> "AndroidInstallApplicationOptions":
        """Reinstall over an existing copy of the app (the server default)."""
        return dataclasses.replace(self, replace=True)

    def with_replace_disabled(self) -> "AndroidInstallApplicationOptions":
        return dataclasses.replace(self, replace=False)

    def with_timeout(self, timeout: timedelta) -> "AndroidInstallApplicationOptions":
        return dataclasses.replace(self, timeout=_check_timeout(timeout))

    def with_allow_test_packages_enabled(self) -> "AndroidInstallApplicationOptions":
        return dataclasses.replace(self, allow_test_packages=True)

    def with_allow_test_packages_disabled(self) -> "AndroidInstallApplicationOptions":
        return dataclasses.replace(self, allow_test_packages=False)

    def with_use_sdcard_enabled(self) -> "AndroidInstallApplicationOptions":
        return dataclasses.replace(self, use_sdcard=True)

    def with_use_sdcard_disabled(self) -> "AndroidInstallApplicationOptions":
        return dataclasses.replace(self, use_sdcard=False)

    def with_grant_permissions_enabled(self) -> "AndroidInstallApplicationOptions":
        """Grant all runtime permissions declared in the manifest (Android 6+)."""
        return dataclasses.replace(self, grant_permissions=True)

    def with_grant_permissions_disabled(self) -> "AndroidInstallApplicationOptions":
        return dataclasses.replace(self, grant_permissions=False)

    def build(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.replace is not None:
            out["replace"] = self.replace
        if self.timeout is not None:
            out["timeout"] = _timeout_ms(self.timeout)
        if self.allow_test_packages is not None:
            out["allowTestPackages"] = self.allow_test_packages
        if self.use_sdcard is not None:
            out["useSdcard"] = self.use_sdcard
        if self.grant_permissions is not None:
            out["grantPermissions"] = self.grant_permissions
        return out


@dataclass(frozen=True)
class AndroidRemoveApplicationOptions:
    timeout: Optional[timedelta] = None
    keep_data: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.timeout is not None:
            _check_timeout(self.timeout)

    def with_timeout(self, timeout: timedelta) -> "AndroidRemoveApplicationOptions":
        return dataclasses.replace(self, timeout=_check_timeout(timeout))

    def with_keep_data_enabled(self) -> "AndroidRemoveApplicationOptions":
        """Keep app data and cache directories after removal."""
        return dataclasses.replace(self, keep_data=True)

    def with_keep_data_disabled(self) -> "AndroidRemoveApplicationOptions":
        return dataclasses.replace(self, keep_data=False)

    def build(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.timeout is not None:
            out["timeout"] = _timeout_ms(self.timeout)
        if self.keep_data is not None:
            out["keepData"] = self.keep_data
        return out


@dataclass(frozen=True)
class AndroidTerminateApplicationOptions:
    timeout: Optional[timedelta] = None

    def __post_init__(self) -> None:
        if self.timeout is not None:
            _check_timeout(self.timeout)

    def with_timeout(self, timeout: timedelta) -> "AndroidTerminateApplicationOptions":
        """Time to wait until the app is terminated."""
        return dataclasses.replace(self, timeout=_check_timeout(timeout))

    def build(self) -> Dict[str, Any]:
        if self.timeout is None:
            return {}
        return {"timeout": _timeout_ms(self.timeout)}


@dataclass(frozen=True)
class IOSActivateApplicationOptions:
    """``environment`` is stored as ordered ``(key, value)`` pairs so instances stay hashable."""

    arguments: Tuple[str, ...] = ()
    environment: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", tuple(str(a) for a in self.arguments))
        env = self.environment
        pairs = env.items() if isinstance(env, Mapping) else env
        object.__setattr__(self, "environment", tuple((str(k), str(v)) for k, v in pairs))

    def with_arguments(self, arguments: Sequence[str]) -> "IOSActivateApplicationOptions":
        """Process arguments passed to the app when it is (re)launched."""
        return dataclasses.replace(self, arguments=tuple(arguments))

    def with_environment(self, environment: Mapping[str, str]) -> "IOSActivateApplicationOptions":
        return dataclasses.replace(self, environment=tuple(environment.items()))

    def build(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.arguments:
            out["arguments"] = list(self.arguments)
        if self.environment:
            out["environment"] = dict(self.environment)
        return out
