"""Command executors: the single transport seam for lifecycle commands."""

from __future__ import annotations

from mas_appmgmt.executor.adb import AdbCommandExecutor
from mas_appmgmt.executor.base import CommandExecutor
from mas_appmgmt.executor.http import HttpCommandExecutor

__all__ = ["AdbCommandExecutor", "CommandExecutor", "HttpCommandExecutor"]
