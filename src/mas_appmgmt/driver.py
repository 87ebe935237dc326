from __future__ import annotations

import logging
from typing import Any, Mapping

from mas_appmgmt.commands import CommandId
from mas_appmgmt.executor.base import CommandExecutor
from mas_appmgmt.interacts import InteractsWithApps

logger = logging.getLogger(__name__)


class AppDriver(InteractsWithApps):
    """Application-lifecycle facade bound to one command executor.

    The driver holds no state besides the executor; every call is a single
    round trip through ``executor.execute``.
    """

    def __init__(self, executor: CommandExecutor) -> None:
        self._executor = executor

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    def execute(self, command: CommandId, arguments: Mapping[str, Any]) -> Any:
        logger.debug("execute %s %s", command, dict(arguments))
        result = self._executor.execute(command, arguments)
        logger.debug("%s returned %r", command, result)
        return result

    def close(self) -> None:
        close = getattr(self._executor, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "AppDriver":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
