from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from mas_appmgmt.commands import CommandId


@runtime_checkable
class CommandExecutor(Protocol):
    """Sends one named command to the device side and returns its raw result.

    Implementations perform at most one remote round trip per call and raise
    ``RemoteCommandError`` on failure. The result is untyped; decoding is the
    caller's job.
    """

    def execute(self, command: CommandId, arguments: Mapping[str, Any]) -> Any: ...
