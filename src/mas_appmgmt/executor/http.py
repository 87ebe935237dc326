"""Command executor speaking the Appium (W3C WebDriver) wire protocol over httpx."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from mas_appmgmt.commands import COMMAND_ENDPOINTS, CommandId
from mas_appmgmt.errors import RemoteCommandError

logger = logging.getLogger(__name__)


def _error_from_value(value: Any) -> Optional[tuple[str, str]]:
    if isinstance(value, Mapping) and isinstance(value.get("error"), str):
        return value["error"], str(value.get("message") or "")
    return None


class HttpCommandExecutor:
    """Executes lifecycle commands against an existing Appium session.

    The executor owns its ``httpx.Client`` only when it created one; a client
    passed in by the caller is left open by ``close()``.
    """

    def __init__(
        self,
        *,
        server_url: str,
        session_id: Optional[str] = None,
        timeout_s: float = 60.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._server_url = str(server_url).rstrip("/")
        self._session_id = session_id
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout_s)

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    def __enter__(self) -> "HttpCommandExecutor":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        command: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        url = self._server_url + path
        logger.debug("%s %s %s", method, url, payload)
        try:
            resp = self._client.request(
                method, url, json=dict(payload) if payload is not None else None
            )
        except httpx.HTTPError as e:
            raise RemoteCommandError(
                f"{type(e).__name__}: {e}", command=command, error="transport error"
            ) from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        value = body.get("value") if isinstance(body, dict) else None
        remote_error = _error_from_value(value)
        if remote_error is not None:
            error, message = remote_error
            raise RemoteCommandError(
                message or error, command=command, error=error, status_code=resp.status_code
            )
        if resp.is_error:
            raise RemoteCommandError(
                resp.text[:500] or resp.reason_phrase,
                command=command,
                error=f"http {resp.status_code}",
                status_code=resp.status_code,
            )
        if not isinstance(body, dict) or "value" not in body:
            raise RemoteCommandError(
                f"malformed response body: {resp.text[:200]!r}",
                command=command,
                error="invalid response",
                status_code=resp.status_code,
            )
        return value

    def create_session(self, capabilities: Mapping[str, Any]) -> str:
        """Start a new session with W3C capabilities and remember its id."""

        payload = {"capabilities": {"alwaysMatch": dict(capabilities), "firstMatch": [{}]}}
        value = self._request("POST", "/session", command="newSession", payload=payload)
        session_id = value.get("sessionId") if isinstance(value, dict) else None
        if not isinstance(session_id, str) or not session_id:
            raise RemoteCommandError(
                f"newSession returned no sessionId: {value!r}",
                command="newSession",
                error="invalid response",
            )
        self._session_id = session_id
        logger.info("created session %s", session_id)
        return session_id

    def delete_session(self) -> None:
        if self._session_id is None:
            return
        self._request("DELETE", f"/session/{self._session_id}", command="deleteSession")
        self._session_id = None

    def execute(self, command: CommandId, arguments: Mapping[str, Any]) -> Any:
        endpoint = COMMAND_ENDPOINTS.get(command)
        if endpoint is None:
            raise RemoteCommandError(
                "no endpoint for command", command=str(command), error="unknown command"
            )
        if not self._session_id:
            raise RemoteCommandError(
                "no active session", command=str(command), error="invalid session id"
            )
        method, template = endpoint
        path = template.format(session_id=self._session_id)
        value = self._request(method, path, command=str(command), payload=arguments)
        logger.debug("%s -> %r", command, value)
        return value

