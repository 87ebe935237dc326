from __future__ import annotations

import json
from datetime import timedelta

import httpx
import pytest

from mas_appmgmt.appmanagement.options import AndroidTerminateApplicationOptions
from mas_appmgmt.appmanagement.state import ApplicationState
from mas_appmgmt.commands import CommandId
from mas_appmgmt.driver import AppDriver
from mas_appmgmt.errors import RemoteCommandError, UnknownStateCode
from mas_appmgmt.executor.http import HttpCommandExecutor

SERVER = "http://appium.local:4723"


class _Server:
    """Records requests and answers from a path -> (status, body) table."""

    def __init__(self, routes: dict[str, tuple[int, object]]) -> None:
        self.routes = routes
        self.requests: list[tuple[str, str, object]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        status, payload = self.routes.get(request.url.path, (404, {"value": {"error": "unknown command", "message": "no route"}}))
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)


def _executor(server: _Server, *, session_id: str | None = "s1") -> HttpCommandExecutor:
    client = httpx.Client(transport=httpx.MockTransport(server))
    return HttpCommandExecutor(server_url=SERVER + "/", session_id=session_id, client=client)


def test_query_app_state_round_trip() -> None:
    server = _Server({"/session/s1/appium/device/app_state": (200, {"value": 4})})
    driver = AppDriver(_executor(server))
    assert driver.query_app_state("com.example.app") is ApplicationState.RUNNING_IN_FOREGROUND
    assert server.requests == [
        ("POST", "/session/s1/appium/device/app_state", {"bundleId": "com.example.app"})
    ]


def test_unknown_state_code_from_server_is_decode_error() -> None:
    server = _Server({"/session/s1/appium/device/app_state": (200, {"value": 99})})
    with pytest.raises(UnknownStateCode):
        AppDriver(_executor(server)).query_app_state("com.example.app")


def test_terminate_sends_nested_options() -> None:
    server = _Server({"/session/s1/appium/device/terminate_app": (200, {"value": True})})
    driver = AppDriver(_executor(server))
    opts = AndroidTerminateApplicationOptions().with_timeout(timedelta(seconds=1))
    assert driver.terminate_app("com.example.app", opts) is True
    assert server.requests[0][2] == {"bundleId": "com.example.app", "options": {"timeout": 1000}}


def test_background_posts_seconds() -> None:
    server = _Server({"/session/s1/appium/app/background": (200, {"value": None})})
    _executor(server).execute(CommandId.RUN_APP_IN_BACKGROUND, {"seconds": 1.5})
    assert server.requests == [("POST", "/session/s1/appium/app/background", {"seconds": 1.5})]


def test_remote_error_value_raises_remote_command_error() -> None:
    server = _Server(
        {
            "/session/s1/appium/device/remove_app": (
                500,
                {"value": {"error": "unknown error", "message": "App not found", "stacktrace": ""}},
            )
        }
    )
    with pytest.raises(RemoteCommandError) as excinfo:
        AppDriver(_executor(server)).remove_app("com.missing")
    err = excinfo.value
    assert err.command == "removeApp"
    assert err.error == "unknown error"
    assert err.message == "App not found"
    assert err.status_code == 500


def test_non_json_error_body() -> None:
    server = _Server({"/session/s1/appium/device/activate_app": (502, "Bad Gateway")})
    with pytest.raises(RemoteCommandError) as excinfo:
        _executor(server).execute(CommandId.ACTIVATE_APP, {"bundleId": "com.example.app"})
    assert excinfo.value.status_code == 502


def test_success_without_value_is_malformed() -> None:
    server = _Server({"/session/s1/appium/device/app_installed": (200, {"status": 0})})
    with pytest.raises(RemoteCommandError, match="malformed"):
        _executor(server).execute(CommandId.IS_APP_INSTALLED, {"bundleId": "x"})


def test_transport_error_is_wrapped() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(refuse))
    ex = HttpCommandExecutor(server_url=SERVER, session_id="s1", client=client)
    with pytest.raises(RemoteCommandError) as excinfo:
        ex.execute(CommandId.IS_APP_INSTALLED, {"bundleId": "x"})
    assert excinfo.value.error == "transport error"
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_execute_without_session_fails_fast() -> None:
    server = _Server({})
    with pytest.raises(RemoteCommandError, match="no active session"):
        _executor(server, session_id=None).execute(CommandId.IS_APP_INSTALLED, {"bundleId": "x"})
    assert server.requests == []


def test_create_and_delete_session() -> None:
    server = _Server(
        {
            "/session": (200, {"value": {"sessionId": "abc", "capabilities": {}}}),
            "/session/abc": (200, {"value": None}),
        }
    )
    ex = _executor(server, session_id=None)
    assert ex.create_session({"platformName": "Android"}) == "abc"
    assert ex.session_id == "abc"
    assert server.requests[0] == (
        "POST",
        "/session",
        {"capabilities": {"alwaysMatch": {"platformName": "Android"}, "firstMatch": [{}]}},
    )
    ex.delete_session()
    assert ex.session_id is None
    assert server.requests[1][:2] == ("DELETE", "/session/abc")


def test_close_leaves_caller_owned_client_open() -> None:
    client = httpx.Client(transport=httpx.MockTransport(_Server({})))
    with HttpCommandExecutor(server_url=SERVER, session_id="s1", client=client):
        pass
    assert client.is_closed is False
