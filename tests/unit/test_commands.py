from __future__ import annotations

import pytest

from mas_appmgmt.commands import (
    COMMAND_ENDPOINTS,
    CommandId,
    prepare_argument,
    prepare_arguments,
    with_options,
)


class _Opts:
    def __init__(self, built: dict) -> None:
        self.built = built
        self.build_calls = 0

    def build(self) -> dict:
        self.build_calls += 1
        return dict(self.built)


def test_prepare_arguments_preserves_order() -> None:
    args = prepare_arguments(["b", "a", "c"], [1, 2, 3])
    assert list(args.items()) == [("b", 1), ("a", 2), ("c", 3)]


def test_prepare_arguments_skips_none_values_and_blank_names() -> None:
    assert prepare_arguments(["appPath", "options", " "], ["/tmp/app.apk", None, 5]) == {
        "appPath": "/tmp/app.apk"
    }


def test_prepare_arguments_keeps_falsy_non_none_values() -> None:
    assert prepare_arguments(["seconds", "flag"], [0, False]) == {"seconds": 0, "flag": False}


def test_prepare_arguments_rejects_duplicate_names() -> None:
    with pytest.raises(ValueError, match="Duplicate argument name"):
        prepare_arguments(["bundleId", "bundleId"], ["a", "b"])


def test_prepare_arguments_rejects_length_mismatch() -> None:
    with pytest.raises(ValueError):
        prepare_arguments(["bundleId"], ["a", "b"])


def test_prepare_arguments_does_not_mutate_inputs() -> None:
    names = ["bundleId", "options"]
    values = ["com.example.app", {"timeout": 5}]
    prepare_arguments(names, values)
    assert names == ["bundleId", "options"]
    assert values == ["com.example.app", {"timeout": 5}]


def test_prepare_argument_single_pair() -> None:
    assert prepare_argument("bundleId", "com.example.app") == {"bundleId": "com.example.app"}


def test_with_options_absent_has_no_options_key() -> None:
    assert with_options("bundleId", "com.example.app", None) == {"bundleId": "com.example.app"}


def test_with_options_present_nests_built_mapping() -> None:
    opts = _Opts({"timeout": 500, "bundleId": "shadow"})
    args = with_options("bundleId", "com.example.app", opts)
    assert args == {"bundleId": "com.example.app", "options": {"timeout": 500, "bundleId": "shadow"}}
    assert opts.build_calls == 1


def test_every_command_has_an_endpoint() -> None:
    assert set(COMMAND_ENDPOINTS) == set(CommandId)
    for method, template in COMMAND_ENDPOINTS.values():
        assert method == "POST"
        assert template.startswith("/session/{session_id}/appium/")


def test_command_id_str_is_wire_name() -> None:
    assert str(CommandId.QUERY_APP_STATE) == "queryAppState"
    assert CommandId("terminateApp") is CommandId.TERMINATE_APP
