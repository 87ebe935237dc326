from __future__ import annotations

from datetime import timedelta

import pytest

from mas_appmgmt.appmanagement.options import (
    AndroidInstallApplicationOptions,
    AndroidRemoveApplicationOptions,
    AndroidTerminateApplicationOptions,
    ApplicationOptions,
    IOSActivateApplicationOptions,
)


def test_install_options_emit_only_set_fields() -> None:
    assert AndroidInstallApplicationOptions().build() == {}
    opts = (
        AndroidInstallApplicationOptions()
        .with_replace_disabled()
        .with_timeout(timedelta(seconds=90))
        .with_allow_test_packages_enabled()
        .with_use_sdcard_disabled()
        .with_grant_permissions_enabled()
    )
    assert opts.build() == {
        "replace": False,
        "timeout": 90_000,
        "allowTestPackages": True,
        "useSdcard": False,
        "grantPermissions": True,
    }


def test_install_options_builders_return_new_instances() -> None:
    base = AndroidInstallApplicationOptions()
    changed = base.with_replace_enabled()
    assert base.build() == {}
    assert changed.build() == {"replace": True}


def test_build_is_idempotent_and_returns_fresh_dicts() -> None:
    opts = IOSActivateApplicationOptions().with_arguments(["-a", "1"]).with_environment({"K": "V"})
    first = opts.build()
    second = opts.build()
    assert first == second == {"arguments": ["-a", "1"], "environment": {"K": "V"}}
    first["arguments"].append("mutated")
    assert opts.build() == second


def test_remove_options() -> None:
    opts = AndroidRemoveApplicationOptions().with_keep_data_enabled().with_timeout(
        timedelta(milliseconds=1500)
    )
    assert opts.build() == {"timeout": 1500, "keepData": True}


def test_terminate_options_timeout_in_ms() -> None:
    assert AndroidTerminateApplicationOptions().build() == {}
    assert AndroidTerminateApplicationOptions(timeout=timedelta(seconds=2)).build() == {
        "timeout": 2000
    }


def test_negative_timeout_is_rejected() -> None:
    with pytest.raises(ValueError, match="cannot be negative"):
        AndroidTerminateApplicationOptions().with_timeout(timedelta(seconds=-1))
    with pytest.raises(ValueError):
        AndroidInstallApplicationOptions(timeout=timedelta(milliseconds=-5))


def test_all_variants_satisfy_the_options_protocol() -> None:
    for opts in (
        AndroidInstallApplicationOptions(),
        AndroidRemoveApplicationOptions(),
        AndroidTerminateApplicationOptions(),
        IOSActivateApplicationOptions(),
    ):
        assert isinstance(opts, ApplicationOptions)


def test_activate_options_are_hashable_value_objects() -> None:
    from_mapping = IOSActivateApplicationOptions(arguments=["-v"], environment={"K": "V", "A": "1"})
    chained = IOSActivateApplicationOptions().with_arguments(["-v"]).with_environment(
        {"K": "V", "A": "1"}
    )
    assert from_mapping == chained
    assert hash(from_mapping) == hash(chained)
    assert len({from_mapping, chained}) == 1
    assert from_mapping.environment == (("K", "V"), ("A", "1"))
    assert from_mapping.build() == {"arguments": ["-v"], "environment": {"K": "V", "A": "1"}}
