from __future__ import annotations

import argparse
import json
import logging
import shlex
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional, Sequence

from mas_appmgmt.appmanagement.options import (
    AndroidInstallApplicationOptions,
    AndroidRemoveApplicationOptions,
    AndroidTerminateApplicationOptions,
    IOSActivateApplicationOptions,
)
from mas_appmgmt.config import load_driver_config
from mas_appmgmt.driver import AppDriver
from mas_appmgmt.errors import ConfigError, DecodeError, RemoteCommandError

logger = logging.getLogger(__name__)


def _tri_state(parser: argparse.ArgumentParser, name: str, help_text: str) -> None:
    dest = name.replace("-", "_")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(f"--{name}", dest=dest, action="store_true", default=None, help=help_text)
    group.add_argument(f"--no-{name}", dest=dest, action="store_false", default=None)


def _timeout(raw: Optional[int]) -> Optional[timedelta]:
    return None if raw is None else timedelta(milliseconds=raw)


def _non_negative_ms(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError("the timeout value cannot be negative")
    try:
        timedelta(milliseconds=value)
    except OverflowError:
        raise argparse.ArgumentTypeError(f"timeout out of range: {value}") from None
    return value


def _seconds(raw: str) -> float:
    try:
        value = float(raw)
        timedelta(seconds=value)
    except (ValueError, OverflowError):
        raise argparse.ArgumentTypeError(f"expected a finite number of seconds, got {raw!r}") from None
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mas-appctl",
        description="Install, query and control apps on a device under test.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Driver profile (YAML/JSON).")
    parser.add_argument("--backend", choices=["http", "adb"], default=None)
    parser.add_argument("--server_url", default=None, help="Appium server URL (http backend).")
    parser.add_argument("--session_id", default=None, help="Existing Appium session id.")
    parser.add_argument("--serial", default=None, help="adb device serial (adb backend).")
    parser.add_argument("--adb_path", default=None)
    parser.add_argument(
        "--log_level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("install", help="Install an app from a path or URL.")
    p.add_argument("app_path")
    _tri_state(p, "replace", "Reinstall over an existing copy.")
    _tri_state(p, "allow-test-packages", "Allow test-only packages.")
    _tri_state(p, "use-sdcard", "Install to external storage.")
    _tri_state(p, "grant-permissions", "Grant all runtime permissions.")
    p.add_argument("--timeout_ms", type=_non_negative_ms, default=None)

    p = sub.add_parser("installed", help="Check whether an app is installed.")
    p.add_argument("bundle_id")

    p = sub.add_parser("background", help="Send the current app to the background.")
    p.add_argument("seconds", type=_seconds, help="<= 0 switches to home and returns at once.")

    p = sub.add_parser("remove", help="Uninstall an app.")
    p.add_argument("bundle_id")
    _tri_state(p, "keep-data", "Keep app data and cache.")
    p.add_argument("--timeout_ms", type=_non_negative_ms, default=None)

    p = sub.add_parser("activate", help="Bring an app to the foreground.")
    p.add_argument("bundle_id")
    p.add_argument(
        "--arg",
        dest="process_args",
        action="append",
        default=[],
        metavar="ARG",
        help="Process argument; repeatable. Use --arg=VALUE for values starting with '-'.",
    )
    p.add_argument(
        "--args",
        dest="process_args_line",
        default=None,
        metavar="\"ARG ...\"",
        help="Process arguments as one shell-quoted string, appended after --arg values.",
    )
    p.add_argument("--env", action="append", default=[], metavar="KEY=VALUE")

    p = sub.add_parser("state", help="Query the lifecycle state of an app.")
    p.add_argument("bundle_id")

    p = sub.add_parser("terminate", help="Stop an app if it is running.")
    p.add_argument("bundle_id")
    p.add_argument("--timeout_ms", type=_non_negative_ms, default=None)

    return parser


def _parse_env(pairs: Sequence[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for raw in pairs:
        if "=" not in raw:
            raise ConfigError(f"--env expects KEY=VALUE, got {raw!r}")
        k, v = raw.split("=", 1)
        env[k] = v
    return env


def _process_args(repeated: Sequence[str], line: Optional[str]) -> tuple[str, ...]:
    out = list(repeated)
    if line:
        try:
            out.extend(shlex.split(line))
        except ValueError as e:
            raise ConfigError(f"--args: {e}") from e
    return tuple(out)


def run_command(driver: AppDriver, args: argparse.Namespace) -> Any:
    if args.command == "install":
        opts = AndroidInstallApplicationOptions(
            replace=args.replace,
            timeout=_timeout(args.timeout_ms),
            allow_test_packages=args.allow_test_packages,
            use_sdcard=args.use_sdcard,
            grant_permissions=args.grant_permissions,
        )
        driver.install_app(args.app_path, opts if opts.build() else None)
        return {"installed": args.app_path}
    if args.command == "installed":
        return {"bundle_id": args.bundle_id, "installed": driver.is_app_installed(args.bundle_id)}
    if args.command == "background":
        driver.run_app_in_background(timedelta(seconds=args.seconds))
        return {"backgrounded_s": args.seconds}
    if args.command == "remove":
        opts = AndroidRemoveApplicationOptions(
            timeout=_timeout(args.timeout_ms), keep_data=args.keep_data
        )
        removed = driver.remove_app(args.bundle_id, opts if opts.build() else None)
        return {"bundle_id": args.bundle_id, "removed": removed}
    if args.command == "activate":
        opts = IOSActivateApplicationOptions(
            arguments=_process_args(args.process_args, args.process_args_line),
            environment=_parse_env(args.env),
        )
        driver.activate_app(args.bundle_id, opts if opts.build() else None)
        return {"bundle_id": args.bundle_id, "activated": True}
    if args.command == "state":
        state = driver.query_app_state(args.bundle_id)
        return {"bundle_id": args.bundle_id, "state": state.name, "code": int(state)}
    if args.command == "terminate":
        opts = AndroidTerminateApplicationOptions(timeout=_timeout(args.timeout_ms))
        stopped = driver.terminate_app(args.bundle_id, opts if opts.build() else None)
        return {"bundle_id": args.bundle_id, "terminated": stopped}
    raise ConfigError(f"unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        cfg = load_driver_config(
            args.config,
            overrides={
                "backend": args.backend,
                "server_url": args.server_url,
                "session_id": args.session_id,
                "serial": args.serial,
                "adb_path": args.adb_path,
            },
        )
        driver = cfg.build_driver()
    except ConfigError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    except RemoteCommandError as e:
        logger.exception("could not open a session")
        print(f"error: {e}", file=sys.stderr)
        return 1

    with driver:
        try:
            result = run_command(driver, args)
        except ConfigError as e:
            print(f"config error: {e}", file=sys.stderr)
            return 2
        except (RemoteCommandError, DecodeError) as e:
            logger.debug("%s failed", args.command, exc_info=True)
            print(f"error: {e}", file=sys.stderr)
            return 1

    print(json.dumps(result, ensure_ascii=False, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
