"""Driver profiles: which backend to talk to and how.

A profile is a YAML or JSON object validated against
``schemas/driver_profile.schema.json``. Environment variables override the
file so the same profile can be reused across devices:

* ``MAS_APPIUM_URL`` -> ``server_url``
* ``MAS_APPIUM_SESSION`` -> ``session_id``
* ``MAS_ANDROID_SERIAL`` / ``ANDROID_SERIAL`` -> ``serial``
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from jsonschema import Draft202012Validator

from mas_appmgmt.driver import AppDriver
from mas_appmgmt.errors import ConfigError

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "driver_profile.schema.json"


def load_yaml_or_json(path: Path) -> Dict[str, Any]:
    """Load a YAML/JSON file into a dict; the top level must be an object."""

    if not path.exists():
        raise ConfigError(f"Driver profile not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        elif path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            raise ConfigError(f"Unsupported profile file extension: {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot parse driver profile {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top-level driver profile must be an object: {path}")
    return data


def load_schema(schema_path: Path = SCHEMA_PATH) -> Dict[str, Any]:
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    if not isinstance(schema, dict):
        raise ConfigError(f"Schema must be an object: {schema_path}")
    return schema


def validate_profile(instance: Mapping[str, Any], *, where: str) -> None:
    validator = Draft202012Validator(load_schema())
    errors = sorted(validator.iter_errors(dict(instance)), key=lambda e: list(e.path))
    if errors:
        msgs = []
        for e in errors[:20]:
            loc = "/".join([str(p) for p in e.path])
            msgs.append(f"- {where}:{loc}: {e.message}")
        if len(errors) > 20:
            msgs.append(f"... ({len(errors)-20} more)")
        raise ConfigError("\n".join(msgs))


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    url = (environ.get("MAS_APPIUM_URL") or "").strip()
    if url:
        out["server_url"] = url
    session = (environ.get("MAS_APPIUM_SESSION") or "").strip()
    if session:
        out["session_id"] = session
    serial = (environ.get("MAS_ANDROID_SERIAL") or environ.get("ANDROID_SERIAL") or "").strip()
    if serial:
        out["serial"] = serial
    return out


@dataclass(frozen=True)
class DriverConfig:
    backend: str
    server_url: Optional[str] = None
    session_id: Optional[str] = None
    capabilities: Dict[str, Any] = field(default_factory=dict)
    timeout_s: float = 60.0
    adb_path: str = "adb"
    serial: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, where: str = "<profile>") -> "DriverConfig":
        validate_profile(data, where=where)
        return cls(**dict(data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def build_driver(self) -> AppDriver:
        """Construct the executor for ``backend`` and wrap it in an ``AppDriver``.

        For the http backend a new session is created from ``capabilities``
        when no ``session_id`` is configured.
        """

        if self.backend == "adb":
            from mas_appmgmt.executor.adb import AdbCommandExecutor
            from mas_appmgmt.runtime.android.controller import AndroidController

            controller = AndroidController(
                adb_path=self.adb_path, serial=self.serial, timeout_s=self.timeout_s
            )
            return AppDriver(AdbCommandExecutor(controller=controller))

        if self.backend == "http":
            from mas_appmgmt.executor.http import HttpCommandExecutor

            if not self.server_url:
                raise ConfigError("server_url is required for the http backend")
            executor = HttpCommandExecutor(
                server_url=self.server_url,
                session_id=self.session_id,
                timeout_s=self.timeout_s,
            )
            if not self.session_id:
                if not self.capabilities:
                    executor.close()
                    raise ConfigError("http backend needs either session_id or capabilities")
                try:
                    executor.create_session(self.capabilities)
                except Exception:
                    executor.close()
                    raise
            return AppDriver(executor)

        raise ConfigError(f"Unknown backend: {self.backend}")


def load_driver_config(
    path: Optional[Path] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DriverConfig:
    """Merge profile file < environment < explicit overrides, then validate."""

    data: Dict[str, Any] = {}
    where = "<defaults>"
    if path is not None:
        data.update(load_yaml_or_json(path))
        where = str(path)
    data.update(_env_overrides(os.environ if environ is None else environ))
    for k, v in (overrides or {}).items():
        if v is not None:
            data[k] = v
    data.setdefault("backend", "http" if data.get("server_url") else "adb")
    return DriverConfig.from_mapping(data, where=where)
