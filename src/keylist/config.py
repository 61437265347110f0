"""Typed configuration loader for the keylist CLI."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


def _coerce_bool(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in _TRUE:
            return True
        if normalized in _FALSE:
            return False
    raise BadInputError(f"{name} must be boolean")


def _coerce_indent(name: str, raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in {"none", "null", "off", ""}:
            return None
        raw = normalized
    if isinstance(raw, bool):
        raise BadInputError(f"{name} must be an integer or 'none'")
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise BadInputError(f"{name} must be an integer or 'none'") from exc


@dataclass
class WirePolicy:
    indent: int | None = None
    ensure_ascii: bool = False

    def validate(self) -> None:
        if self.indent is not None and self.indent < 0:
            raise BadInputError("wire.indent must be >= 0 when set")


@dataclass
class LoggingPolicy:
    level: str = "INFO"
    json: bool = False

    def validate(self) -> None:
        if self.level.upper() not in _LEVELS:
            raise BadInputError(f"logging.level must be one of {', '.join(sorted(_LEVELS))}")
        self.level = self.level.upper()


@dataclass
class AppConfig:
    wire: WirePolicy = field(default_factory=WirePolicy)
    logging: LoggingPolicy = field(default_factory=LoggingPolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        wire_data = data.get("wire", {})
        if not isinstance(wire_data, dict):
            raise BadInputError("[wire] section must be a table")
        logging_data = data.get("logging", {})
        if not isinstance(logging_data, dict):
            raise BadInputError("[logging] section must be a table")

        unknown = {f"wire.{key}" for key in set(wire_data) - {"indent", "ensure_ascii"}}
        unknown |= {f"logging.{key}" for key in set(logging_data) - {"level", "json"}}
        if unknown:
            raise BadInputError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        wire = WirePolicy()
        if "indent" in wire_data:
            wire.indent = _coerce_indent("wire.indent", wire_data["indent"])
        if "ensure_ascii" in wire_data:
            wire.ensure_ascii = _coerce_bool("wire.ensure_ascii", wire_data["ensure_ascii"])

        log_policy = LoggingPolicy()
        if "level" in logging_data:
            log_policy.level = str(logging_data["level"])
        if "json" in logging_data:
            log_policy.json = _coerce_bool("logging.json", logging_data["json"])
        return cls(wire=wire, logging=log_policy)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        raw_indent = env.get("KEYLIST_WIRE_INDENT")
        if raw_indent is not None:
            self.wire.indent = _coerce_indent("KEYLIST_WIRE_INDENT", raw_indent)
        raw_ascii = env.get("KEYLIST_WIRE_ENSURE_ASCII")
        if raw_ascii is not None:
            self.wire.ensure_ascii = _coerce_bool("KEYLIST_WIRE_ENSURE_ASCII", raw_ascii)
        raw_level = env.get("KEYLIST_LOG_LEVEL")
        if raw_level is not None:
            self.logging.level = raw_level.strip()
        raw_json = env.get("KEYLIST_LOG_JSON")
        if raw_json is not None:
            self.logging.json = _coerce_bool("KEYLIST_LOG_JSON", raw_json)

    def validate(self) -> None:
        self.wire.validate()
        self.logging.validate()


DEFAULT_CONFIG = AppConfig()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)


__all__ = ["AppConfig", "WirePolicy", "LoggingPolicy", "DEFAULT_CONFIG", "load_app_config"]
