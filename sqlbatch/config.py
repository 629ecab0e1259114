from __future__ import annotations
import enum
import os
import pathlib
import typing as t
import yaml

from sqlbatch.constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_DELIMITER,
    DEFAULT_DRIVER,
    DEFAULT_INCLUDES,
    DEFAULT_OUTPUT_DELIMITER,
)
from sqlbatch.errors import ConfigError

__all__ = [
    "ConfigError",
    "DelimiterType",
    "ExecConfig",
    "OnError",
    "OrderFile",
    "expand_secret",
    "load",
    "load_raw",
    "parse_driver_properties",
]


class OnError(str, enum.Enum):
    ABORT = "abort"
    ABORT_AFTER = "abortAfter"
    CONTINUE = "continue"


class DelimiterType(str, enum.Enum):
    NORMAL = "normal"
    ROW = "row"


class OrderFile(str, enum.Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


_E = t.TypeVar("_E", bound=enum.Enum)


def _enum(cls: type[_E], value: t.Any, key: str) -> _E:
    if isinstance(value, cls):
        return value
    for member in cls:
        if str(value).lower() == member.value.lower():
            return member
    allowed = ", ".join(f"'{m.value}'" for m in cls)
    raise ConfigError(f"{value!r} is not a valid value for {key}, only {allowed}.")


def _bool(value: t.Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in ("1", "true", "yes", "y", "on"):
        return True
    if s in ("0", "false", "no", "n", "off", ""):
        return False
    raise ConfigError(f"Invalid boolean value for {key}: {value!r}")


def expand_secret(raw: t.Any) -> str | None:
    """Resolve ``${ENV_VAR}`` references; plain values pass through."""
    if raw is None:
        return None
    raw = str(raw)
    if raw.startswith("${") and raw.endswith("}"):
        var = raw[2:-1]
        value = os.getenv(var)
        if value is None:
            raise ConfigError(f"Environment variable {var!r} is not set")
        return value
    return raw


def parse_driver_properties(raw: t.Any) -> dict[str, str]:
    """
    Turn ``"key=value, key2=value2"`` (or a YAML mapping) into a dict of
    extra keyword arguments for the driver's ``connect()``.
    """
    if not raw:
        return {}
    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items()}

    props: dict[str, str] = {}
    for token in str(raw).split(","):
        if not token.strip():
            continue
        key, sep, value = token.strip().partition("=")
        if not sep or not key.strip() or not value.strip() or "=" in value:
            raise ConfigError(f"Invalid driver properties: {raw}")
        props[key.strip()] = value.strip()
    return props


def _default(d: dict[str, t.Any], key: str, fallback: t.Any) -> t.Any:
    value = d.get(key)
    return fallback if value is None else value


def _as_list(value: t.Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


class ExecConfig:
    """
    Everything one run needs: endpoints, sources, parser and error policy.
    Built from the flat key/value mapping of a config profile; nothing here
    talks to the database.
    """

    def __init__(self, name: str, d: dict[str, t.Any]) -> None:
        self.name: str = name

        # ---------------------------------------------------------------- #
        # Database
        # ---------------------------------------------------------------- #
        self.driver: str = d.get("driver") or DEFAULT_DRIVER
        self.url: str | None = d.get("url")
        self.urls: list[str] = [
            u.strip()
            for entry in _as_list(d.get("urls"))
            for u in entry.split()
            if u.strip()
        ]
        self.username: str | None = d.get("username")
        self.password: str | None = expand_secret(d.get("password"))
        self.settings_key: str | None = d.get("settingsKey")
        raw_settings = d.get("settingsFile")
        self.settings_file: pathlib.Path | None = (
            pathlib.Path(raw_settings).expanduser() if raw_settings else None
        )
        self.enable_anonymous_password: bool = _bool(
            d.get("enableAnonymousPassword", False), "enableAnonymousPassword"
        )
        self.driver_properties: dict[str, str] = parse_driver_properties(
            d.get("driverProperties")
        )
        self.skip_on_connection_error: bool = _bool(
            d.get("skipOnConnectionError", False), "skipOnConnectionError"
        )
        self.autocommit: bool = _bool(d.get("autocommit", False), "autocommit")

        # ---------------------------------------------------------------- #
        # Sources
        # ---------------------------------------------------------------- #
        self.sql_command: str = str(d.get("sqlCommand") or "")
        self.src_files: list[pathlib.Path] = [
            pathlib.Path(p).expanduser() for p in _as_list(d.get("srcFiles"))
        ]
        fileset = d.get("fileset") or {}
        if not isinstance(fileset, dict):
            raise ConfigError("fileset must be a mapping with a `basedir` key")
        self.fileset_dir: pathlib.Path | None = (
            pathlib.Path(fileset["basedir"]).expanduser() if fileset.get("basedir") else None
        )
        self.fileset_includes: list[str] = _as_list(fileset.get("includes")) or list(DEFAULT_INCLUDES)
        self.fileset_excludes: list[str] = _as_list(fileset.get("excludes"))
        self.encoding: str | None = d.get("encoding") or None
        self.enable_filtering: bool = _bool(d.get("enableFiltering", False), "enableFiltering")
        self.filter_properties: dict[str, str] = {
            str(k): str(v) for k, v in (d.get("filterProperties") or {}).items()
        }
        self.skip: bool = _bool(d.get("skip", False), "skip")

        # ---------------------------------------------------------------- #
        # Parser / policy
        # ---------------------------------------------------------------- #
        self.on_error: OnError = _enum(OnError, _default(d, "onError", OnError.ABORT), "onError")
        self.delimiter: str = str(_default(d, "delimiter", DEFAULT_DELIMITER))
        if not self.delimiter:
            raise ConfigError("delimiter must not be empty")
        self.delimiter_type: DelimiterType = _enum(
            DelimiterType, _default(d, "delimiterType", DelimiterType.NORMAL), "delimiterType"
        )
        order = d.get("orderFile")
        self.order_file: OrderFile | None = _enum(OrderFile, order, "orderFile") if order else None
        self.enable_block_mode: bool = _bool(d.get("enableBlockMode", False), "enableBlockMode")
        self.keep_format: bool = _bool(d.get("keepFormat", False), "keepFormat")

        # ---------------------------------------------------------------- #
        # Output
        # ---------------------------------------------------------------- #
        self.print_result_set: bool = _bool(d.get("printResultSet", False), "printResultSet")
        self.show_headers: bool = _bool(d.get("showheaders", True), "showheaders")
        raw_out = d.get("outputFile")
        self.output_file: pathlib.Path | None = pathlib.Path(raw_out).expanduser() if raw_out else None
        self.output_delimiter: str = (
            DEFAULT_OUTPUT_DELIMITER if d.get("outputDelimiter") is None else str(d["outputDelimiter"])
        )
        self.append: bool = _bool(d.get("append", False), "append")

    def endpoints(self) -> list[str]:
        """`urls` wins over `url`; at least one endpoint is required."""
        if self.urls:
            return list(self.urls)
        if self.url:
            return [self.url]
        raise ConfigError("No database url configured (set `url` or `urls`)")


def load_raw(path: pathlib.Path | str | None = None, env: str | None = None) -> tuple[str, dict[str, t.Any]]:
    """
    Return ``(profile_name, mapping)`` from *path* (or the default YAML).

    A missing default file yields an empty profile so that everything can be
    given on the command line; an explicitly named file must exist.
    """
    cfg_file = pathlib.Path(path) if path else DEFAULT_CONFIG_FILE
    if not cfg_file.exists():
        if path:
            raise ConfigError(f"Config file {cfg_file} not found.")
        return env or "default", {}

    with cfg_file.open(encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {cfg_file} must contain a mapping")

    if "environments" not in raw:
        return env or "default", raw

    env_name = env or raw.get("default_env")
    if not env_name:
        raise ConfigError("No environment specified and no default_env in config")
    try:
        return env_name, dict(raw["environments"][env_name] or {})
    except KeyError as exc:
        raise ConfigError(f"Environment {env_name!r} not found in config") from exc


def load(
    path: pathlib.Path | str | None = None,
    env: str | None = None,
    overrides: dict[str, t.Any] | None = None,
) -> ExecConfig:
    """
    Parse *path* and overlay *overrides* (``None`` values are ignored),
    returning a validated :class:`ExecConfig`.
    """
    name, data = load_raw(path, env)
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return ExecConfig(name, data)
