from __future__ import annotations

import contextlib
import importlib
import logging
import typing as t
import urllib.parse

from sqlbatch.constants import MYSQL_DEFAULT_PORT
from sqlbatch.errors import ConnectError

log = logging.getLogger(__name__)

_Args = t.Tuple[t.Tuple[t.Any, ...], t.Dict[str, t.Any]]


def _no_driver(url: str) -> ConnectError:
    return ConnectError(f"No suitable driver for {url}")


def _coerce(value: str) -> t.Any:
    """Option values arrive as text; mysql-connector wants real bools and ints."""
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered.lstrip("-").isdigit():
        return int(lowered)
    return value


def _mysql_args(url, user, password, properties, autocommit) -> _Args:
    """``mysql://host[:port]/database?opt=value`` → mysql‑connector kwargs."""
    parts = urllib.parse.urlsplit(url)
    if parts.scheme not in ("mysql", "mariadb"):
        raise _no_driver(url)
    try:
        port = parts.port or MYSQL_DEFAULT_PORT
    except ValueError as exc:
        raise ConnectError(f"Invalid port in {url}") from exc

    kwargs: dict[str, t.Any] = {
        "host": parts.hostname or "127.0.0.1",
        "port": port,
        "autocommit": autocommit,
    }
    database = parts.path.lstrip("/")
    if database:
        kwargs["database"] = database
    options = dict(urllib.parse.parse_qsl(parts.query))
    options.update(properties)
    kwargs.update((key, _coerce(value)) for key, value in options.items())

    user = parts.username if parts.username is not None else user
    password = parts.password if parts.password is not None else password
    if user is not None:
        kwargs["user"] = user
    if password is not None:
        kwargs["password"] = password
    return (), kwargs


def _sqlite_args(url, user, password, properties, autocommit) -> _Args:
    """``sqlite:///relative.db``, ``sqlite:////abs/path.db`` or ``sqlite://``."""
    if url == "sqlite://":
        database = ":memory:"
    elif url.startswith("sqlite:///"):
        database = url[len("sqlite:///"):] or ":memory:"
    else:
        raise _no_driver(url)
    kwargs: dict[str, t.Any] = {}
    if autocommit:
        kwargs["isolation_level"] = None
    return (database,), kwargs


def _generic_args(url, user, password, properties, autocommit) -> _Args:
    kwargs: dict[str, t.Any] = dict(properties)
    if user is not None:
        kwargs["user"] = user
    if password is not None:
        kwargs["password"] = password
    return (url,), kwargs


_ADAPTERS: dict[str, t.Callable[..., _Args]] = {
    "mysql.connector": _mysql_args,
    "sqlite3": _sqlite_args,
}


class Driver:
    """
    A DB‑API 2.0 module loaded by import name, plus the knowledge of how to
    turn an endpoint URL into that module's ``connect()`` arguments.
    """

    def __init__(self, name: str) -> None:
        try:
            module = importlib.import_module(name)
        except ImportError as exc:
            raise ConnectError(f"Driver module not found: {name}") from exc
        if not (callable(getattr(module, "connect", None)) and hasattr(module, "Error")):
            raise ConnectError(f"Failure loading driver: {name} is not a DB-API module")

        self.name = name
        self.module = module
        self.Error: type[Exception] = module.Error
        self.NotSupportedError: type[Exception] = getattr(module, "NotSupportedError", module.Error)

    def connect_args(
        self,
        url: str,
        *,
        user: str | None = None,
        password: str | None = None,
        properties: t.Mapping[str, str] | None = None,
        autocommit: bool = False,
    ) -> _Args:
        adapter = _ADAPTERS.get(self.name, _generic_args)
        return adapter(url, user, password, dict(properties or {}), autocommit)

    def connect(self, url: str, **kw):
        autocommit = kw.get("autocommit", False)
        args, kwargs = self.connect_args(url, **kw)
        log.debug("connecting to %s", url)
        try:
            conn = self.module.connect(*args, **kwargs)
        except self.Error as exc:
            raise ConnectError(f"Cannot connect to {url}: {exc}") from exc
        if conn is None:
            raise _no_driver(url)

        if self.name not in _ADAPTERS and hasattr(conn, "autocommit"):
            try:
                conn.autocommit = autocommit
            except (AttributeError, TypeError):
                log.debug("driver %s does not allow setting autocommit", self.name)
        return conn

    @contextlib.contextmanager
    def connection(self, url: str, **kw):
        """
        Context‑manager yielding a live connection; closing is always
        attempted and close errors are ignored.
        """
        conn = self.connect(url, **kw)
        try:
            yield conn
        finally:
            with contextlib.suppress(self.Error):
                conn.close()
