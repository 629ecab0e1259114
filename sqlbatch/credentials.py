"""
Username / password lookup from a YAML settings store::

    servers:
      mysql://db.internal/app:
        username: app
        password: ${APP_DB_PASSWORD}
      reporting:
        username: reader
        password: s3cret
"""
from __future__ import annotations

import dataclasses as dc
import pathlib
import typing as t

import yaml

from sqlbatch.config import ConfigError, ExecConfig, expand_secret


@dc.dataclass(frozen=True)
class Credentials:
    username: str = ""
    password: str | None = ""


class CredentialResolver:
    def __init__(self, servers: dict[str, dict[str, t.Any]] | None = None) -> None:
        self.servers = servers or {}

    @classmethod
    def from_file(cls, path: pathlib.Path | None) -> "CredentialResolver":
        if path is None:
            return cls()
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except FileNotFoundError as exc:
            raise ConfigError(f"Settings file {path} not found") from exc
        return cls(data.get("servers") or {})

    def lookup(self, key: str) -> tuple[str | None, str | None]:
        server = self.servers.get(key) or {}
        return server.get("username"), expand_secret(server.get("password"))

    def resolve(self, cfg: ExecConfig, url: str) -> Credentials:
        """
        Explicit config values win; the settings store fills the gaps and
        anything still missing becomes an empty string.
        """
        username, password = cfg.username, cfg.password
        if username is None or password is None:
            stored_user, stored_pwd = self.lookup(cfg.settings_key or url)
            if username is None:
                username = stored_user
            if password is None:
                password = stored_pwd

        if cfg.enable_anonymous_password:
            return Credentials(username or "", None)
        return Credentials(username or "", password or "")
