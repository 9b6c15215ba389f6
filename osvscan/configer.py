"""Loading detector configuration files."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass, field
from typing import Any

import yaml

from osvscan.dbconfig import DatabaseConfig, UnsupportedDatabaseTypeError
from osvscan.reporter import Reporter

_CONFIG_NAME = ".osv-detector"
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_SUPPORTED_TYPES = ("zip", "api", "dir")


class ConfigError(Exception):
    """Raised when a config file cannot be read or parsed."""

    def __init__(self, message: str, file_path: str = "", missing: bool = False) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.missing = missing


@dataclass
class Config:
    file_path: str = ""
    ignore: list[str] = field(default_factory=list)
    databases: list[DatabaseConfig] = field(default_factory=list)


def _check_request_uri(url: str) -> None:
    if not url:
        raise ValueError('parse "": empty url')
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        raise ValueError(f'parse "{url}": net/url: invalid control character in URL')
    if url.startswith("/") or _SCHEME.match(url):
        return
    raise ValueError(f'parse "{url}": invalid URI for request')


def _infer_db_type(raw: dict[str, str]) -> str:
    if raw["type"]:
        return raw["type"]
    if raw["url"].startswith("file:/"):
        return "dir"
    if raw["url"].endswith(".zip"):
        return "zip"
    return "api"


def _to_database_config(raw: dict[str, str]) -> DatabaseConfig:
    try:
        _check_request_uri(raw["url"])
    except ValueError as exc:
        raise ValueError(f"bad database source url: {exc}") from exc

    db_type = _infer_db_type(raw)
    if db_type not in _SUPPORTED_TYPES:
        raise UnsupportedDatabaseTypeError(db_type)

    config = DatabaseConfig(
        name=raw["name"],
        type=db_type,
        url=raw["url"],
        working_directory=raw["working-directory"],
    )
    if not config.name:
        config = DatabaseConfig(
            name=config.identifier(),
            type=config.type,
            url=config.url,
            working_directory=config.working_directory,
        )
    return config


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise TypeError(f"cannot unmarshal {type(value).__name__} into string")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_raw(content: bytes, path: str) -> tuple[list[str], list[dict[str, str]]]:
    def fail(detail: str) -> ConfigError:
        return ConfigError(f"could not read {path}: yaml: {detail}", path)

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise fail(str(exc)) from exc

    if data is None:
        return [], []
    if not isinstance(data, dict):
        raise fail(
            f"unmarshal errors:\n  cannot unmarshal {type(data).__name__}"
            f" `{str(data)[:7]} ...` into config"
        )

    try:
        ignore_raw = data.get("ignore") or []
        if not isinstance(ignore_raw, list):
            raise TypeError("cannot unmarshal ignore into a list of strings")
        ignore = [_scalar(item) for item in ignore_raw]

        dbs_raw = data.get("extra-databases") or []
        if not isinstance(dbs_raw, list):
            raise TypeError("cannot unmarshal extra-databases into a list")
        databases = []
        for item in dbs_raw:
            item = item or {}
            if not isinstance(item, dict):
                raise TypeError("cannot unmarshal database entry into a mapping")
            databases.append(
                {
                    key: _scalar(item.get(key))
                    for key in ("name", "type", "url", "working-directory")
                }
            )
    except TypeError as exc:
        raise fail(f"unmarshal errors:\n  {exc}") from exc

    return ignore, databases


def load_config(reporter: Reporter, path: str) -> Config:
    """Read the config at path; invalid databases are reported and skipped."""
    path = posixpath.normpath(path)
    try:
        with open(path, "rb") as handle:
            content = handle.read()
    except FileNotFoundError as exc:
        raise ConfigError(
            f"could not read {path}: open {path}: no such file or directory",
            path,
            missing=True,
        ) from exc
    except OSError as exc:
        raise ConfigError(f"could not read {path}: {exc}", path) from exc

    ignore, raw_databases = _parse_raw(content, path)

    config = Config(file_path=path, ignore=ignore)
    for raw in raw_databases:
        try:
            config.databases.append(_to_database_config(raw))
        except ValueError as exc:
            reporter.print_error(f"{path} contains an invalid database: {exc}\n")
    return config


def find_config(reporter: Reporter, directory: str) -> Config:
    """Load the default config in directory, or an empty Config if there is none."""
    for extension in ("yml", "yaml"):
        try:
            return load_config(reporter, f"{directory}/{_CONFIG_NAME}.{extension}")
        except ConfigError as exc:
            if not exc.missing:
                raise
    return Config()