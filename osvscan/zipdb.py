"""An OSV database downloaded as a zip archive, with an on-disk cache."""

from __future__ import annotations

import base64
import hashlib
import io
import json
import os
import sys
import tempfile
import zipfile
from dataclasses import dataclass
from typing import Any

import requests

from osvscan.dbconfig import DatabaseConfig
from osvscan.memdb import MemoryDB
from osvscan.osv import OSV


class OfflineDatabaseNotFoundError(Exception):
    """Raised when running offline with no cached archive."""

    def __init__(self) -> None:
        super().__init__("no offline version of the OSV database is available")


@dataclass
class Cache:
    """A stored copy of an archive with the headers it came with."""

    url: str = ""
    etag: str = ""
    date: str = ""
    body: bytes = b""

    def to_dict(self) -> dict[str, Any]:
        return {
            "URL": self.url,
            "ETag": self.etag,
            "Date": self.date,
            "Body": base64.b64encode(self.body).decode("ascii") if self.body else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cache:
        body = data.get("Body")
        return cls(
            url=data.get("URL", ""),
            etag=data.get("ETag", ""),
            date=data.get("Date", ""),
            body=base64.b64decode(body) if body else b"",
        )


def cache_path(url: str) -> str:
    """Where the cached archive for url is stored."""
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return os.path.join(tempfile.gettempdir(), f"osv-detector-{digest}-db.json")


class ZipDB(MemoryDB):
    """Loads the .json files of a remote zip archive as OSV entries."""

    def __init__(self, config: DatabaseConfig, offline: bool = False) -> None:
        super().__init__()
        self.name = config.name
        self.identifier = config.identifier()
        self.archive_url = config.url
        self.working_directory = config.working_directory
        self.offline = offline
        self.updated_at = ""
        self._load()

    def _read_cache(self, path: str) -> Cache | None:
        try:
            with open(path, "rb") as handle:
                content = handle.read()
        except OSError:
            return None
        try:
            data = json.loads(content)
            return None if data is None else Cache.from_dict(data)
        except (ValueError, TypeError, AttributeError) as exc:
            print(f"Failed to parse cache from {path}: {exc}", end="", file=sys.stderr)
            return None

    def _fetch_zip(self) -> bytes:
        path = cache_path(self.archive_url)
        cache = self._read_cache(path)

        if self.offline:
            if cache is None:
                raise OfflineDatabaseNotFoundError()
            self.updated_at = cache.date
            return cache.body

        headers = {}
        if cache is not None:
            headers = {"If-None-Match": cache.etag, "If-Modified-Since": cache.date}
        try:
            resp = requests.get(self.archive_url, headers=headers)
        except requests.RequestException as exc:
            raise OSError(
                f"unable to fetch OSV database: could not retrieve OSV database archive: {exc}"
            ) from exc

        if resp.status_code == 304 and cache is not None:
            self.updated_at = cache.date
            return cache.body

        body = resp.content
        etag = resp.headers.get("ETag", "")
        date = resp.headers.get("Date", "")
        self.updated_at = date

        new_cache = None
        if etag or date:
            new_cache = Cache(url=self.archive_url, etag=etag, date=date, body=body)
        try:
            with open(path, "w", encoding="utf-8") as handle:
                json.dump(new_cache.to_dict() if new_cache else None, handle)
        except OSError as exc:
            print(f"Failed to write cache to {path}: {exc}", end="", file=sys.stderr)
        return body

    def _load(self) -> None:
        body = self._fetch_zip()
        try:
            archive = zipfile.ZipFile(io.BytesIO(body))
        except zipfile.BadZipFile as exc:
            raise ValueError(
                "unable to fetch OSV database: could not read OSV database archive:"
                " zip: not a valid zip file"
            ) from exc
        with archive:
            for name in archive.namelist():
                if not name.startswith(self.working_directory) or not name.endswith(".json"):
                    continue
                osv = self._load_member(archive, name)
                if osv is not None:
                    self._vulnerabilities.append(osv)

    @staticmethod
    def _load_member(archive: zipfile.ZipFile, name: str) -> OSV | None:
        try:
            content = archive.read(name)
        except (OSError, zipfile.BadZipFile) as exc:
            print(f"Could not read {name}: {exc}", end="", file=sys.stderr)
            return None
        try:
            return OSV.from_dict(json.loads(content))
        except (ValueError, TypeError, AttributeError, KeyError) as exc:
            print(f"{name} is not a valid JSON file: {exc}", end="", file=sys.stderr)
            return None