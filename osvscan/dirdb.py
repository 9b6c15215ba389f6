"""An OSV database read from a directory of JSON files."""

from __future__ import annotations

import json
import os
import posixpath
import re
import sys
from urllib.parse import urlsplit

from osvscan.dbconfig import DatabaseConfig
from osvscan.memdb import MemoryDB
from osvscan.osv import OSV

_VALID_HOST = re.compile(r"^[A-Za-z0-9.\-_~!$&'()*+,;=:\[\]%@]*$")


class DirPathWrongProtocolError(ValueError):
    """Raised when a directory database path is not a file: URL."""

    def __init__(self) -> None:
        super().__init__('directory path must start with "file:" protocol')


def _load_file(path: str) -> OSV | None:
    try:
        with open(path, "rb") as handle:
            content = handle.read()
    except OSError as exc:
        print(f"\n{exc}", end="", file=sys.stderr)
        return None
    try:
        return OSV.from_dict(json.loads(content))
    except (ValueError, TypeError, AttributeError, KeyError) as exc:
        print(
            f"{os.path.basename(path)} is not a valid JSON file: {exc}", file=sys.stderr
        )
        return None


class DirDB(MemoryDB):
    """Loads every .json file under a local directory as an OSV entry."""

    def __init__(self, config: DatabaseConfig, offline: bool = False) -> None:
        super().__init__()
        self.name = config.name
        self.identifier = config.identifier()
        self.local_path = config.url
        self.working_directory = config.working_directory
        self.offline = offline
        self._load()

    def _root(self) -> str:
        if not self.local_path.startswith("file:"):
            raise DirPathWrongProtocolError()
        parts = urlsplit(self.local_path)
        if not _VALID_HOST.match(parts.netloc):
            raise ValueError(
                f"unable to load OSV database: invalid URI {self.local_path!r}"
            )
        path = parts.path[1:] if parts.path.startswith("/") else parts.path
        return posixpath.normpath(posixpath.join(path, self.working_directory))

    def _load(self) -> None:
        root = self._root()
        if not os.path.exists(root):
            raise FileNotFoundError(
                f"unable to load OSV database: could not read OSV database directory:"
                f" {root} does not exist"
            )
        if os.path.isfile(root):
            paths = [root] if root.endswith(".json") else []
        else:
            paths = []
            for dirpath, dirnames, filenames in os.walk(root):
                dirnames.sort()
                paths.extend(
                    os.path.join(dirpath, name)
                    for name in sorted(filenames)
                    if name.endswith(".json")
                )
        loaded = [_load_file(path) for path in paths]
        self._vulnerabilities = [osv for osv in loaded if osv is not None]