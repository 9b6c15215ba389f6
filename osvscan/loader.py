"""Opening an OSV database from its configuration."""

from __future__ import annotations

from typing import Union

from osvscan.apidb import APIDB
from osvscan.dbconfig import DatabaseConfig, UnsupportedDatabaseTypeError
from osvscan.dirdb import DirDB
from osvscan.zipdb import ZipDB

Database = Union[APIDB, DirDB, ZipDB]


def load_database(config: DatabaseConfig, offline: bool, batch_size: int) -> Database:
    """Create and load the database the config describes."""
    if config.type == "zip":
        return ZipDB(config, offline)
    if config.type == "api":
        return APIDB(config, offline, batch_size)
    if config.type == "dir":
        return DirDB(config, offline)
    raise UnsupportedDatabaseTypeError(config.type)