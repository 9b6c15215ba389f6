import pytest

from osvscan.apidb import APIDB
from osvscan.dbconfig import DatabaseConfig, UnsupportedDatabaseTypeError
from osvscan.loader import load_database


@pytest.mark.parametrize("db_type", ["zip", "dir", "api"])
def test_load_without_url_fails(db_type):
    with pytest.raises((OSError, ValueError)):
        load_database(DatabaseConfig(type=db_type), False, 100)


def test_load_bad_type():
    with pytest.raises(UnsupportedDatabaseTypeError, match="unsupported database source type file"):
        load_database(DatabaseConfig(type="file"), False, 100)


def test_load_api():
    db = load_database(DatabaseConfig(type="api", url="https://api.example.com/v1"), False, 7)
    assert isinstance(db, APIDB)
    assert db.batch_size == 7
    assert db.identifier == "api#https://api.example.com/v1"