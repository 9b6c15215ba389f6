"""Configuration describing where an OSV database comes from."""

from __future__ import annotations

from dataclasses import dataclass


class UnsupportedDatabaseTypeError(ValueError):
    """Raised for a database source type that is not zip, api or dir."""

    def __init__(self, db_type: str = "") -> None:
        message = "unsupported database source type"
        if db_type:
            message += f" {db_type}"
        super().__init__(message)
        self.db_type = db_type


@dataclass(frozen=True)
class DatabaseConfig:
    name: str = ""
    type: str = ""
    url: str = ""
    working_directory: str = ""

    def identifier(self) -> str:
        """A string that identifies the database this config describes."""
        ident = f"{self.type}#{self.url}"
        if self.working_directory:
            ident += f"#{self.working_directory}"
        return ident