"""An OSV database held in memory."""

from __future__ import annotations

from typing import Iterable

from osvscan.osv import OSV


class MemoryDB:
    """Holds OSV entries loaded from wherever a concrete database reads them."""

    def __init__(self, vulnerabilities: Iterable[OSV] = ()) -> None:
        self._vulnerabilities: list[OSV] = list(vulnerabilities)

    def vulnerabilities(self, include_withdrawn: bool = False) -> list[OSV]:
        """All entries, leaving out withdrawn ones unless asked for."""
        if include_withdrawn:
            return list(self._vulnerabilities)
        return [v for v in self._vulnerabilities if v.withdrawn is None]