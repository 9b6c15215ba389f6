"""Basic value types shared across the scanner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

Ecosystem = str


@dataclass(frozen=True)
class PackageDetails:
    """A single package as found in a lockfile."""

    name: str
    version: str
    commit: str = ""
    ecosystem: Ecosystem = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out an empty commit or ecosystem."""
        data: dict[str, Any] = {"name": self.name, "version": self.version}
        if self.commit:
            data["commit"] = self.commit
        if self.ecosystem:
            data["ecosystem"] = self.ecosystem
        return data