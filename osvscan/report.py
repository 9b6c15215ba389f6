"""The outcome of checking one lockfile against OSV databases."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from osvscan.osv import Vulnerabilities
from osvscan.types import PackageDetails


def form(count: int, singular: str, plural: str) -> str:
    """Pick the singular or plural word for count."""
    return singular if count == 1 else plural


@dataclass
class PackageDetailsWithVulnerabilities:
    """A package with the vulnerabilities found for it and those ignored."""

    package: PackageDetails
    vulnerabilities: Vulnerabilities = field(default_factory=Vulnerabilities)
    ignored: Vulnerabilities = field(default_factory=Vulnerabilities)

    def __post_init__(self) -> None:
        self.vulnerabilities = Vulnerabilities(self.vulnerabilities or [])
        self.ignored = Vulnerabilities(self.ignored or [])

    def to_dict(self) -> dict[str, Any]:
        data = self.package.to_dict()
        data["vulnerabilities"] = [osv.to_dict() for osv in self.vulnerabilities]
        data["ignored"] = [osv.to_dict() for osv in self.ignored]
        return data


@dataclass
class Report:
    """The packages of a lockfile and the vulnerabilities affecting them."""

    file_path: str = ""
    parsed_as: str = ""
    packages: list[PackageDetailsWithVulnerabilities] = field(default_factory=list)

    def _count_known(self) -> int:
        return sum(len(pkg.vulnerabilities) for pkg in self.packages)

    def _count_ignored(self) -> int:
        return sum(len(pkg.ignored) for pkg in self.packages)

    def has_known_vulnerabilities(self) -> bool:
        return self._count_known() > 0

    def has_ignored_vulnerabilities(self) -> bool:
        return self._count_ignored() > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "filePath": self.file_path,
            "parsedAs": self.parsed_as,
            "packages": [pkg.to_dict() for pkg in self.packages],
        }

    def _format_line_by_line(self) -> str:
        lines: list[str] = []
        for pkg in self.packages:
            if not pkg.vulnerabilities:
                continue
            lines.append(
                f"  {pkg.package.name}@{pkg.package.version}"
                " is affected by the following vulnerabilities:"
            )
            lines.extend(
                f"    {osv.id}: {osv.describe()}" for osv in pkg.vulnerabilities
            )
        return "\n".join(lines)

    def _describe_ignores(self) -> str:
        count = self._count_ignored()
        if count == 0:
            return ""
        return f" ({count} {form(count, 'was', 'were')} ignored)"

    def __str__(self) -> str:
        count = self._count_known()
        ignore_msg = self._describe_ignores()
        word = "new" if ignore_msg else "known"

        if count == 0:
            return f"  no {word} vulnerabilities found{ignore_msg}\n"

        noun = form(count, "vulnerability", "vulnerabilities")
        return (
            self._format_line_by_line()
            + "\n"
            + f"\n  {count} {word} {noun} found in {self.file_path}{ignore_msg}\n"
        )