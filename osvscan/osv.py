"""OSV advisory records and collections of them."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable

from osvscan.types import Ecosystem

_PIP_ECOSYSTEM = "PyPI"
_PEP503_SEPARATORS = re.compile(r"[-_.]+")
_TIME_PATTERN = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _dumps(obj: Any) -> str:
    """Serialise compactly, escaping the characters that are unsafe in HTML."""
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _parse_time(value: str) -> datetime:
    match = _TIME_PATTERN.match(value)
    if match is None:
        raise ValueError(f"invalid RFC 3339 time: {value!r}")
    date, clock, fraction, zone = match.groups()
    micro = ""
    if fraction:
        micro = "." + fraction[:6].ljust(6, "0")
    if zone in ("Z", "z"):
        zone = "+00:00"
    return datetime.fromisoformat(f"{date}T{clock}{micro}{zone}")


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if len(text.split("-", 1)[0]) < 4:
        text = f"{value.year:04d}" + text[text.index("-"):]
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


class AffectsRangeType(str, Enum):
    SEMVER = "SEMVER"
    ECOSYSTEM = "ECOSYSTEM"
    GIT = "GIT"


def _range_type(value: str) -> AffectsRangeType | str:
    try:
        return AffectsRangeType(value)
    except ValueError:
        return value


@dataclass
class Package:
    name: str = ""
    ecosystem: Ecosystem = ""

    def normalized_name(self) -> str:
        """The name normalised as the OSV specification asks for its ecosystem."""
        if self.ecosystem != _PIP_ECOSYSTEM:
            return self.name
        return _PEP503_SEPARATORS.sub("-", self.name).lower()

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "ecosystem": self.ecosystem}


@dataclass
class RangeEvent:
    introduced: str = ""
    fixed: str = ""
    last_affected: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.introduced:
            data["introduced"] = self.introduced
        if self.fixed:
            data["fixed"] = self.fixed
        if self.last_affected:
            data["last_affected"] = self.last_affected
        return data


@dataclass
class AffectsRange:
    type: AffectsRangeType | str = AffectsRangeType.ECOSYSTEM
    events: list[RangeEvent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        kind = self.type.value if isinstance(self.type, AffectsRangeType) else self.type
        return {"type": kind, "events": [event.to_dict() for event in self.events]}


def versions_to_json(versions: Iterable[str] | None) -> str:
    """Encode versions as JSON, always as an array even when there are none."""
    items = list(versions or [])
    if not items:
        return "[]"
    return _dumps(items)


@dataclass
class Affected:
    package: Package = field(default_factory=Package)
    versions: list[str] = field(default_factory=list)
    ranges: list[AffectsRange] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "package": self.package.to_dict(),
            "versions": list(self.versions),
        }
        if self.ranges:
            data["ranges"] = [r.to_dict() for r in self.ranges]
        return data


def truncate(text: str, limit: int) -> str:
    """Shorten text to under limit characters, preferring to cut at whitespace."""
    truncate_at = -1
    for index, char in enumerate(text):
        if char.isspace():
            truncate_at = index
        if index + 1 >= limit:
            if truncate_at == -1:
                truncate_at = limit
            return text[:truncate_at] + "..."
    return text


@dataclass
class OSV:
    """An OSV-style vulnerability database entry."""

    id: str = ""
    aliases: list[str] = field(default_factory=list)
    summary: str = ""
    published: datetime = ZERO_TIME
    modified: datetime = ZERO_TIME
    withdrawn: datetime | None = None
    details: str = ""
    affected: list[Affected] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OSV:
        """Build an entry from its decoded JSON form."""
        if not isinstance(data, dict):
            raise ValueError("an OSV entry must be a JSON object")
        affected = []
        for item in data.get("affected") or []:
            pkg = item.get("package") or {}
            ranges = [
                AffectsRange(
                    type=_range_type(r.get("type", "")),
                    events=[
                        RangeEvent(
                            introduced=e.get("introduced", ""),
                            fixed=e.get("fixed", ""),
                            last_affected=e.get("last_affected", ""),
                        )
                        for e in r.get("events") or []
                    ],
                )
                for r in item.get("ranges") or []
            ]
            affected.append(
                Affected(
                    package=Package(
                        name=pkg.get("name", ""), ecosystem=pkg.get("ecosystem", "")
                    ),
                    versions=list(item.get("versions") or []),
                    ranges=ranges,
                )
            )
        withdrawn = data.get("withdrawn")
        return cls(
            id=data.get("id", ""),
            aliases=list(data.get("aliases") or []),
            summary=data.get("summary", ""),
            published=_parse_time(data["published"]) if data.get("published") else ZERO_TIME,
            modified=_parse_time(data["modified"]) if data.get("modified") else ZERO_TIME,
            withdrawn=_parse_time(withdrawn) if withdrawn is not None else None,
            details=data.get("details", ""),
            affected=affected,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the entry."""
        data: dict[str, Any] = {
            "id": self.id,
            "aliases": list(self.aliases),
            "summary": self.summary,
            "published": _format_time(self.published),
            "modified": _format_time(self.modified),
        }
        if self.withdrawn is not None:
            data["withdrawn"] = _format_time(self.withdrawn)
        data["details"] = self.details
        data["affected"] = [a.to_dict() for a in self.affected]
        return data

    def _is_alias_of_id(self, vuln_id: str) -> bool:
        return vuln_id in self.aliases

    def _is_alias_of(self, vulnerability: OSV) -> bool:
        return any(
            self.id == alias or self._is_alias_of_id(alias)
            for alias in vulnerability.aliases
        )

    def affects_ecosystem(self, ecosystem: Ecosystem) -> bool:
        return any(a.package.ecosystem == ecosystem for a in self.affected)

    def link(self) -> str:
        """A URL to the advisory, or an empty string if there is none."""
        if self.id.startswith("GHSA"):
            return "https://github.com/advisories/" + self.id
        return ""

    def describe(self) -> str:
        description = self.summary or truncate(self.details, 80)
        if not description:
            description = "(no details available)"
        link = self.link()
        if link:
            description += f" ({link})"
        return description


class Vulnerabilities(list):
    """A list of OSV entries that understands aliases."""

    def includes(self, vulnerability: OSV) -> bool:
        return any(
            osv.id == vulnerability.id
            or osv._is_alias_of(vulnerability)
            or vulnerability._is_alias_of(osv)
            for osv in self
        )

    def unique(self) -> Vulnerabilities:
        result = Vulnerabilities()
        for vulnerability in self:
            if not result.includes(vulnerability):
                result.append(vulnerability)
        return result

    def to_json(self) -> str:
        """Encode as a JSON array, which is empty rather than null when needed."""
        if not self:
            return "[]"
        return _dumps([osv.to_dict() for osv in self])