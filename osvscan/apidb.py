"""An OSV database backed by the osv.dev HTTP API."""

from __future__ import annotations

import posixpath
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Sequence
from urllib.parse import urlsplit, urlunsplit

import requests

from osvscan.dbconfig import DatabaseConfig
from osvscan.osv import OSV, Vulnerabilities
from osvscan.types import PackageDetails

_CONCURRENCY_LIMIT = 200


class APIError(Exception):
    """Raised when a request to the API cannot be made or answered."""


class OfflineDatabaseNotSupportedError(ValueError):
    """Raised when an API database is asked to work offline."""

    def __init__(self) -> None:
        super().__init__("API database does not support being used offline")


class InvalidBatchSizeError(ValueError):
    """Raised when the batch size is below one."""

    def __init__(self) -> None:
        super().__init__("batch size must be greater than 0")


class ResultsCountMismatchError(APIError):
    """Raised when the API returns a different number of results than queries."""


def _is_request_uri(url: str) -> bool:
    if not url:
        return False
    if url.startswith("/"):
        return True
    return bool(urlsplit(url).scheme)


def batch_packages(
    packages: Sequence[PackageDetails], batch_size: int
) -> list[list[PackageDetails]]:
    """Split packages into consecutive batches of at most batch_size."""
    return [
        list(packages[start:start + batch_size])
        for start in range(0, len(packages), batch_size)
    ]


def _build_query(pkg: PackageDetails) -> dict[str, Any]:
    if pkg.commit:
        return {"commit": pkg.commit, "package": {"name": "", "ecosystem": ""}}
    query: dict[str, Any] = {}
    if pkg.version:
        query["version"] = pkg.version
    query["package"] = {"name": pkg.name, "ecosystem": pkg.ecosystem}
    return query


def _find_or_default(vulns: Sequence[OSV], default: OSV) -> OSV:
    return next((v for v in vulns if v.id == default.id), default)


class APIDB:
    """Checks packages by querying the osv.dev API in batches."""

    def __init__(self, config: DatabaseConfig, offline: bool, batch_size: int) -> None:
        if offline:
            raise OfflineDatabaseNotSupportedError()
        if batch_size < 1:
            raise InvalidBatchSizeError()
        if not _is_request_uri(config.url):
            raise ValueError(f"{config.url} is not a valid url")
        self.name = config.name
        self.identifier = config.identifier()
        self.base_url = config.url
        self.batch_size = batch_size

    def _endpoint(self, *parts: str) -> str:
        split = urlsplit(self.base_url)
        path = posixpath.join(split.path or "/", *parts)
        return urlunsplit((split.scheme, split.netloc, path, split.query, split.fragment))

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            resp = requests.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise APIError(f"api request failed: {exc}") from exc
        if resp.status_code != 200:
            raise APIError(
                f"api returned unexpected status ({method} {url} {resp.status_code})"
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise APIError(
                f"api response could not be parsed as json ({method} {url}): {exc}"
            ) from exc

    def _check_batch(self, packages: Sequence[PackageDetails]) -> list[list[str]]:
        payload = {"queries": [_build_query(pkg) for pkg in packages]}
        parsed = self._request("POST", self._endpoint("querybatch"), json=payload)
        if not isinstance(parsed, dict):
            raise APIError("api response could not be parsed as json")
        results = [
            [item.get("id", "") for item in (result or {}).get("vulns") or []]
            for result in parsed.get("results") or []
        ]
        if len(results) != len(packages):
            raise ResultsCountMismatchError(
                f"api results count mismatch - expected to get {len(packages)}"
                f" but got {len(results)}"
            )
        return results

    def check(self, packages: Sequence[PackageDetails]) -> list[Vulnerabilities]:
        """Vulnerabilities for each package, in the order of the packages."""
        found: list[Vulnerabilities] = []
        for batch in batch_packages(packages, self.batch_size):
            for ids in self._check_batch(batch):
                found.append(Vulnerabilities(OSV(id=vuln_id) for vuln_id in ids))

        everything = Vulnerabilities(osv for vulns in found for osv in vulns).unique()
        detailed = self.fetch_all([osv.id for osv in everything])

        return [
            Vulnerabilities(_find_or_default(detailed, osv) for osv in vulns)
            for vulns in found
        ]

    def fetch(self, vuln_id: str) -> OSV:
        """The full details of one advisory."""
        data = self._request("GET", self._endpoint("vulns", vuln_id))
        try:
            return OSV.from_dict(data)
        except (ValueError, TypeError, AttributeError, KeyError) as exc:
            raise APIError(f"api response could not be parsed as json: {exc}") from exc

    def _fetch_or_stub(self, vuln_id: str) -> OSV:
        try:
            return self.fetch(vuln_id)
        except APIError:
            return OSV()

    def fetch_all(self, ids: Sequence[str]) -> Vulnerabilities:
        """Fetch many advisories concurrently, sorted by id; failures yield bare entries."""
        if not ids:
            return Vulnerabilities()
        with ThreadPoolExecutor(max_workers=min(_CONCURRENCY_LIMIT, len(ids))) as pool:
            osvs = list(pool.map(self._fetch_or_stub, ids))
        return Vulnerabilities(sorted(osvs, key=lambda osv: osv.id))