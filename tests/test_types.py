import json

from osvscan.types import PackageDetails


def test_to_dict_omits_empty_commit():
    pkg = PackageDetails(name="balanced-match", version="1.0.2", ecosystem="npm")
    encoded = json.dumps(pkg.to_dict(), separators=(",", ":"))
    assert encoded == '{"name":"balanced-match","version":"1.0.2","ecosystem":"npm"}'


def test_to_dict_includes_commit_when_present():
    pkg = PackageDetails(
        name="sentry/sdk",
        version="2.0.4",
        commit="4c115873c86ad5bd0ac6d962db70ca53bf8fb874",
        ecosystem="Packagist",
    )
    data = pkg.to_dict()
    assert data["commit"] == pkg.commit
    assert list(data) == ["name", "version", "commit", "ecosystem"]


def test_to_dict_omits_empty_ecosystem():
    pkg = PackageDetails(name="my-package", version="1.0.0")
    assert pkg.to_dict() == {"name": "my-package", "version": "1.0.0"}


def test_defaults_are_empty():
    pkg = PackageDetails(name="my-package", version="1.0.0")
    assert (pkg.commit, pkg.ecosystem) == ("", "")