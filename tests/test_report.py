import json

import pytest

from osvscan.osv import OSV
from osvscan.report import PackageDetailsWithVulnerabilities, Report, form
from osvscan.types import PackageDetails

CARGO_PKG = PackageDetails(name="addr2line", version="0.15.2", ecosystem="crates.io")


def _pkg(vulns=(), ignored=()):
    return PackageDetailsWithVulnerabilities(
        package=CARGO_PKG, vulnerabilities=list(vulns), ignored=list(ignored)
    )


@pytest.mark.parametrize(
    "packages, expected",
    [
        ([], False),
        ([_pkg(), _pkg()], False),
        ([_pkg([OSV(id="1")])], True),
        ([_pkg(), _pkg([OSV(id="1")])], True),
    ],
)
def test_has_known_vulnerabilities(packages, expected):
    assert Report(packages=packages).has_known_vulnerabilities() is expected


@pytest.mark.parametrize(
    "packages, expected",
    [
        ([], False),
        ([_pkg(), _pkg()], False),
        ([_pkg([OSV(id="1")])], False),
        ([_pkg([], [OSV(id="1")])], True),
        ([_pkg(), _pkg([OSV(id="1")])], False),
        ([_pkg(), _pkg([], [OSV(id="1")])], True),
        ([_pkg([OSV(id="1")]), _pkg([OSV(id="1")], [OSV(id="2")])], True),
    ],
)
def test_has_ignored_vulnerabilities(packages, expected):
    assert Report(packages=packages).has_ignored_vulnerabilities() is expected


def test_string_no_vulnerabilities():
    assert "no known vulnerabilities found" in str(Report())


def _bundler(name, version, vulns=(), ignored=()):
    return PackageDetailsWithVulnerabilities(
        package=PackageDetails(name=name, version=version, ecosystem="RubyGems"),
        vulnerabilities=list(vulns),
        ignored=list(ignored),
    )


def test_string_one_vulnerability():
    expected = "\n".join(
        [
            "  my-package@1.2.3 is affected by the following vulnerabilities:",
            "    GHSA-1: This is a vulnerability! (https://github.com/advisories/GHSA-1)",
            "",
            "  1 known vulnerability found in /path/to/my/lock",
            "",
        ]
    )
    report = Report(
        file_path="/path/to/my/lock",
        packages=[
            _bundler("my-package", "1.2.3", [OSV(id="GHSA-1", summary="This is a vulnerability!")])
        ],
    )
    assert str(report) == expected


def test_string_multiple_vulnerabilities():
    expected = "\n".join(
        [
            "  my-package@1.2.3 is affected by the following vulnerabilities:",
            "    GHSA-1: This is a vulnerability! (https://github.com/advisories/GHSA-1)",
            "  their-package@4.5.6 is affected by the following vulnerabilities:",
            "    GHSA-2: This is another vulnerability! (https://github.com/advisories/GHSA-2)",
            "",
            "  2 known vulnerabilities found in /path/to/my/lock",
            "",
        ]
    )
    report = Report(
        file_path="/path/to/my/lock",
        packages=[
            _bundler("my-package", "1.2.3", [OSV(id="GHSA-1", summary="This is a vulnerability!")]),
            _bundler("middle-package", "1.2.0"),
            _bundler(
                "their-package",
                "4.5.6",
                [OSV(id="GHSA-2", summary="This is another vulnerability!")],
            ),
        ],
    )
    assert str(report) == expected


def test_string_all_ignored_vulnerabilities():
    report = Report(
        file_path="/path/to/my/lock",
        packages=[
            _bundler("my-package", "1.2.3", [], [OSV(id="GHSA-1", summary="This is a vulnerability!")]),
            _bundler(
                "their-package",
                "4.5.6",
                [],
                [OSV(id="GHSA-2", summary="This is another vulnerability!")],
            ),
        ],
    )
    assert "no new vulnerabilities found (2 were ignored)" in str(report)


def test_string_some_ignored_vulnerability():
    expected = "\n".join(
        [
            "  my-package@1.2.3 is affected by the following vulnerabilities:",
            "    GHSA-1: This is a vulnerability! (https://github.com/advisories/GHSA-1)",
            "",
            "  1 new vulnerability found in /path/to/my/lock (1 was ignored)",
            "",
        ]
    )
    report = Report(
        file_path="/path/to/my/lock",
        packages=[
            _bundler("my-package", "1.2.3", [OSV(id="GHSA-1", summary="This is a vulnerability!")]),
            _bundler(
                "their-package",
                "4.5.6",
                [],
                [OSV(id="GHSA-2", summary="This is another vulnerability!")],
            ),
        ],
    )
    assert str(report) == expected


def test_to_dict_matches_json_shape():
    report = Report(
        file_path="fixtures/locks-one/yarn.lock",
        parsed_as="yarn.lock",
        packages=[
            PackageDetailsWithVulnerabilities(
                package=PackageDetails(name="balanced-match", version="1.0.2", ecosystem="npm")
            )
        ],
    )
    assert json.dumps(report.to_dict(), separators=(",", ":")) == (
        '{"filePath":"fixtures/locks-one/yarn.lock","parsedAs":"yarn.lock",'
        '"packages":[{"name":"balanced-match","version":"1.0.2","ecosystem":"npm",'
        '"vulnerabilities":[],"ignored":[]}]}'
    )


def test_to_dict_includes_vulnerability_ids():
    report = Report(packages=[_pkg([OSV(id="GHSA-9")], [OSV(id="GHSA-8")])])
    pkg = report.to_dict()["packages"][0]
    assert [v["id"] for v in pkg["vulnerabilities"]] == ["GHSA-9"]
    assert [v["id"] for v in pkg["ignored"]] == ["GHSA-8"]


@pytest.mark.parametrize("count, expected", [(0, "packages"), (1, "package"), (2, "packages")])
def test_form(count, expected):
    assert form(count, "package", "packages") == expected