# osvscan

`osvscan` is a library for working with vulnerability databases written in the OSV
format. It loads advisories from a zip archive served over HTTP, from a local directory,
or from a query API. It removes duplicate advisories (by ID and by alias), reads the
detector's configuration files, and reports results as plain text or as JSON.

## Installation

```
pip install osvscan
```

To run the test suite, install the test extra:

```
pip install "osvscan[test]"
pytest
```

## Advisories

`osvscan.osv.OSV` holds one advisory:

- `OSV.from_dict(data)` builds an advisory from decoded JSON.
- `to_dict()` gives back the JSON form, with RFC 3339 timestamps.
- `describe()` returns the summary. If there is no summary, it returns the details cut to
  under 80 characters at a word boundary. If there are neither, it returns
  `(no details available)`. For `GHSA` IDs a link is appended.
- `link()` returns that link, or an empty string.
- `affects_ecosystem(ecosystem)` tells whether any affected package is in that ecosystem.

`Package.normalized_name()` normalises PyPI names, so that `Products.GenericSetup`
becomes `products-genericsetup`. Names in other ecosystems are left unchanged.

`Vulnerabilities` is a list of `OSV` entries:

- `includes(osv)` matches entries by ID or by a shared alias.
- `unique()` drops duplicates.
- `to_json()` always produces a JSON array, and gives `[]` when the list is empty.

## Database sources

A database is described by a `DatabaseConfig`. It has a name, a type, a URL and an
optional working directory. `identifier()` returns `type#url`, with `#working_directory`
appended when a working directory is set.

`osvscan.loader.load_database(config, offline, batch_size)` creates the database for a
config. It raises `UnsupportedDatabaseTypeError` for any type other than these three:

- `zip` → `ZipDB`. The archive is downloaded, and a copy is cached in the system temporary
  directory (see `cache_path(url)`). Later downloads send the cached `ETag` and date, and
  a `304` response reuses the cached copy. Only `.json` members under the working
  directory are loaded. `updated_at` records the date of the archive. With
  `offline=True` only the cache is used, and `OfflineDatabaseNotFoundError` is raised if
  there is none. An archive that is not a valid zip raises `ValueError`.
- `dir` → `DirDB`. It walks a directory for `.json` files. The URL must start with
  `file:`, or `DirPathWrongProtocolError` is raised. The path after `file:/` is taken
  relative to the current directory, and the working directory is joined onto it. A
  missing path raises `FileNotFoundError`.
- `api` → `APIDB`. It raises `OfflineDatabaseNotSupportedError` when `offline` is set,
  `InvalidBatchSizeError` when the batch size is below 1, and `ValueError` for a URL that
  is not valid.

`ZipDB` and `DirDB` are `MemoryDB`s. `vulnerabilities(include_withdrawn)` lists the loaded
advisories and leaves out withdrawn ones unless asked to include them.

`APIDB.check(packages)` posts `PackageDetails` in batches to `<url>/querybatch`. It then
fetches every advisory it finds from `<url>/vulns/<id>`, up to 200 at a time. It returns
one `Vulnerabilities` list per package, in the same order as the packages given.

- A package with a commit is queried by that commit.
- An advisory that cannot be fetched is kept with its ID only.
- HTTP and decoding failures raise `APIError`.
- A reply with the wrong number of results raises `ResultsCountMismatchError`.

## Example

```python
from osvscan.dbconfig import DatabaseConfig
from osvscan.loader import load_database
from osvscan.types import PackageDetails

local = load_database(
    DatabaseConfig(name="local advisories", type="dir", url="file:/advisories"),
    False,
    1000,
)
for osv in local.vulnerabilities(False):
    print(osv.id, osv.describe())

api = load_database(
    DatabaseConfig(name="api", type="api", url="https://osv.example.com/v1"),
    False,
    1000,
)
packages = [PackageDetails(name="balanced-match", version="1.0.2", ecosystem="npm")]
for package, vulns in zip(packages, api.check(packages)):
    for vuln in vulns:
        print(package.name, vuln.id, vuln.describe())
```

## Configuration files

`find_config(reporter, directory)` looks in the given directory for `.osv-detector.yml`,
and then for `.osv-detector.yaml`. If neither exists, it returns an empty `Config`.
`load_config(reporter, path)` reads a specific file. A config can hold:

```yaml
ignore:
  - GHSA-1234
extra-databases:
  - name: staging api
    url: https://osv.example.com/v1
  - url: https://example.com/osvs/all.zip
    working-directory: advisories/reviewed
  - url: file:/relative/path/to/dir
```

If an extra database has no `type`, one is inferred from its URL:

- a `file:/` URL means `dir`;
- a URL ending in `.zip` means `zip`;
- anything else means `api`.

A database with no name is named after its identifier. An extra database with an invalid
URL or an unsupported type is reported through the reporter and skipped. A config file
that cannot be read or parsed raises `ConfigError`.

## Reports

A `Report` holds a file path, the name of the format the file was parsed as, and a list
of `PackageDetailsWithVulnerabilities`:

- `str(report)` lists each affected package with its advisories and ends with a count. It
  mentions how many advisories were ignored.
- `has_known_vulnerabilities()` and `has_ignored_vulnerabilities()` tell you whether
  anything was found or ignored.
- `to_dict()` gives the JSON form.
- `form(count, singular, plural)` picks the right word for a count.

A `Reporter` writes:

- `print_error` → stderr;
- `print_text` → stdout, or stderr when JSON output is chosen;
- `print_result` → the result as text, or collects it for `print_json_results()`, which
  writes everything collected as one `{"results": [...]}` object;
- `print_database_load_error` → a ` failed: ...` line.

## What this package does not do

- There is no command-line program; everything is used as a library.
- It does not read lockfiles. You build the `PackageDetails` yourself.
- Only `APIDB` checks packages. `ZipDB` and `DirDB` load and list advisories, but they do
  not match package versions against affected ranges.