"""Writing messages and results to the output streams."""

from __future__ import annotations

import json
import sys
from typing import Any, TextIO

from osvscan.zipdb import OfflineDatabaseNotFoundError


def _dumps(obj: Any) -> str:
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _encode(result: Any) -> Any:
    to_dict = getattr(result, "to_dict", None)
    return to_dict() if callable(to_dict) else result


class Reporter:
    """Routes text, errors and results to stdout and stderr, optionally as JSON."""

    def __init__(
        self,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        output_as_json: bool = False,
    ) -> None:
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.output_as_json = output_as_json
        self._results: list[Any] = []

    def print_error(self, msg: str) -> None:
        """Write msg to stderr whatever the output mode."""
        self.stderr.write(msg)

    def print_text(self, msg: str) -> None:
        """Write msg to stdout, or to stderr when the output is JSON."""
        target = self.stderr if self.output_as_json else self.stdout
        target.write(msg)

    def print_result(self, result: Any) -> None:
        """Write a result, or keep it for JSON output later."""
        if self.output_as_json:
            self._results.append(result)
            return
        self.stdout.write(str(result))

    def print_json_results(self) -> None:
        """Write every collected result to stdout as one JSON document."""
        try:
            out = _dumps({"results": [_encode(result) for result in self._results]})
        except (TypeError, ValueError) as exc:
            self.print_error(f"an error occurred when printing results as JSON: {exc}")
            return
        self.stdout.write(out)

    def print_database_load_error(self, error: BaseException) -> None:
        msg = str(error)
        if isinstance(error, OfflineDatabaseNotFoundError) or isinstance(
            error.__cause__, OfflineDatabaseNotFoundError
        ):
            msg = "no local version of the database was found, and --offline flag was set"
        self.print_error(f" failed: {msg}\n")