"""Unit tests for the command-line front end."""

import io
import json
import os
import sys
import tempfile
import time
from unittest.mock import patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from sigcheck import __version__
from sigcheck.cli import EXIT_CANCELLED, app
from sigcheck.models import ScanResult
from sigcheck.oracles.base import SignatureOracle

runner = CliRunner()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _create_test_tree(files: list[str]) -> str:
    """Create a temporary directory containing empty files."""
    tmpdir = tempfile.mkdtemp(prefix="sigcheck_cli_")
    for name in files:
        filepath = os.path.join(tmpdir, name)
        os.makedirs(os.path.dirname(filepath), exist_ok=True)
        with open(filepath, "wb") as fh:
            fh.write(b"MZ")
    return tmpdir


class NameOracle(SignatureOracle):
    """Signed when the base name is in *signed*."""

    def __init__(self, signed: set[str] = frozenset(), delay: float = 0.0) -> None:
        self.signed = set(signed)
        self.delay = delay

    def _verify(self, path: str) -> bool:
        if self.delay:
            time.sleep(self.delay)
        return os.path.basename(path) in self.signed


def _invoke(args: list[str], oracle: SignatureOracle):
    with patch("sigcheck.cli.load_oracle", return_value=oracle):
        return runner.invoke(app, args)


# ---------------------------------------------------------------------------
# Scan command
# ---------------------------------------------------------------------------


class TestScanCommand:
    """Tests for the scan command."""

    def test_rich_output(self) -> None:
        """Signed and unsigned files are listed with a summary."""
        project = _create_test_tree(["a.exe", "b.exe", "c.dll"])
        result = _invoke(["scan", project, "--types", "exe"], NameOracle({"a.exe"}))

        assert result.exit_code == 0
        assert "Signed Files" in result.stdout
        assert "Unsigned Files" in result.stdout
        assert "unsigned files out of" in result.stdout

    def test_all_signed_summary(self) -> None:
        """A fully signed tree reports the all-signed status."""
        project = _create_test_tree(["a.exe", "b.exe"])
        result = _invoke(["scan", project, "--types", "exe"], NameOracle({"a.exe", "b.exe"}))

        assert result.exit_code == 0
        assert "Excellent!" in result.stdout

    def test_no_files_summary(self) -> None:
        """An empty scan is a success with an informational status."""
        project = _create_test_tree(["readme.txt"])
        result = _invoke(["scan", project], NameOracle())

        assert result.exit_code == 0
        assert "No files found" in result.stdout

    def test_json_output_is_valid(self) -> None:
        """--json flag should produce valid, parseable JSON."""
        project = _create_test_tree(["a.exe", "b.exe", "c.dll"])
        result = _invoke(["scan", project, "--types", "exe", "--json"], NameOracle({"a.exe"}))

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["outcome"] == "completed"
        assert data["message"] == "Check completed! Processed 2 files"
        assert data["total_files_checked"] == 2
        assert [os.path.basename(p) for p in data["signed_files"]] == ["a.exe"]
        assert [os.path.basename(p) for p in data["unsigned_files"]] == ["b.exe"]
        assert "elapsed_seconds" in data

    def test_no_recursive(self) -> None:
        """--no-recursive ignores nested files."""
        project = _create_test_tree(["top.exe", "sub/nested.exe"])
        result = _invoke(["scan", project, "--types", "exe", "--no-recursive", "--json"], NameOracle())

        data = json.loads(result.stdout)
        assert data["total_files_checked"] == 1

    def test_recursive_by_default(self) -> None:
        """Nested directories are scanned unless disabled."""
        project = _create_test_tree(["top.exe", "sub/nested.exe"])
        result = _invoke(["scan", project, "--types", "exe", "--json"], NameOracle())

        data = json.loads(result.stdout)
        assert data["total_files_checked"] == 2

    @pytest.mark.skipif(
        sys.platform in ("win32", "darwin"), reason="filesystem requires valid UTF-8 names"
    )
    def test_undecodable_file_name(self) -> None:
        """A file name that is not valid UTF-8 is listed with its bytes escaped."""
        project = _create_test_tree([])
        raw_path = os.path.join(os.fsencode(project), b"\xff.exe")
        try:
            with open(raw_path, "wb") as fh:
                fh.write(b"MZ")
        except OSError:
            pytest.skip("filesystem rejected a non-UTF-8 file name")

        result = _invoke(["scan", project, "--types", "exe"], NameOracle())

        assert result.exit_code == 0
        assert "\\xff.exe" in result.stdout
        assert "unsigned files out of" in result.stdout

    def test_cancelled_scan_shows_summary_only(self) -> None:
        """A cancelled scan prints the status but not the partial file tables."""
        project = _create_test_tree([f"f{i}.exe" for i in range(5)])
        result = _invoke(
            ["scan", project, "--types", "exe", "--timeout", "0.05"],
            NameOracle({"f0.exe"}, delay=0.2),
        )

        assert result.exit_code == EXIT_CANCELLED
        assert "Scan was cancelled" in result.stdout
        assert "Signed Files" not in result.stdout
        assert "Unsigned Files" not in result.stdout

    def test_failed_scan_shows_summary_only(self) -> None:
        """A failed scan prints its error but not the partial file tables."""
        project = _create_test_tree(["a.exe"])
        failed = ScanResult(
            signed_files=[os.path.join(project, "a.exe")],
            message="Error during check: disk gone",
            failed=True,
        )
        with patch("sigcheck.cli.run_scan", return_value=failed):
            result = _invoke(["scan", project], NameOracle())

        assert result.exit_code == 1
        assert "disk gone" in result.stdout
        assert "Signed Files" not in result.stdout


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class TestExitCodes:
    """Tests for exit codes and input validation."""

    def test_fail_on_unsigned_with_unsigned_file(self) -> None:
        """--fail-on-unsigned should exit 1 when unsigned files exist."""
        project = _create_test_tree(["a.exe", "b.exe"])
        result = _invoke(["scan", project, "--types", "exe", "--fail-on-unsigned"], NameOracle({"a.exe"}))
        assert result.exit_code == 1

    def test_fail_on_unsigned_all_signed(self) -> None:
        """--fail-on-unsigned should exit 0 when everything is signed."""
        project = _create_test_tree(["a.exe"])
        result = _invoke(["scan", project, "--types", "exe", "--fail-on-unsigned"], NameOracle({"a.exe"}))
        assert result.exit_code == 0

    def test_missing_path(self) -> None:
        """A missing directory exits 1."""
        result = _invoke(["scan", "/definitely/not/here"], NameOracle())
        assert result.exit_code == 1
        assert "does not exist" in result.stdout

    def test_blank_types(self) -> None:
        """An empty --types list exits 1."""
        project = _create_test_tree(["a.exe"])
        result = _invoke(["scan", project, "--types", " , "], NameOracle())
        assert result.exit_code == 1
        assert "specify file types" in result.stdout

    def test_json_errors_go_to_stderr(self) -> None:
        """With --json, input errors stay off stdout."""
        buffer = io.StringIO()
        with patch("sigcheck.cli.err_console", Console(file=buffer)):
            result = _invoke(["scan", "/definitely/not/here", "--json"], NameOracle())

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "does not exist" in buffer.getvalue()

    def test_json_blank_types_go_to_stderr(self) -> None:
        """With --json, a blank --types list is reported off stdout."""
        project = _create_test_tree(["a.exe"])
        buffer = io.StringIO()
        with patch("sigcheck.cli.err_console", Console(file=buffer)):
            result = _invoke(["scan", project, "--types", " , ", "--json"], NameOracle())

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "specify file types" in buffer.getvalue()

    def test_bad_oracle_reference(self) -> None:
        """An unresolvable --oracle exits 1."""
        project = _create_test_tree(["a.exe"])
        result = runner.invoke(app, ["scan", project, "--oracle", "sigcheck_no_such_module:X"])
        assert result.exit_code == 1

    @pytest.mark.skipif(sys.platform == "win32", reason="default oracle works on Windows")
    def test_default_oracle_unavailable(self) -> None:
        """The Windows oracle refuses to run elsewhere and the CLI exits 1."""
        project = _create_test_tree(["a.exe"])
        result = runner.invoke(app, ["scan", project])
        assert result.exit_code == 1
        assert "requires Windows" in result.stdout

    def test_failed_scan_exits_1(self) -> None:
        """A failed scan exits 1."""
        project = _create_test_tree(["a.exe"])
        failed = ScanResult(message="Error during check: disk gone", failed=True)
        with patch("sigcheck.cli.run_scan", return_value=failed):
            result = _invoke(["scan", project, "--json"], NameOracle())

        assert result.exit_code == 1
        assert json.loads(result.stdout)["outcome"] == "failed"

    def test_timeout_cancels_scan(self) -> None:
        """--timeout cancels a slow scan and exits with the cancelled code."""
        project = _create_test_tree([f"f{i}.exe" for i in range(5)])
        result = _invoke(
            ["scan", project, "--types", "exe", "--timeout", "0.05", "--json"],
            NameOracle(delay=0.2),
        )

        assert result.exit_code == EXIT_CANCELLED
        data = json.loads(result.stdout)
        assert data["cancelled"] is True
        assert data["total_files_checked"] < 5

    def test_version(self) -> None:
        """--version prints the version and exits 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout
