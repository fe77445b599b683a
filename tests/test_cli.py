"""Tests for tsanalytics CLI (python -m tsanalytics)."""

from __future__ import annotations

import json
import subprocess
import sys

from tsanalytics.__main__ import main


def test_cli_version_via_main() -> None:
    """main(['version']) exits 0."""
    assert main(["version"]) == 0


def test_cli_doctor_via_main() -> None:
    """main(['doctor']) exits 0 with the core stack installed."""
    assert main(["doctor"]) == 0


def test_cli_describe_via_main() -> None:
    """main(['describe']) exits 0."""
    assert main(["describe"]) == 0


def test_cli_no_command_shows_help(capsys) -> None:
    """No subcommand prints help and exits 0."""
    ret = main([])
    assert ret == 0
    captured = capsys.readouterr()
    assert "tsanalytics" in captured.out


def test_cli_doctor_detects_core_deps(capsys) -> None:
    """Doctor output mentions each core dependency."""
    main(["doctor"])
    captured = capsys.readouterr()
    assert "Core dependencies" in captured.out
    for dep in ["numpy", "pandas", "scipy", "pydantic"]:
        assert dep in captured.out


def test_cli_doctor_shows_verdict(capsys) -> None:
    """Doctor output contains a verdict line."""
    main(["doctor"])
    captured = capsys.readouterr()
    assert "All systems go" in captured.out or "WARNING" in captured.out


def test_cli_describe_prints_json(capsys) -> None:
    """describe writes a JSON document to stdout."""
    main(["describe"])
    data = json.loads(capsys.readouterr().out)
    assert "E_NON_CONVERGENT" in data["error_codes"]
    assert data["defaults"]["arima"]["max_iter"] == 50


def test_cli_version_subprocess() -> None:
    """python -m tsanalytics version matches the package version."""
    import tsanalytics

    result = subprocess.run(
        [sys.executable, "-m", "tsanalytics", "version"],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 0
    assert result.stdout.strip() == tsanalytics.__version__
