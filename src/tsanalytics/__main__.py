"""CLI entry point for tsanalytics.

Enables ``python -m tsanalytics <command>`` usage.

Subcommands:
    doctor   - Environment check: dependencies and versions.
    describe - Machine-readable API schema (JSON to stdout).
    version  - Print tsanalytics version.
"""

from __future__ import annotations

import argparse
import importlib
import json
import sys


def _check_import(module_name: str) -> tuple[bool, str | None]:
    """Try importing a module and return (success, version_or_none)."""
    try:
        mod = importlib.import_module(module_name)
        version = getattr(mod, "__version__", getattr(mod, "VERSION", None))
        return True, str(version) if version is not None else "installed"
    except ImportError:
        return False, None


def _cmd_doctor() -> int:
    """Run environment diagnostics."""
    import tsanalytics

    print(f"tsanalytics {tsanalytics.__version__}")
    print(f"Python {sys.version}")
    print()

    core_deps = [
        ("numpy", "numpy"),
        ("pandas", "pandas"),
        ("scipy", "scipy"),
        ("pydantic", "pydantic"),
    ]

    print("Core dependencies:")
    all_core_ok = True
    for display_name, module_name in core_deps:
        ok, version = _check_import(module_name)
        status = f"  {version}" if ok else "  NOT INSTALLED"
        marker = "ok" if ok else "MISSING"
        print(f"  [{marker:>7s}] {display_name}{status}")
        if not ok:
            all_core_ok = False

    print()

    print("Test tooling (pip install tsanalytics[test]):")
    ok, version = _check_import("pytest")
    status = f"  {version}" if ok else "  not installed"
    marker = "ok" if ok else "---"
    print(f"  [{marker:>7s}] pytest{status}")

    print()

    if all_core_ok:
        print("All systems go.")
    else:
        print("WARNING: Some core dependencies are missing. Install with:")
        print("  pip install tsanalytics")

    return 0 if all_core_ok else 1


def _cmd_describe() -> int:
    """Print machine-readable API schema as JSON."""
    from tsanalytics.discovery import describe

    info = describe()
    json.dump(info, sys.stdout, indent=2, default=str)
    print()
    return 0


def _cmd_version() -> int:
    """Print version string."""
    import tsanalytics

    print(tsanalytics.__version__)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="tsanalytics",
        description="tsanalytics - time series analysis and ARIMA estimation",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("doctor", help="Environment check: dependencies")
    subparsers.add_parser("describe", help="Machine-readable API schema (JSON)")
    subparsers.add_parser("version", help="Print version")

    args = parser.parse_args(argv)

    if args.command == "doctor":
        return _cmd_doctor()
    elif args.command == "describe":
        return _cmd_describe()
    elif args.command == "version":
        return _cmd_version()
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
