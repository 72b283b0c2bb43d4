"""Run all quality checks and report results as JSON.

Usage:
    python scripts/quality_gate.py              # run all, JSON output
    python scripts/quality_gate.py --skip-tests # skip pytest (fast)
    python scripts/quality_gate.py --fix        # auto-fix ruff issues first
"""

from __future__ import annotations

import argparse
import json
import re
import subprocess
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

MYPY_TARGETS = [
    "iris_cli/_utils.py",
    "iris_cli/api.py",
    "iris_cli/client.py",
    "iris_cli/commands.py",
    "iris_cli/credentials.py",
    "iris_cli/dispatch.py",
    "iris_cli/exceptions.py",
    "iris_cli/formatters/",
    "iris_cli/models.py",
    "iris_cli/registry.py",
    "iris_cli/resources/",
    "iris_cli/types.py",
]


def _run(cmd: list[str]) -> tuple[subprocess.CompletedProcess, float]:
    """Run a module command from the repo root; return (result, seconds)."""
    t0 = time.monotonic()
    r = subprocess.run(
        [sys.executable, "-m", *cmd],
        capture_output=True,
        text=True,
        cwd=str(ROOT),
        timeout=300,
    )
    return r, round(time.monotonic() - t0, 1)


def _count_lines(text: str, pattern: str) -> int:
    return sum(1 for line in text.splitlines() if re.search(pattern, line))


def check_ruff_lint(fix: bool = False) -> dict:
    if fix:
        _run(["ruff", "check", "--fix", "."])
    r, duration = _run(["ruff", "check", "."])
    return {
        "status": "pass" if r.returncode == 0 else "fail",
        "errors": _count_lines(r.stdout, r"^\S+:\d+:\d+:") if r.returncode else 0,
        "duration_s": duration,
        "output": r.stdout.strip() if r.returncode else "",
    }


def check_ruff_format() -> dict:
    r, duration = _run(["ruff", "format", "--check", "."])
    combined = r.stderr + "\n" + r.stdout
    return {
        "status": "pass" if r.returncode == 0 else "fail",
        "files_to_reformat": _count_lines(combined, r"^Would reformat") if r.returncode else 0,
        "duration_s": duration,
        "output": r.stderr.strip() if r.returncode else "",
    }


def check_mypy() -> dict:
    r, duration = _run(["mypy", *MYPY_TARGETS])
    return {
        "status": "pass" if r.returncode == 0 else "fail",
        "errors": _count_lines(r.stdout, r": error:") if r.returncode else 0,
        "duration_s": duration,
        "output": r.stdout.strip() if r.returncode else "",
    }


def check_pytest() -> dict:
    r, duration = _run(["pytest", "tests/", "-q", "--no-header", "--tb=short"])
    passed = failed = 0
    # Summary line: "120 passed" or "3 failed, 117 passed"
    for line in reversed(r.stdout.strip().splitlines()):
        m_passed = re.search(r"(\d+)\s+passed", line)
        m_failed = re.search(r"(\d+)\s+failed", line)
        if m_passed:
            passed = int(m_passed.group(1))
        if m_failed:
            failed = int(m_failed.group(1))
        if m_passed or m_failed:
            break
    result: dict = {
        "status": "pass" if r.returncode == 0 else "fail",
        "passed": passed,
        "failed": failed,
        "duration_s": duration,
    }
    if r.returncode != 0:
        result["output"] = r.stdout.strip()[-2000:]
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Run all quality checks")
    parser.add_argument("--skip-tests", action="store_true", help="Skip pytest")
    parser.add_argument("--fix", action="store_true", help="Auto-fix ruff issues first")
    args = parser.parse_args()

    t0 = time.monotonic()
    checks: dict[str, dict] = {}

    print("Running ruff lint...", file=sys.stderr)
    checks["ruff_lint"] = check_ruff_lint(fix=args.fix)
    print("Running ruff format...", file=sys.stderr)
    checks["ruff_format"] = check_ruff_format()
    print("Running mypy...", file=sys.stderr)
    checks["mypy"] = check_mypy()
    if args.skip_tests:
        checks["pytest"] = {"status": "skip", "reason": "--skip-tests"}
    else:
        print("Running pytest...", file=sys.stderr)
        checks["pytest"] = check_pytest()

    overall = "pass" if all(c["status"] in ("pass", "skip") for c in checks.values()) else "fail"
    for check in checks.values():
        if check.get("status") == "pass":
            check.pop("output", None)

    print(
        json.dumps(
            {
                "overall": overall,
                "checks": checks,
                "total_duration_s": round(time.monotonic() - t0, 1),
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
