"""
Test Runner - suites from /tests + results.txt logging
======================================================
Runs pytest per suite (selected by marker) and appends output to results.txt.
"""

import sys
import subprocess
import argparse
from datetime import datetime

RESULTS_FILE = "results.txt"

SUITES = {
    "unit": ("unit", "Unit Tests - orchestrator, store, schemas, provider client"),
    "api": ("api", "API Tests - /flights endpoints"),
}


def write_to_results(text: str):
    """Append a line to results.txt."""
    with open(RESULTS_FILE, "a", encoding="utf-8") as f:
        f.write(text + "\n")


def run_pytest(pytest_args: list, description: str = ""):
    """Run pytest with given args, print output, and save to results.txt."""

    header = f"\n{'='*70}\n  {description}\n{'='*70}\n"
    print(header)
    write_to_results(header)

    cmd = ["pytest", "tests", "-v", "--tb=short"] + pytest_args

    result = subprocess.run(cmd, capture_output=True, text=True)

    print(result.stdout)
    print(result.stderr)

    write_to_results(result.stdout)
    write_to_results(result.stderr)

    return result.returncode == 0


def main():
    parser = argparse.ArgumentParser(description="Run Ranner flights tests")

    parser.add_argument("--all", action="store_true", help="Run all suites")
    parser.add_argument("--unit", action="store_true")
    parser.add_argument("--api", action="store_true")

    parser.add_argument("--coverage", action="store_true")
    parser.add_argument("--html", action="store_true")
    parser.add_argument("-k", "--keyword")
    parser.add_argument("--failfast", action="store_true")

    args = parser.parse_args()

    selected = [name for name in SUITES if getattr(args, name)]
    if args.all or not selected:
        selected = list(SUITES)

    # Clear old results
    open(RESULTS_FILE, "w").close()

    header = (
        "\n" + "="*70 + "\n"
        " RANNER FLIGHTS - TEST SUITE\n"
        + "="*70 + "\n"
        f" Start Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
        + "="*70
    )
    print(header)
    write_to_results(header)

    base_pytest_args = []

    if args.coverage:
        base_pytest_args += ["--cov=app", "--cov=services", "--cov=schemas", "--cov-report=term-missing"]
        if args.html:
            base_pytest_args.append("--cov-report=html")

    if args.keyword:
        base_pytest_args += ["-k", args.keyword]

    if args.failfast:
        base_pytest_args += ["--maxfail=1"]

    results = []
    for name in selected:
        marker, description = SUITES[name]
        success = run_pytest(["-m", marker] + base_pytest_args, description)
        results.append((description, success))

    passed = sum(1 for _, ok in results if ok)
    failed = len(results) - passed

    summary_lines = [
        "\n" + "="*70,
        " TEST EXECUTION SUMMARY",
        "="*70,
    ]

    for name, ok in results:
        status = "PASS" if ok else "FAIL"
        summary_lines.append(f"  {status}  {name}")

    summary_lines += [
        "="*70,
        f"  Total: {len(results)} suites",
        f"  Passed: {passed}",
        f"  Failed: {failed}",
        "="*70,
        f" End Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "="*70
    ]

    print("\n".join(summary_lines))
    for line in summary_lines:
        write_to_results(line)

    sys.exit(0 if failed == 0 else 1)


if __name__ == "__main__":
    main()
