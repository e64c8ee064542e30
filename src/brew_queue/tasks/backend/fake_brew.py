"""Local stand-in for ``brew`` used by process supervisor integration tests."""

from __future__ import annotations

import argparse
import os
import sys


def main(argv: list[str] | None = None) -> int:
    """Echo scripted stderr lines and exit with the requested code."""

    parser = argparse.ArgumentParser(allow_abbrev=False)
    parser.add_argument("--stderr-line", action="append", default=[])
    parser.add_argument("--exit-code", type=int, default=0)
    parser.add_argument("--report-env", default=None)
    parser.add_argument("--stdout", default=None)
    args, brew_args = parser.parse_known_args(argv)

    for line in args.stderr_line:
        sys.stderr.write(line.replace("\\r", "\r") + "\n")
    if args.report_env:
        sys.stderr.write(f"{args.report_env}={os.getenv(args.report_env, '')}\n")
    sys.stdout.write((args.stdout if args.stdout is not None else " ".join(brew_args)) + "\n")
    sys.stderr.flush()
    sys.stdout.flush()
    return args.exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
