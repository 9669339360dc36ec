"""Command-line runner for the duel regression scenarios.

    python tests/run_regression.py               # every scenario
    python tests/run_regression.py -k reflect    # names containing "reflect"
    python tests/run_regression.py -v            # engine debug logging
"""

from __future__ import annotations

import argparse
import logging
import sys

from regression_suite import SCENARIOS, run_all


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Replay the scripted duel scenarios.")
    parser.add_argument("-k", dest="pattern", default="", help="only scenarios whose name contains this text")
    parser.add_argument("-v", "--verbose", action="store_true", help="log engine decisions at debug level")
    parser.add_argument("--list", action="store_true", help="print scenario names and exit")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    selected = [scenario for scenario in SCENARIOS if args.pattern in scenario.__name__]
    if args.list:
        for scenario in selected:
            print(scenario.__name__)
        return 0
    if not selected:
        print(f"No scenario matches {args.pattern!r}.")
        return 2

    results = run_all(selected)
    for name, ok, reason in results:
        print(f"{'ok  ' if ok else 'FAIL'} {name}" + ("" if ok else f"\n     {reason}"))

    failures = sum(1 for _, ok, _ in results if not ok)
    print(f"{len(results) - failures}/{len(results)} scenarios passed.")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
