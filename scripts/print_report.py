"""Utility script to print the adaptive budget report for a synthetic snapshot."""

from __future__ import annotations

import argparse
import json
from datetime import date

from adaptive_budget import engine, settings, summarize, synth


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the adaptive budget report as JSON")
    parser.add_argument("--months", type=int, default=synth.DEFAULT_MONTHS)
    parser.add_argument("--seed", type=int, default=synth.DEFAULT_SEED)
    parser.add_argument("--as-of", type=date.fromisoformat, default=synth.DEFAULT_AS_OF)
    parser.add_argument("--summary", action="store_true", help="Also print the narrative summary")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    args = parser.parse_args()

    settings.configure_logging(args.log_level)

    transactions, accounts = synth.generate_snapshot(args.months, as_of=args.as_of, seed=args.seed)
    report = engine.build_report(transactions, accounts, args.as_of)
    print(json.dumps(report, indent=2))

    if args.summary:
        print()
        print(summarize.summarize_budget(report))


if __name__ == "__main__":
    main()
