"""
Reset learning progress.

DANGEROUS: Review counters and SRS schedules are restored to their
defaults. Review history is kept.

Usage:
    python -m scripts.reset_progress
    python -m scripts.reset_progress --levels 1 2
    python -m scripts.reset_progress --yes
"""

import argparse
import logging

from zi.factory import get_learning_service
from zi.srs.constants import ALL_LEVELS


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Reset learning progress")
    parser.add_argument(
        "--levels",
        type=int,
        nargs="+",
        choices=ALL_LEVELS,
        help="Only reset these levels (default: all levels)",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    scope = f"levels {args.levels}" if args.levels else "ALL levels"
    print("=" * 60)
    print(f"WARNING: Reset learning progress for {scope}")
    print("=" * 60)
    print()
    print("This will reset for every matching item:")
    print("  - Times seen / correct / incorrect")
    print("  - Ease factor, interval, repetitions and next review date")
    print()

    if not args.yes:
        response = input("Are you sure you want to reset? (type 'yes' to confirm): ")
        if response.lower() != "yes":
            print("\nCancelled. No changes made.")
            return

    service = get_learning_service()
    count = service.reset_progress(args.levels)
    print(f"\n✓ Reset {count} items.")


if __name__ == "__main__":
    main()
