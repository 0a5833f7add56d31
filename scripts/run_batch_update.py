"""
Run the SPT batch update from the command line.

Reads credentials from .env like the API does. The password is taken from
UPDATE_PASSWORD unless --password is given.

Usage:
    # Preview: build payloads, write nothing
    python scripts/run_batch_update.py --dry-run

    # Full run, omitting select fields that have no matching option
    python scripts/run_batch_update.py --strict

    # Print the first payloads as JSON (implies --dry-run)
    python scripts/run_batch_update.py --show-payloads 3
"""

import argparse
import json
import os
import sys

# Allow imports from the project root when running as a script
_root_dir = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, _root_dir)

from dotenv import load_dotenv
load_dotenv(os.path.join(_root_dir, ".env"))

from config.settings import get_settings
from models.sync import SyncResult, UnmatchedSelectPolicy
from services.batch_sync_service import BatchSyncService
from services.throttle_service import NoDelayThrottle
from exceptions import AppError


def show_payloads(result: SyncResult, limit: int) -> None:
    """Print the first `limit` payloads of a dry run."""
    for payload in result.payloads[:limit]:
        print(json.dumps(payload.to_airtable(), indent=2, ensure_ascii=False, default=str))

    print(f"\n{len(result.payloads)} payloads, {result.skipped_count} skipped")


def main():
    parser = argparse.ArgumentParser(
        description="Derive SPT fields from MTB and write them back to Airtable."
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build payloads but do not write"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Omit select fields whose value has no matching option"
    )
    parser.add_argument(
        "--password",
        default=None,
        help="Update password (default: UPDATE_PASSWORD from env)"
    )
    parser.add_argument(
        "--show-payloads",
        type=int,
        default=0,
        metavar="N",
        help="Print the first N payloads as JSON (implies --dry-run)"
    )
    args = parser.parse_args()

    settings = get_settings()
    dry_run = args.dry_run or args.show_payloads > 0
    policy = UnmatchedSelectPolicy.STRICT if args.strict else None
    service = BatchSyncService(
        settings,
        throttle=NoDelayThrottle() if dry_run else None,
        policy=policy
    )

    try:
        result = service.run(args.password or settings.update_password, dry_run=dry_run)
    except AppError as e:
        print(f"[ERROR] {e.message}")
        sys.exit(1)

    for line in result.details:
        print(f"  {line}")

    if args.show_payloads and result.success:
        show_payloads(result, args.show_payloads)

    if result.success:
        print(f"[OK] {result.message}")
    else:
        print(f"[ERROR] {result.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
