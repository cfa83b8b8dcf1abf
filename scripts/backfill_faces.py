#!/usr/bin/env python3
"""
Face backfill.

Indexes existing photos that were uploaded before face recognition was
enabled, for one user or for every user with photos. Photos already
indexed are reported as already processed and left alone.

Usage:
    python scripts/backfill_faces.py --dry-run                 # Preview photo counts
    python scripts/backfill_faces.py --user-id <uuid>          # One user
    python scripts/backfill_faces.py --limit 50                # Every user, 50 photos each
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from core.config import get_settings
from core.logging import setup_logging, get_logger
from services import FaceServices, build_services

logger = get_logger("scripts.backfill_faces")


async def backfill(services: FaceServices, user_ids, limit=None, dry_run=True):
    """Returns (photos processed, photos failed) across all users."""
    processed = 0
    failed = 0

    for user_id in user_ids:
        if dry_run:
            assets = await services.repos.assets.list_images_for_user(user_id, limit=limit)
            print(f"  [DRY-RUN] {user_id}: {len(assets)} photos would be indexed")
            continue

        print(f"\n=== User {user_id} ===")
        summary = await services.pipeline.reindex_user(user_id, limit=limit)
        print(f"  {summary.message}")
        for error in summary.errors:
            print(f"  ! {error.asset_id} ({error.file_name or '-'}): {error.error}")
        processed += summary.processed
        failed += len(summary.errors)

    return processed, failed


def main():
    parser = argparse.ArgumentParser(description="Index faces of existing photos")
    parser.add_argument("--user-id", help="Only backfill this user (default: every user with photos)")
    parser.add_argument("--limit", type=int, default=None, help="Process at most this many photos per user")
    parser.add_argument("--dry-run", action="store_true", help="Preview photo counts without indexing")
    args = parser.parse_args()

    load_dotenv()
    settings = get_settings()
    setup_logging(level="DEBUG" if settings.debug else "INFO")

    print("=" * 60)
    print("FACE BACKFILL")
    print("=" * 60)
    print(f"Mode: {'DRY-RUN (preview only)' if args.dry_run else 'LIVE (will index faces)'}")
    if args.limit:
        print(f"Limit: {args.limit} photos per user")
    print()

    services = build_services(settings)

    async def run():
        user_ids = [args.user_id] if args.user_id else await services.repos.assets.list_owner_ids()
        print(f"Users: {len(user_ids)}")
        return await backfill(services, user_ids, limit=args.limit, dry_run=args.dry_run)

    processed, failed = asyncio.run(run())

    print()
    print("=" * 60)
    print(f"Done. Photos processed: {processed}, failed: {failed}")
    print("=" * 60)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
