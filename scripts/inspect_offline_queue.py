"""
Inspect (and optionally drain) the device's offline punch queue.
Uses the same stores as the agent (from app.core.config.settings).

Usage:
  python scripts/inspect_offline_queue.py
  python scripts/inspect_offline_queue.py --drain
  python scripts/inspect_offline_queue.py --sweep-cache
  python scripts/inspect_offline_queue.py --clear --yes
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add project root so app is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core import deps
from app.core.logging import setup_logging
from app.utils.datetime_utils import iso_8601_utc, ms_to_utc


async def sweep_cache() -> None:
    cache = deps.get_image_cache()
    try:
        result = await cache.try_clear_expired_cache()
        if result.ok:
            print(f"Removed {result.value} expired worker photo(s).")
        else:
            print(f"Cache sweep failed [{result.failure.value}]: {result.detail}")
    finally:
        await cache.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect the offline punch queue")
    parser.add_argument("--drain", action="store_true", help="Push queued punches to the attendance API")
    parser.add_argument("--sweep-cache", action="store_true", help="Delete expired worker photos")
    parser.add_argument("--clear", action="store_true", help="Discard every queued punch")
    parser.add_argument("--yes", action="store_true", help="Confirm --clear")
    args = parser.parse_args()

    setup_logging()
    queue = deps.get_offline_queue()

    punches = queue.get_all()
    print(f"{len(punches)} punch(es) queued:")
    for punch in punches:
        print(
            f"  {punch.id}  {punch.type.value:<9} worker={punch.worker_id} site={punch.site_id} "
            f"date={punch.date} queued={iso_8601_utc(ms_to_utc(punch.timestamp))}"
        )

    if args.clear:
        if not args.yes:
            print("Refusing to clear without --yes", file=sys.stderr)
            return 1
        queue.clear_all()
        print("Queue cleared.")
    elif args.drain:
        sync_service = deps.get_sync_service(
            queue=queue,
            client=deps.get_attendance_client(),
            network=deps.get_network_monitor(),
        )
        summary = sync_service.drain()
        if summary.skipped_offline:
            print("Device is offline; nothing was sent.")
        else:
            print(f"Synced {summary.synced}, failed {summary.failed}, remaining {summary.remaining}.")

    if args.sweep_cache:
        asyncio.run(sweep_cache())
    return 0


if __name__ == "__main__":
    sys.exit(main())
