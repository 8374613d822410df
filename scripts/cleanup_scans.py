"""
Forget remote scan ids that are older than a cutoff.

    python -m scripts.cleanup_scans --seconds 86400
"""
import argparse
import asyncio
from datetime import datetime, timedelta

from app.features.pages.services.page_service import clear_expired_scans
from app.platform.config import settings
from app.platform.db.session import SessionLocal


async def cleanup_scans(seconds: int, session_factory=SessionLocal) -> int:
    cutoff = datetime.utcnow() - timedelta(seconds=seconds)
    async with session_factory() as db:
        return await clear_expired_scans(db, cutoff)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Clear scan ids stored on pages before the cutoff.")
    parser.add_argument(
        "--seconds",
        "-s",
        type=int,
        default=settings.SCAN_CLEANUP_SECONDS,
        help="Age in seconds after which a stored scan id is cleared (default: %(default)s)",
    )
    args = parser.parse_args(argv)
    if args.seconds < 0:
        parser.error("--seconds must not be negative")

    count = asyncio.run(cleanup_scans(args.seconds))
    print(f"✅ Cleared scan ids on {count} page(s) older than {args.seconds} seconds")
    return count


if __name__ == "__main__":
    main()
