"""Purge expired OTP challenges once (for cron-style deployments)."""

import asyncio
import logging

from pdfqa.app.config import get_settings
from pdfqa.app.container import build_sql_services


async def purge() -> int:
    """Delete expired challenges and return the number removed."""
    services = build_sql_services(get_settings())
    try:
        return await services.challenges.purge_expired()
    finally:
        if services.engine is not None:
            await services.engine.dispose()


def main() -> None:
    """Run a single purge pass."""
    logging.basicConfig(level=logging.INFO)
    removed = asyncio.run(purge())
    print(f"Removed {removed} expired challenge(s)")


if __name__ == "__main__":
    main()
