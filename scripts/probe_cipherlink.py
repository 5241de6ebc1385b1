#!/usr/bin/env python3
"""
CIPHERLINK - Probe Script

Runs the config bootstrap against the configured plan and prints the resolved
protocol config with secrets masked. Optionally makes one signed call end to
end to check the secrets against the live server.

Usage:
    python scripts/probe_cipherlink.py
    python scripts/probe_cipherlink.py --plan my_plan.json --origin https://h5.example.com/
    python scripts/probe_cipherlink.py --call-categories

Requirements:
    - curl-cffi >= 0.7.0
    - beautifulsoup4
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path for local development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from app.core.config import settings
from app.services.cipherlink import (
    CatalogActions,
    CipherlinkException,
    ConfigLoader,
    CurlTransport,
    ProtocolClient,
    bootstrap,
)

logging.basicConfig(
    level=getattr(logging, settings.CIPHERLINK_LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("cipherlink_probe")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Probe the catalog API protocol secrets")
    parser.add_argument("--plan", help="Bootstrap plan JSON (default: CIPHERLINK_BOOTSTRAP_FILE or bundled)")
    parser.add_argument(
        "--origin",
        action="append",
        help="Candidate origin to try instead of the plan's (repeatable)",
    )
    parser.add_argument(
        "--call-categories",
        action="store_true",
        help="Make one signed category-list call with the resolved secrets",
    )
    return parser.parse_args(argv)


async def probe(args: argparse.Namespace) -> bool:
    logger.info("=" * 60)
    logger.info("CIPHERLINK - Protocol Probe")
    logger.info("=" * 60)

    plan = ConfigLoader.from_file(args.plan) if args.plan else ConfigLoader.from_settings(settings)
    if args.origin:
        plan = ConfigLoader.merge(plan, {"origins": args.origin})

    async with CurlTransport.from_settings(settings) as transport:
        try:
            config = await bootstrap(plan, transport)
        except CipherlinkException as e:
            logger.error(f"Bootstrap failed: {e}")
            return False

        for key, value in config.masked().items():
            logger.info(f"  {key:<15} {value}")

        if not args.call_categories:
            return True

        actions = CatalogActions(ProtocolClient(config, transport), dev_type=settings.CIPHERLINK_DEV_TYPE)
        try:
            categories = await actions.category_list()
        except CipherlinkException as e:
            logger.error(f"Signed call failed: {e}")
            return False

        logger.info(f"Signed call OK: {len(categories)} categories")
        for category in categories[:10]:
            logger.info(f"  [{category.id}] {category.title}")
    return True


if __name__ == "__main__":
    success = asyncio.run(probe(parse_args()))
    sys.exit(0 if success else 1)
