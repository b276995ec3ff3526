"""
Admin Profile Seeder

Creates the single admin profile (or replaces its password) in the configured
database. Run from project root:

    python scripts/seed_admin.py --password <secret>
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orderdesk.core.config import get_settings, setup_logging
from orderdesk.database import build_engine, build_session_maker, init_db
from orderdesk.services.admin import AdminSessionGate
from orderdesk.store import SettingsStore

logger = logging.getLogger("orderdesk.seed_admin")


async def seed(password: str) -> None:
    settings = get_settings()
    engine = build_engine(settings)
    try:
        await init_db(engine)
        gate = AdminSessionGate(SettingsStore(build_session_maker(engine)), settings)
        await gate.set_password(password)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or update the admin profile")
    parser.add_argument("--password", help="Admin password (prompted when omitted)")
    args = parser.parse_args()

    setup_logging()
    password = args.password or getpass.getpass("Admin password: ")
    if not password:
        print("❌ Password must not be empty")
        sys.exit(1)

    asyncio.run(seed(password))
    print("✅ Admin profile ready")
