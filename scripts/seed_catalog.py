"""Seed demo doctors, labs and users into the Healthdesk database.

Usage:
    python scripts/seed_catalog.py

Safe to re-run: users are upserted and the catalog is only inserted once.
"""

import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from healthdesk.config import Settings
from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.seed import DEMO_USERS, seed_catalog
from healthdesk.persistence.store import ChatStore, Database

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main():
    settings = Settings()
    db = Database(settings.db_path)
    await db.init_db()
    try:
        await seed_catalog(RecordStore(db), ChatStore(db))
    finally:
        await db.close()
    for user in DEMO_USERS:
        logger.info("Demo %s user: Authorization: Bearer %s", user.type, user.id)


if __name__ == "__main__":
    asyncio.run(main())
