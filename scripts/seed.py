"""Seed the configured database with the demo job openings, candidates and templates.

Only useful with a file-backed DATABASE_URL (e.g. sqlite+aiosqlite:///talenthub.db);
the default in-memory database is seeded at application startup.
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from talenthub.core.database import async_session, engine, init_db  # noqa: E402
from talenthub.services.seed import CANDIDATES, OPENINGS, TEMPLATES, seed_demo_data  # noqa: E402


async def seed():
    await init_db(engine)
    if not await seed_demo_data(async_session, force="--force" in sys.argv):
        print("DB already has data. Use --force to reset.")
        return

    print(f"\n{'=' * 50}")
    print("Seed done!")
    print(f"  {len(OPENINGS)} job openings, {len(CANDIDATES)} candidates")
    print(f"  {len(TEMPLATES)} feedback templates")
    print(f"{'=' * 50}")


if __name__ == "__main__":
    asyncio.run(seed())
