# scripts/init_db.py
"""
Create the guild state table for the SQL storage backend. Run from project root:
    MPLUS_DATABASE_URL=... python scripts/init_db.py
"""
import asyncio

from mplus.config.settings import settings
from mplus.infrastructure.db.session import create_tables, make_engine


async def init():
    engine = make_engine(settings.DATABASE_URL)
    await create_tables(engine)
    await engine.dispose()
    print("DB initialized")


if __name__ == "__main__":
    asyncio.run(init())
