import argparse
import asyncio
from pathlib import Path
import sys

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.logging_config import setup_logging
from database import close_db, create_engine, create_session_maker, drop_db, init_db
from database.store import EntityStore

"""
Create the studio tables and seed the default masters and services.

Usage examples:
    python scripts/init_db.py
    python scripts/init_db.py --database-url sqlite+aiosqlite:///./demo.db --reset

Notes:
- Seeding only fills empty tables, so running the script twice is safe.
- --reset drops every table first. All data is lost.
"""


def parse_args():
    p = argparse.ArgumentParser(description="Create tables and seed default catalog")
    p.add_argument("--database-url", help="Override DATABASE_URL")
    p.add_argument("--reset", action="store_true", help="Drop all tables before creating them")
    p.add_argument("--no-seed", action="store_true", help="Skip seeding default masters/services")
    return p.parse_args()


async def main():
    args = parse_args()
    setup_logging()

    engine = create_engine(args.database_url)
    try:
        if args.reset:
            await drop_db(engine)
            print("Dropped all tables")
        await init_db(engine)
        print("Tables created")

        if not args.no_seed:
            store = EntityStore(create_session_maker(engine))
            created = await store.seed_defaults()
            print(f"Seeded: {created['masters']} master(s), {created['services']} service(s)")
    finally:
        await close_db(engine)


if __name__ == "__main__":
    asyncio.run(main())
