import argparse
import asyncio
import json
from pathlib import Path
import sys

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.logging_config import setup_logging
from database import close_db, create_engine, create_session_maker, init_db
from database.snapshot import export_snapshot, import_snapshot
from database.store import EntityStore

"""
Export the studio data to a JSON file or restore it from one.

Usage examples:
    python scripts/snapshot.py export backup.json
    python scripts/snapshot.py import backup.json --apply

Notes:
- import replaces every collection. Without --apply it only prints what the file holds.
"""


def parse_args():
    p = argparse.ArgumentParser(description="Export/import a JSON snapshot of studio data")
    p.add_argument("command", choices=["export", "import"])
    p.add_argument("path", type=Path, help="Snapshot file")
    p.add_argument("--database-url", help="Override DATABASE_URL")
    p.add_argument("--apply", action="store_true", help="Write the import (omit for dry run)")
    return p.parse_args()


async def main():
    args = parse_args()
    setup_logging()

    engine = create_engine(args.database_url)
    try:
        await init_db(engine)
        store = EntityStore(create_session_maker(engine))

        if args.command == "export":
            snapshot = await export_snapshot(store)
            args.path.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), encoding="utf-8")
            sizes = {k: len(v) for k, v in snapshot.items() if isinstance(v, list)}
            print(f"Exported to {args.path}: {sizes}")
            return

        snapshot = json.loads(args.path.read_text(encoding="utf-8"))
        if not args.apply:
            sizes = {k: len(v) for k, v in snapshot.items() if isinstance(v, list)}
            print(f"Dry run. {args.path} holds {sizes}. Use --apply to replace current data.")
            return
        counts = await import_snapshot(store, snapshot)
        print(f"Done. Imported {counts}")
    finally:
        await close_db(engine)


if __name__ == "__main__":
    asyncio.run(main())
