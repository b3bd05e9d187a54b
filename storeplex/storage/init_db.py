# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Schema Bootstrap — Create any missing Storeplex table.

    python -m storeplex.storage.init_db

Existing tables are left as they are.
"""

import asyncio
import sys

from storeplex.storage.database import close_db, create_all_tables

# Register the ORM models on Base.metadata
import storeplex.storage.models  # noqa: F401


async def main() -> int:
    print("[init_db] Creating tables...")
    try:
        await create_all_tables()
    finally:
        await close_db()
    print("[init_db] Done.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
