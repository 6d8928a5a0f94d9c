"""Apply every SQL file under backend/migrations in name order.

Usage: python backend/scripts/apply_migrations.py [filename ...]
"""

import asyncio
import os
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.append(str(BACKEND_ROOT))

from agora.infra.postgres import close_pool, get_pool  # noqa: E402

MIGRATIONS_DIR = BACKEND_ROOT / "migrations"


async def apply_migrations(names: list[str]) -> None:
    if names:
        files = [MIGRATIONS_DIR / name for name in names]
    else:
        files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    missing = [path for path in files if not path.exists()]
    if missing:
        print(f"Migration file not found: {missing[0]}")
        sys.exit(1)

    pool = await get_pool()
    try:
        async with pool.acquire() as conn:
            for path in files:
                print(f"Applying migration: {path.name}")
                async with conn.transaction():
                    await conn.execute(path.read_text(encoding="utf-8"))
    finally:
        await close_pool()
    print("Migrations applied successfully.")


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    os.chdir(BACKEND_ROOT)
    asyncio.run(apply_migrations(sys.argv[1:]))
