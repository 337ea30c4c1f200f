"""Create every service table in the configured database.

Usage:
    ENV_FILE=.env python -m scripts.db.create_tables [--drop]
"""

import argparse
import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv

# MUST be done before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
load_dotenv(project_root / os.environ.get("ENV_FILE", ".env"), override=True)

from libs.db.base import Base  # noqa: E402
from libs.db.config import engine  # noqa: E402

# Importing the models registers their tables on Base.metadata
import services.events_service.models  # noqa: E402,F401
import services.matrimony_service.models  # noqa: E402,F401
import services.media_service.models  # noqa: E402,F401
import services.members_service.models  # noqa: E402,F401
import services.payments_service.models  # noqa: E402,F401


async def create_tables(drop: bool = False) -> None:
    async with engine.begin() as conn:
        if drop:
            print("Dropping existing tables...")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()

    print(f"✅ Tables ready: {', '.join(sorted(Base.metadata.tables))}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--drop", action="store_true", help="drop all tables before creating them"
    )
    args = parser.parse_args()
    asyncio.run(create_tables(drop=args.drop))


if __name__ == "__main__":
    main()
