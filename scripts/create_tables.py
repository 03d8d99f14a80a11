"""
Standalone script to create the schedule tables from the ORM metadata.

Usage:
    python scripts/create_tables.py [--prod] [--drop]
"""

import sys
import argparse
import asyncio
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.exc import SQLAlchemyError

# --- Path Setup ---
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT / 'src') not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / 'src'))

load_dotenv(PROJECT_ROOT / '.env')

from smart_calendar_backend.common.config import settings
from smart_calendar_backend.database.models import Base


async def create_tables(database_url: str, drop_first: bool):
    engine = create_async_engine(database_url, echo=False)
    try:
        async with engine.begin() as conn:
            if drop_first:
                print("Dropping existing tables...")
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create the schedule tables.")
    parser.add_argument("--prod", action="store_true", help="Target the PRODUCTION database.")
    parser.add_argument("--drop", action="store_true", help="Drop the tables before creating them.")
    args = parser.parse_args()

    if args.prod:
        database_url = settings.DATABASE_URL_PROD
        print("⚠️  WARNING: You are about to modify the PRODUCTION database. ⚠️")
        confirmation = input("Are you sure you want to proceed? (y/n): ").strip().lower()
        if confirmation != 'y':
            print("Operation aborted.")
            return
    else:
        database_url = settings.DATABASE_URL_TEST

    try:
        asyncio.run(create_tables(database_url, args.drop))
        print(f"Created tables: {', '.join(Base.metadata.tables)}")
    except SQLAlchemyError as e:
        print(f"❌ Failed to create tables: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
