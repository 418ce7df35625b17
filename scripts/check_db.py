import asyncio
import os
import sys

from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import create_async_engine

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.models import Base


def _table_names(sync_conn):
    return inspect(sync_conn).get_table_names()


async def check_db():
    engine = create_async_engine(settings.database_url)
    print(f"Connecting to database: {engine.url.render_as_string(hide_password=True)}")

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            print("Connection successful! Checking Database Content...\n")

            tables = await conn.run_sync(_table_names)

            print("-" * 65)
            print(f"{'TABLE NAME':<30} | {'STATUS':<10} | {'ROW COUNT':<15}")
            print("-" * 65)

            for table in sorted(Base.metadata.tables):
                status = "OK" if table in tables else "MISSING"
                count = 0
                if table in tables:
                    res = await conn.execute(text(f"SELECT COUNT(*) FROM {table}"))
                    count = res.scalar()
                print(f"{table:<30} | {status:<10} | {count:<15}")

            print("-" * 65)

            if "alembic_version" in tables:
                result = await conn.execute(text("SELECT version_num FROM alembic_version"))
                print(f"\nCurrent Alembic Version: {result.scalar()}")
            else:
                print("\nAlembic version table not found.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(check_db())
