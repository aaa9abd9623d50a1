"""
Create the affiliates table in the database pointed to by DATABASE_URL.

Run once (idempotent): existing tables are left untouched.
Usage: python -m app.scripts.create_tables
"""

import asyncio

from app.db.session import create_tables, engine


async def create_affiliate_tables() -> None:
    print(f"Creating tables on {engine.url.render_as_string(hide_password=True)}...")
    await create_tables()
    await engine.dispose()
    print("Done.")


def main() -> None:
    asyncio.run(create_affiliate_tables())


if __name__ == "__main__":
    main()
