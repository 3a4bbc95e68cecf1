import asyncio

from signdesk.core.config import settings
from signdesk.db.session import build_engine
from signdesk.services.storage.sql import SqlDocumentStore
from signdesk.services.templates import seed_default_templates


async def create_tables():
    print("Creating tables...")
    store = SqlDocumentStore(build_engine(settings))
    try:
        await store.create_tables()
        added = await seed_default_templates(store)
    finally:
        await store.close()
    print(f"Tables created successfully ({added} templates seeded).")

if __name__ == "__main__":
    asyncio.run(create_tables())
