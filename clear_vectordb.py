#!/usr/bin/env python3
"""Delete vectors from the vector store, by type or all of them."""
import argparse
import asyncio
import sys

from portfolio.config import load_settings
from portfolio.kv import get_kv_store
from portfolio.models.vector import VectorType
from portfolio.vectordb import get_vector_store


async def clear(vector_type: str) -> int:
    settings = load_settings()
    kv = await get_kv_store(settings.kv)
    store = await get_vector_store(settings.vector_db, kv)

    try:
        print(f'Records before: {await store.count()}')

        if vector_type == "all":
            deleted = await store.delete_all()
        else:
            ids = [record.id for record in await store.list_by_type(vector_type)]
            deleted = await store.delete_many(ids)
        print(f'Deleted {deleted} records')

        print(f'Records after: {await store.count()}')
    finally:
        await store.close()
        await kv.close()

    return 0


def main():
    parser = argparse.ArgumentParser(description="Delete vectors from the vector store")
    parser.add_argument(
        "--type",
        choices=VectorType.values() + ["all"],
        default="all",
        help="Vector type to delete (default: all)",
    )
    args = parser.parse_args()
    return asyncio.run(clear(args.type))


if __name__ == "__main__":
    sys.exit(main())
