#!/usr/bin/env python3
"""
Local Storage Adapter

Demonstrates a full round trip: write records, query them through the
filter engine, export the set and import it into a second adapter.

Usage:
    python -m localstore

    # Against a Redis server
    LOCALSTORE_STORAGE_BACKEND=redis REDIS_HOST=localhost python -m localstore
"""

from __future__ import annotations

import asyncio
import re
import sys

from localstore.core.config import AdapterConfig
from localstore.observability.logging import setup_logging, LogLevel
from localstore.api.adapter import LocalStorageAdapter
from localstore.storage.backends import InMemoryStorage


def _record(resource_type: str, resource_id: str, attributes: dict, relationships: dict) -> dict:
    return {
        "data": {
            "type": resource_type,
            "id": resource_id,
            "attributes": attributes,
            "relationships": relationships,
        }
    }


async def demo() -> None:
    """Run the demo against the configured backend."""
    print("\n" + "=" * 60)
    print("Local Storage Adapter - Demo")
    print("=" * 60 + "\n")

    config_result = AdapterConfig.from_env()
    if config_result.is_err():
        print(f"Configuration error: {config_result.error}")
        sys.exit(1)

    config = config_result.unwrap()

    validation = config.validate()
    if validation.is_err():
        print(f"Validation error: {validation.error}")
        sys.exit(1)

    setup_logging(LogLevel.DEBUG if config.debug else LogLevel.INFO, json_output=False)

    adapter = LocalStorageAdapter(config=config)
    connect = getattr(adapter.storage, "connect", None)
    if connect is not None:
        result = connect()
        if result.is_err():
            print(f"Storage error: {result.error}")
            sys.exit(1)

    print("✓ Adapter ready")
    print(f"  Namespace: {config.namespace or '(none)'}")
    print(f"  Backend: {config.storage.backend.value}")

    # 1. Write
    print("\n1. Writing records...")
    await adapter.create_record(_record(
        "users", "1", {"name": "Ada"}, {},
    ))
    for post_id, title, tags in (("1", "Hello", ["intro"]), ("2", "Queries", ["howto", "intro"])):
        await adapter.create_record(_record(
            "posts", post_id, {"title": title, "tags": tags},
            {"author": {"data": {"type": "users", "id": "1"}}},
        ))
    print(f"   Indexed posts: {adapter.indices.index_for('posts').to_list()}")

    # 2. Query
    print("\n2. Querying posts by author and title pattern...")
    result = await adapter.query("posts", {"filter": {
        "author": {"type": "user", "id": "1"},
        "title": re.compile(r"^Q"),
    }})
    for post in result.unwrap()["data"]:
        print(f"   {post['id']}: {post['attributes']['title']}")

    # 3. Export / import
    print("\n3. Exporting and re-importing...")
    dump = (await adapter.export_data(["users", "posts"], compress=True)).unwrap()
    print(f"   Compressed export: {len(dump)} bytes")

    replica = LocalStorageAdapter(storage=InMemoryStorage())
    count = (await replica.import_data(dump)).unwrap()
    print(f"   Imported {count} record(s) into replica")

    print("\n✓ Demo complete")
    print("=" * 60 + "\n")


async def main() -> None:
    """Main entry point."""
    try:
        await demo()
    except KeyboardInterrupt:
        print("\nInterrupted")


def run() -> None:
    """Synchronous entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
