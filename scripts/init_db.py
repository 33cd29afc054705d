#!/usr/bin/env python3
"""
TokenGate - Database Setup Script

Applies the Neo4j schema (uniqueness constraints and indexes) and optionally
seeds one example content record.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --seed
    python scripts/init_db.py --seed --token-address 0x... --title "..." --body "..."
"""

import argparse
import asyncio

from tokengate.config import get_settings
from tokengate.database.client import Neo4jClient
from tokengate.database.schema import SchemaManager
from tokengate.errors import DuplicateContentError
from tokengate.repositories.content_repository import Neo4jContentRepository

EXAMPLE_TOKEN_ADDRESS = "0xd90af9670eb73e3aba8176a5aeabfb9c280af930"
EXAMPLE_TITLE = "SCP-042: The Singing Forest"
EXAMPLE_BODY = (
    "This is the secret classified content that is only visible to holders of this coin."
)


async def apply_schema(client: Neo4jClient) -> bool:
    """Create constraints and indexes, then verify them."""
    print("\nApplying schema...")
    manager = SchemaManager(client)

    results = await manager.setup_all()
    for name, ok in results.items():
        print(f"  {'✓' if ok else '✗'} {name}")

    verification = await manager.verify_schema()
    missing = verification["constraints"]["missing"] + verification["indexes"]["missing"]
    if missing:
        print(f"  Missing after setup: {', '.join(missing)}")
    return verification["valid"]


async def seed_content(client: Neo4jClient, token_address: str, title: str, body: str) -> None:
    """Store one content record, leaving an existing record untouched."""
    print("\nSeeding content...")
    repository = Neo4jContentRepository(client)
    try:
        record = await repository.create(token_address, title, body)
        print(f"  ✓ {record.token_address}: {record.title}")
    except DuplicateContentError:
        print(f"  - {token_address.lower()} already has content, skipped")


async def main() -> int:
    """Run the setup script."""
    parser = argparse.ArgumentParser(description="TokenGate database setup")
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Insert an example content record",
    )
    parser.add_argument("--token-address", default=EXAMPLE_TOKEN_ADDRESS)
    parser.add_argument("--title", default=EXAMPLE_TITLE)
    parser.add_argument("--body", default=EXAMPLE_BODY)
    args = parser.parse_args()

    settings = get_settings()
    print("=" * 60)
    print("TokenGate - Database Setup")
    print("=" * 60)
    print(f"\nConnecting to Neo4j: {settings.neo4j_uri}")

    client = Neo4jClient(settings=settings)
    try:
        await client.connect()
        print("Connected successfully!")

        schema_ok = await apply_schema(client)
        if args.seed:
            await seed_content(client, args.token_address, args.title, args.body)
    finally:
        await client.close()

    print("\n" + "=" * 60)
    print("Database setup complete!" if schema_ok else "Database setup incomplete")
    print("=" * 60)
    return 0 if schema_ok else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
