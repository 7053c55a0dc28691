#!/usr/bin/env python3
"""
Neo4jFluent Example

This example walks through the fluent API against a running server:
- Creating schema-less nodes with one or more labels
- Connecting them with typed relationships carrying properties
- Filtering, ordering and limiting with chained where() calls
- Traversing relationships in both directions
- Guarded bulk updates and deletes, and a transaction

Connection settings come from NEO4J_* environment variables (or a .env file).
"""

import asyncio
import logging

from neo4jfluent import GraphGateway, Neo4jFluentError, Neo4jSettings, UnsafeMutation


# =============================================================================
# DEMO
# =============================================================================

async def seed(gateway: GraphGateway) -> None:
    alice = await gateway.label("Person").create(name="Alice", city="San Francisco", age=30)
    bob = await gateway.label("Person").create(name="Bob", city="San Francisco", age=24)
    carol = await gateway.label("Person").create(name="Carol", city="Oakland", age=41)
    acme = await gateway.label("Company", "Organization").create(name="Acme", founded=1999)

    await alice.relationship("WORKS_FOR").to(acme).with_properties(since=2020, role="Engineer").save(gateway)
    await carol.relationship("WORKS_FOR").to(acme).with_properties(since=2015, role="Director").save(gateway)
    await alice.relationship("KNOWS").to(bob).save(gateway)
    await bob.relationship("KNOWS").to(carol).save(gateway)


async def run_demo() -> None:
    settings = Neo4jSettings()

    async with GraphGateway.from_settings(settings) as gateway:
        await seed(gateway)

        print("\n1. People in San Francisco older than 25")
        people = await (
            gateway.label("Person")
            .where("city", "San Francisco")
            .where("age", ">", 25)
            .order_by("name")
            .limit(5)
            .get()
        )
        for person in people:
            print(f"   {person.get('name')} ({person.get('age')})")

        print("\n2. Where Alice works")
        employers = await (
            gateway.label("Person").where("name", "Alice").outgoing("WORKS_FOR").label("Company").get()
        )
        print(f"   {[company.get('name') for company in employers]}")

        print("\n3. Long-standing Acme employees")
        veterans = await (
            gateway.label("Company")
            .where("name", "Acme")
            .incoming("WORKS_FOR")
            .where_relationship("since", "<", 2018)
            .get()
        )
        print(f"   {[person.get('name') for person in veterans]}")

        print("\n4. Bob's acquaintances, either direction")
        print(f"   {await gateway.label('Person').where('name', 'Bob').related('KNOWS').count()}")

        print("\n5. Guarded bulk update")
        try:
            await gateway.label("Person").update({"status": "active"})
        except UnsafeMutation as e:
            print(f"   refused: {e}")
        updated = await gateway.label("Person").where("city", "San Francisco").update({"status": "active"})
        print(f"   updated {updated} nodes")

        print("\n6. Cleaning up inside one transaction")

        async def cleanup(tx):
            removed = await tx.label("Person").where_in("name", ["Alice", "Bob", "Carol"]).delete(detach=True)
            removed += await tx.label("Company").where("name", "Acme").delete(detach=True)
            return removed

        print(f"   removed {await gateway.transaction(cleanup)} nodes")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(run_demo())
    except (Neo4jFluentError, ConnectionError) as e:
        print(f"\nDemo failed: {e}")
