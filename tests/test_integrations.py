# tests/test_integrations.py
"""
Integration tests for the Neo4jFluent public API.

Walks the complete flow from the package's top-level imports through node
creation, relationship creation, querying, traversal and deletion, checking
every statement the gateway receives.
"""

import pytest

# Test the main import flow
from neo4jfluent import (
    Node,
    NodeQuery,
    StoreFailure,
    StoreGateway,
    UnsafeMutation,
    __version__,
)

from conftest import FakeNeo4jNode


def _node(column, labels, properties):
    return {column: FakeNeo4jNode(labels, properties)}


@pytest.mark.asyncio
class TestFluentWorkflowIntegration:
    """Complete create / relate / query / traverse / delete workflow."""

    async def test_complete_workflow(self, gateway):
        # 1. Create two nodes
        gateway.queue(
            [_node("n", ["Person"], {"id": "uuid-1", "name": "Alice", "city": "San Francisco", "age": 30})],
            [_node("n", ["Company", "Organization"], {"id": "uuid-2", "name": "Acme"})],
        )
        alice = await gateway.label("Person").create(name="Alice", city="San Francisco", age=30)
        acme = await gateway.label("Company", "Organization").create(name="Acme")

        assert alice.persisted and acme.persisted
        assert (alice.identity, acme.identity) == ("uuid-1", "uuid-2")

        # 2. Connect them
        gateway.queue([{"r": {"since": 2020}}])
        created = await alice.relationship("WORKS_FOR").to(acme).with_properties(since=2020).save(gateway)
        assert created is True
        assert gateway.last_statement == (
            "MATCH (a), (b) WHERE a.id = $fromId AND b.id = $toId "
            "CREATE (a)-[r:WORKS_FOR {since: $p1}]->(b) RETURN r",
            {"fromId": "uuid-1", "toId": "uuid-2", "p1": 2020},
        )

        # 3. Query people
        gateway.queue([_node("n", ["Person"], {"id": "uuid-1", "name": "Alice", "city": "San Francisco", "age": 30})])
        people = await (
            gateway.label("Person")
            .where("city", "San Francisco")
            .where("age", ">", 25)
            .order_by("name")
            .limit(5)
            .get()
        )
        assert [p.get("name") for p in people] == ["Alice"]
        assert gateway.last_statement == (
            "MATCH (n:Person) WHERE n.city = $p1 AND n.age > $p2 RETURN n ORDER BY n.name ASC LIMIT 5",
            {"p1": "San Francisco", "p2": 25},
        )

        # 4. Traverse to employers
        gateway.queue([_node("target", ["Company", "Organization"], {"id": "uuid-2", "name": "Acme"})])
        employers = await (
            gateway.label("Person").where("name", "Alice").outgoing("WORKS_FOR").label("Company").get()
        )
        assert [e.identity for e in employers] == ["uuid-2"]

        # 5. Modify and save the fetched node
        person = people[0]
        person.set("age", 31)
        gateway.queue([_node("n", ["Person"], {"id": "uuid-1", "age": 31})])
        assert await person.save(gateway) is True
        assert gateway.last_statement[0] == (
            "MATCH (n) WHERE n.id = $id SET n.name = $p1, n.city = $p2, n.age = $p3 RETURN n"
        )

        # 6. Delete
        assert await person.delete(gateway, detach=True) is True
        assert person.persisted is False
        assert gateway.last_statement == ("MATCH (n) WHERE n.id = $id DETACH DELETE n", {"id": "uuid-1"})

        # Seven statements: two creates, relationship, select, traversal, update, delete
        assert len(gateway.statements) == 7

    async def test_bulk_operations_are_guarded(self, gateway):
        with pytest.raises(UnsafeMutation):
            await gateway.label("Person").delete()
        with pytest.raises(UnsafeMutation):
            await gateway.label("Person").update({"status": "inactive"})
        assert gateway.statements == []

    async def test_transaction_groups_writes(self, gateway):
        async def work(tx):
            first = await tx.label("Temp").create(name="a")
            second = await tx.label("Temp").create(name="b")
            return [first, second]

        nodes = await gateway.transaction(work)

        assert gateway.transactions == 1
        assert [n.identity for n in nodes] == ["uuid-1", "uuid-2"]
        assert len(gateway.statements) == 2

    async def test_store_failure_surfaces_from_terminal_calls(self, gateway):
        class FailingGateway(type(gateway)):
            async def run(self, statement, parameters=None):
                raise StoreFailure("Statement failed: connection reset")

        with pytest.raises(StoreFailure, match="connection reset"):
            await FailingGateway().label("Person").count()


class TestPublicAPI:
    def test_exports(self):
        import neo4jfluent

        assert __version__ == "0.1.0"
        missing = [name for name in neo4jfluent.__all__ if not hasattr(neo4jfluent, name)]
        assert missing == []

    def test_node_and_query_share_identity_key(self, gateway):
        node = Node(attributes={"id": "abc"})
        statement = gateway.label("Person").where("id", node.identity).compile_select()
        assert isinstance(gateway.label("Person"), NodeQuery)
        assert statement.parameters == {"p1": "abc"}

    def test_gateway_is_abstract(self):
        with pytest.raises(TypeError):
            StoreGateway()
