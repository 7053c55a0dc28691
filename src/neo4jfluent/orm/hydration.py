# src/neo4jfluent/orm/hydration.py
"""
Turning nodes returned by the driver back into Node entities.
"""

from typing import Any

from neo4jfluent.orm.node import IDENTITY_KEY, Node


def hydrate_node(raw_node: Any) -> Node:
    """
    Build a persisted Node from a driver node.

    ``raw_node`` must expose ``items()`` for its properties and a ``labels``
    collection, as ``neo4j.graph.Node`` does. Record shape is checked by
    ``RecordSet.nodes`` before values get here. The driver keeps labels in a
    frozenset, so they are sorted to give a stable order.

    Validation is skipped: labels created outside this package may not pass
    the identifier allow-list, and they are only read back here.

    ``identity`` is always a string, but the id is also kept as stored so
    that statements matching the node bind the original value (an integer
    id written by another client still matches). A node stored without an
    ``id`` is marked as read from the store and refuses to be inserted again.
    """
    properties = dict(raw_node.items())
    stored_identity = properties.pop(IDENTITY_KEY, None)
    identity = str(stored_identity) if stored_identity is not None else None

    node = Node.model_construct(
        identity=identity,
        labels=sorted(raw_node.labels),
        attributes=properties,
        persisted=identity is not None,
    )
    node._from_store = True
    node._stored_identity = stored_identity
    return node
