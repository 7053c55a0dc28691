# src/neo4jfluent/exceptions.py
"""
Neo4jFluent error taxonomy.

Builder mistakes are raised locally, before anything reaches the server.
Failures reported by the driver are wrapped in StoreFailure with the original
exception chained as ``__cause__``.
"""


class Neo4jFluentError(Exception):
    """Base class for every error raised by neo4jfluent."""


class QueryBuildError(Neo4jFluentError, ValueError):
    """A builder method received input that cannot be compiled into Cypher."""


class UnsafeMutation(QueryBuildError):
    """update()/delete() was called on a query without any predicate."""


class InvalidDirection(QueryBuildError):
    """A traversal was configured with an unknown direction."""


class InvalidIdentifier(QueryBuildError):
    """A label, field name or relationship type is not a plain identifier."""


class InvalidOperator(QueryBuildError):
    """A comparison operator is not in the supported set."""


class MissingIdentity(Neo4jFluentError):
    """A node without identity was asked to update or refresh itself."""


class MissingEndpoint(Neo4jFluentError):
    """A relationship cannot be saved because an endpoint has no identity."""


class StoreFailure(Neo4jFluentError):
    """The graph store rejected a statement or could not be reached."""


class MalformedRecord(Neo4jFluentError):
    """A result value does not expose node properties and labels."""
