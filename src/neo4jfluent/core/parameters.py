# src/neo4jfluent/core/parameters.py
"""
Placeholder naming for values bound into a single Cypher statement.
"""


class ParameterAllocator:
    """
    Hands out placeholder names ``p1``, ``p2``, ... for one statement.

    Every value bound into a statement must go through the same allocator so
    that two predicates on the same field never share a placeholder.
    """

    def __init__(self, prefix: str = "p"):
        self.prefix = prefix
        self._counter = 0

    def next(self) -> str:
        """Return a fresh placeholder name."""
        self._counter += 1
        return f"{self.prefix}{self._counter}"

    @property
    def allocated(self) -> int:
        """How many names have been handed out."""
        return self._counter
