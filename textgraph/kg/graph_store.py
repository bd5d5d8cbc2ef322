"""
Graph store interface.

The reconciler only consumes these primitives:
- upsert node by (label, type)
- match node by (label, type), including alias membership
- find / create-if-absent edge by (source id, type, target id)
- delete all edges, delete all nodes
- ordered full snapshot
"""

from abc import ABC, abstractmethod
from typing import Any

from textgraph.core.logging import LoggerMixin
from textgraph.core.types import (
    EntityCandidate,
    GraphSnapshot,
    StoredEntity,
    StoredRelationship,
)


def merge_entity_fields(
    existing: StoredEntity,
    incoming: EntityCandidate,
) -> tuple[float, list[str], dict[str, Any]]:
    """
    Conflict resolution for an entity written twice.

    Returns:
        (confidence, aliases, properties): confidence is the max of both,
        aliases the order-preserving union, properties a shallow merge
        where incoming keys overwrite stored ones
    """
    confidence = max(existing.confidence, incoming.confidence)
    aliases = list(dict.fromkeys([*existing.aliases, *incoming.aliases]))
    properties = {**existing.properties, **incoming.properties}
    return confidence, aliases, properties


def sort_snapshot(
    entities: list[StoredEntity],
    relationships: list[StoredRelationship],
) -> GraphSnapshot:
    """Entities by confidence desc then label; relationships by confidence desc."""
    return GraphSnapshot(
        entities=sorted(entities, key=lambda e: (-e.confidence, e.label)),
        relationships=sorted(relationships, key=lambda r: -r.confidence),
    )


class GraphStore(ABC, LoggerMixin):
    """Abstract base class for graph stores."""

    @abstractmethod
    async def initialize(self) -> None:
        """Connect and prepare the store."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Release resources."""
        pass

    @abstractmethod
    async def upsert_node(self, entity: EntityCandidate) -> StoredEntity:
        """
        Create or merge the node identified by (label, entity_type).

        Merging follows ``merge_entity_fields`` and refreshes ``updated_at``.
        """
        pass

    @abstractmethod
    async def match_node(self, label: str, entity_type: str) -> StoredEntity | None:
        """
        Find a node of ``entity_type`` whose label or one of whose aliases
        equals ``label`` (case-insensitive). An exact label match wins.
        """
        pass

    @abstractmethod
    async def find_edge(
        self,
        source_id: str,
        target_id: str,
        relation_type: str,
    ) -> StoredRelationship | None:
        """Find the edge of ``relation_type`` from source to target."""
        pass

    @abstractmethod
    async def create_edge_if_absent(
        self,
        source_id: str,
        target_id: str,
        relation_type: str,
        properties: dict[str, Any],
        confidence: float,
    ) -> tuple[StoredRelationship, bool]:
        """
        Create an edge unless one of the same type already joins the pair.

        Returns:
            (edge, created): the existing edge is returned unchanged with
            ``created=False``
        """
        pass

    @abstractmethod
    async def delete_all_edges(self) -> int:
        """Delete every edge; returns the number deleted."""
        pass

    @abstractmethod
    async def delete_all_nodes(self) -> int:
        """Delete every node; returns the number deleted."""
        pass

    @abstractmethod
    async def snapshot(self) -> GraphSnapshot:
        """Read the whole graph in ``sort_snapshot`` order."""
        pass

    async def __aenter__(self) -> "GraphStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.cleanup()
