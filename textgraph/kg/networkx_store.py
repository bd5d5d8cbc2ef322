"""
In-memory graph store backed by NetworkX.

Nodes are keyed by store id and edges by relationship type, so a
``MultiDiGraph`` holds at most one edge per (source, type, target).
"""

from typing import Any
from uuid import uuid4

import networkx as nx

from textgraph.core.exceptions import StoreError
from textgraph.core.types import (
    EntityCandidate,
    GraphSnapshot,
    StoredEntity,
    StoredRelationship,
    normalize_type_tag,
    utcnow,
)
from textgraph.kg.graph_store import GraphStore, merge_entity_fields, sort_snapshot


class NetworkXGraphStore(GraphStore):
    """
    Process-local graph store.

    Useful for tests and for running without a Neo4j server. State is
    lost when the process exits.
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._index: dict[tuple[str, str], str] = {}
        self._initialized = False

    async def initialize(self) -> None:
        self._initialized = True

    async def cleanup(self) -> None:
        self._initialized = False

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Underlying graph (read-only use)."""
        return self._graph

    def _entity(self, node_id: str) -> StoredEntity:
        return self._graph.nodes[node_id]["entity"].model_copy(deep=True)

    def _relationship(self, source_id: str, target_id: str, relation_type: str) -> StoredRelationship:
        data = self._graph.edges[source_id, target_id, relation_type]
        return data["relationship"].model_copy(deep=True)

    # =========================================================================
    # Entity Operations
    # =========================================================================

    async def upsert_node(self, entity: EntityCandidate) -> StoredEntity:
        key = (entity.label, entity.entity_type)
        now = utcnow()
        node_id = self._index.get(key)

        if node_id is None:
            stored = StoredEntity(
                id=str(uuid4()),
                label=entity.label,
                entity_type=entity.entity_type,
                properties=dict(entity.properties),
                confidence=entity.confidence,
                aliases=list(entity.aliases),
                created_at=now,
                updated_at=now,
            )
            self._graph.add_node(stored.id, entity=stored)
            self._index[key] = stored.id
            return stored.model_copy(deep=True)

        existing = self._graph.nodes[node_id]["entity"]
        confidence, aliases, properties = merge_entity_fields(existing, entity)
        merged = existing.model_copy(
            update={
                "confidence": confidence,
                "aliases": aliases,
                "properties": properties,
                "updated_at": now,
            }
        )
        self._graph.nodes[node_id]["entity"] = merged
        return merged.model_copy(deep=True)

    async def match_node(self, label: str, entity_type: str) -> StoredEntity | None:
        node_id = self._index.get((label, entity_type))
        if node_id is not None:
            return self._entity(node_id)

        wanted = label.casefold()
        alias_hit = None
        for node_id, data in self._graph.nodes(data=True):
            entity: StoredEntity = data["entity"]
            if entity.entity_type != entity_type:
                continue
            if entity.label.casefold() == wanted:
                return self._entity(node_id)
            if alias_hit is None and any(a.casefold() == wanted for a in entity.aliases):
                alias_hit = node_id

        return self._entity(alias_hit) if alias_hit is not None else None

    # =========================================================================
    # Relationship Operations
    # =========================================================================

    async def find_edge(
        self,
        source_id: str,
        target_id: str,
        relation_type: str,
    ) -> StoredRelationship | None:
        relation_type = normalize_type_tag(relation_type)
        if not self._graph.has_edge(source_id, target_id, key=relation_type):
            return None
        return self._relationship(source_id, target_id, relation_type)

    async def create_edge_if_absent(
        self,
        source_id: str,
        target_id: str,
        relation_type: str,
        properties: dict[str, Any],
        confidence: float,
    ) -> tuple[StoredRelationship, bool]:
        relation_type = normalize_type_tag(relation_type)
        existing = await self.find_edge(source_id, target_id, relation_type)
        if existing is not None:
            return existing, False

        if source_id not in self._graph or target_id not in self._graph:
            raise StoreError(
                "Cannot create relationship: endpoint node missing",
                details={"source_id": source_id, "target_id": target_id},
            )

        relationship = StoredRelationship(
            id=str(uuid4()),
            source_id=source_id,
            target_id=target_id,
            source_label=self._graph.nodes[source_id]["entity"].label,
            target_label=self._graph.nodes[target_id]["entity"].label,
            relation_type=relation_type,
            properties=dict(properties),
            confidence=confidence,
            created_at=utcnow(),
        )
        self._graph.add_edge(source_id, target_id, key=relation_type, relationship=relationship)
        return relationship.model_copy(deep=True), True

    # =========================================================================
    # Bulk Operations
    # =========================================================================

    async def delete_all_edges(self) -> int:
        edges = list(self._graph.edges(keys=True))
        self._graph.remove_edges_from(edges)
        return len(edges)

    async def delete_all_nodes(self) -> int:
        if self._graph.number_of_edges():
            raise StoreError("Cannot delete nodes that still have relationships")
        count = self._graph.number_of_nodes()
        self._graph.clear()
        self._index.clear()
        return count

    async def snapshot(self) -> GraphSnapshot:
        entities = [self._entity(n) for n in self._graph.nodes]
        relationships = [
            self._relationship(u, v, k) for u, v, k in self._graph.edges(keys=True)
        ]
        return sort_snapshot(entities, relationships)
