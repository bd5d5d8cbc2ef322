"""
Reconciliation of extracted candidates against the persisted graph.

Entities are identified by exact (label, entity_type); relationships by
(source node, type, target node). Relationship endpoints are resolved
against the store, including alias membership, so a relationship never
creates a node.
"""

from typing import Any

from textgraph.core.logging import LoggerMixin
from textgraph.core.types import (
    EntityCandidate,
    GraphSnapshot,
    StoredEntity,
    StoredRelationship,
    casefold_label,
    normalize_type_tag,
)
from textgraph.kg.graph_store import GraphStore


class GraphReconciler(LoggerMixin):
    """
    Upserts candidates into a ``GraphStore``.

    Args:
        store: Graph store backend
        default_relationship_confidence: Confidence for relationships
            created without one
    """

    def __init__(
        self,
        store: GraphStore,
        default_relationship_confidence: float = 0.8,
    ) -> None:
        self.store = store
        self.default_relationship_confidence = default_relationship_confidence

    async def upsert_entity(self, candidate: EntityCandidate) -> StoredEntity:
        """
        Create the entity, or merge it into the existing (label, type) node.

        Merging keeps the higher confidence, unions aliases and shallow-merges
        properties with incoming values winning.
        """
        entity = await self.store.upsert_node(candidate)
        self.logger.debug(
            "Entity upserted",
            entity_id=entity.id,
            label=entity.label,
            entity_type=entity.entity_type,
            confidence=entity.confidence,
        )
        return entity

    async def create_relationship(
        self,
        source_label: str,
        target_label: str,
        source_type: str,
        target_type: str,
        relation_type: str,
        properties: dict[str, Any] | None = None,
        confidence: float | None = None,
    ) -> StoredRelationship | None:
        """
        Create a relationship between two existing entities.

        Returns:
            The new edge, the already existing edge (unchanged), or None when
            the relationship is a self-loop or an endpoint cannot be resolved
        """
        relation_type = normalize_type_tag(relation_type)

        if casefold_label(source_label) == casefold_label(target_label):
            self.logger.info(
                "relationship_skipped",
                reason="self_loop",
                source=source_label,
                target=target_label,
                relation_type=relation_type,
            )
            return None

        source = await self.store.match_node(source_label, normalize_type_tag(source_type))
        target = await self.store.match_node(target_label, normalize_type_tag(target_type))

        if source is None or target is None:
            self.logger.info(
                "relationship_skipped",
                reason="endpoint_not_found",
                source=source_label,
                source_found=source is not None,
                target=target_label,
                target_found=target is not None,
                relation_type=relation_type,
            )
            return None

        if source.id == target.id:
            self.logger.info(
                "relationship_skipped",
                reason="same_node",
                source=source_label,
                target=target_label,
                relation_type=relation_type,
            )
            return None

        relationship, created = await self.store.create_edge_if_absent(
            source.id,
            target.id,
            relation_type,
            properties or {},
            confidence if confidence is not None else self.default_relationship_confidence,
        )

        self.logger.debug(
            "Relationship created" if created else "Relationship already exists",
            relationship_id=relationship.id,
            triple=f"{source.label} -[{relation_type}]-> {target.label}",
        )
        return relationship

    async def clear_all(self) -> tuple[int, int]:
        """
        Delete all relationships, then all nodes.

        Returns:
            (relationships_deleted, entities_deleted)
        """
        edges = await self.store.delete_all_edges()
        nodes = await self.store.delete_all_nodes()
        self.logger.info("Graph cleared", relationships_deleted=edges, entities_deleted=nodes)
        return edges, nodes

    async def snapshot(self) -> GraphSnapshot:
        """Full graph, entities by confidence then label, relationships by confidence."""
        return await self.store.snapshot()
