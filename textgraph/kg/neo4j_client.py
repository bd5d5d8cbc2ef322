"""
Neo4j graph store.

Handles:
- Connection management
- Entity upsert as a read-merge-write inside one write transaction
- Edge create-if-absent via MERGE
- Bulk deletion and ordered snapshots

Nodes carry the ``:Entity`` label. Open property maps are stored as a
JSON string (``properties_json``) because Neo4j properties cannot hold
nested maps.
"""

import json
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

from neo4j import AsyncDriver, AsyncGraphDatabase
from neo4j.exceptions import Neo4jError, ServiceUnavailable, SessionExpired

from textgraph.core.exceptions import StoreError, StoreUnavailableError, ValidationError
from textgraph.core.types import (
    EntityCandidate,
    GraphSnapshot,
    StoredEntity,
    StoredRelationship,
    normalize_type_tag,
)
from textgraph.kg.graph_store import GraphStore, merge_entity_fields

_UNAVAILABLE = (ServiceUnavailable, SessionExpired, ConnectionError, OSError)

_ENTITY_RETURN = "e {.*} AS e"
_RELATIONSHIP_RETURN = """
    r {.*} AS r, type(r) AS relation_type,
    a.id AS source_id, a.label AS source_label,
    b.id AS target_id, b.label AS target_label
"""


def _to_native(val: Any) -> Any:
    """Convert Neo4j temporal types to Python ones."""
    if hasattr(val, "to_native"):
        return val.to_native()
    return val


def _load_properties(raw: Any) -> dict[str, Any]:
    if not raw:
        return {}
    if isinstance(raw, dict):
        return raw
    return json.loads(raw)


def _dump_properties(properties: dict[str, Any]) -> str:
    return json.dumps(properties, default=str, sort_keys=True)


def _entity_from_record(node: dict[str, Any]) -> StoredEntity:
    return StoredEntity(
        id=node["id"],
        label=node["label"],
        entity_type=node["entity_type"],
        properties=_load_properties(node.get("properties_json")),
        confidence=node.get("confidence") if node.get("confidence") is not None else 1.0,
        aliases=list(node.get("aliases") or []),
        created_at=_to_native(node.get("created_at")),
        updated_at=_to_native(node.get("updated_at")),
    )


def _relationship_from_record(record: Any) -> StoredRelationship:
    rel = record["r"]
    return StoredRelationship(
        id=rel["id"],
        source_id=record["source_id"],
        target_id=record["target_id"],
        source_label=record["source_label"],
        target_label=record["target_label"],
        relation_type=record["relation_type"],
        properties=_load_properties(rel.get("properties_json")),
        confidence=rel.get("confidence") if rel.get("confidence") is not None else 1.0,
        created_at=_to_native(rel.get("created_at")),
    )


def _relationship_type(relation_type: str) -> str:
    """Validate a type tag before it is interpolated into Cypher."""
    try:
        return normalize_type_tag(relation_type)
    except ValueError as e:
        raise ValidationError(
            f"Invalid relationship type: {relation_type!r}",
            field="relation_type",
            value=relation_type,
            cause=e,
        )


class Neo4jClient(GraphStore):
    """
    Async Neo4j graph store.

    Provides connection pooling and managed write transactions for the
    reconciler's primitives.
    """

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        user: str = "neo4j",
        password: str = "password",
        database: str = "neo4j",
        max_connection_pool_size: int = 50,
    ) -> None:
        """
        Initialize Neo4j client.

        Args:
            uri: Neo4j connection URI
            user: Database username
            password: Database password
            database: Database name
            max_connection_pool_size: Connection pool size
        """
        self.uri = uri
        self.user = user
        self.password = password
        self.database = database
        self.max_connection_pool_size = max_connection_pool_size

        self._driver: AsyncDriver | None = None
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize database connection."""
        if self._initialized:
            return

        try:
            self._driver = AsyncGraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password),
                max_connection_pool_size=self.max_connection_pool_size,
            )

            # Verify connectivity
            await self._driver.verify_connectivity()

        except Exception as e:
            if self._driver is not None:
                await self._driver.close()
                self._driver = None
            raise StoreUnavailableError(
                f"Failed to connect to Neo4j: {e}",
                details={"uri": self.uri},
                cause=e,
            )

        self._initialized = True
        self.logger.info(
            "Neo4j connected",
            uri=self.uri,
            database=self.database,
        )

        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create the identity constraint and lookup indexes."""
        statements = [
            "CREATE CONSTRAINT entity_identity IF NOT EXISTS "
            "FOR (e:Entity) REQUIRE (e.label, e.entity_type) IS UNIQUE",
            "CREATE INDEX entity_id IF NOT EXISTS FOR (e:Entity) ON (e.id)",
            "CREATE INDEX entity_type IF NOT EXISTS FOR (e:Entity) ON (e.entity_type)",
        ]

        async with self.session() as session:
            for statement in statements:
                try:
                    await session.run(statement)
                except Neo4jError as e:
                    # Older servers/editions reject composite constraints
                    self.logger.warning("Schema statement skipped", statement=statement, error=str(e))

    async def cleanup(self) -> None:
        """Close database connection."""
        if self._driver:
            await self._driver.close()
            self._driver = None
        self._initialized = False

    @asynccontextmanager
    async def session(self):
        """Get a database session."""
        if not self._initialized:
            await self.initialize()

        session = self._driver.session(database=self.database)
        try:
            yield session
        finally:
            await session.close()

    def _wrap_error(self, action: str, e: Exception, **details: Any) -> StoreError:
        if isinstance(e, _UNAVAILABLE):
            return StoreUnavailableError(
                f"Neo4j unavailable while trying to {action}: {e}",
                details=details,
                cause=e,
            )
        return StoreError(f"Failed to {action}: {e}", details=details, cause=e)

    # =========================================================================
    # Entity Operations
    # =========================================================================

    @staticmethod
    async def _upsert_node_tx(tx: Any, entity: EntityCandidate, new_id: str) -> StoredEntity:
        # MERGE takes the lock on (label, entity_type); the read-merge-write
        # below runs under it, so concurrent upserts of one entity serialize.
        result = await tx.run(
            f"""
            MERGE (e:Entity {{label: $label, entity_type: $entity_type}})
            ON CREATE SET e.id = $new_id, e.created_at = datetime()
            RETURN {_ENTITY_RETURN}
            """,
            label=entity.label,
            entity_type=entity.entity_type,
            new_id=new_id,
        )
        record = await result.single()
        node = record["e"]

        if node["id"] == new_id:
            confidence = entity.confidence
            aliases = list(entity.aliases)
            properties = dict(entity.properties)
        else:
            confidence, aliases, properties = merge_entity_fields(
                _entity_from_record(node), entity
            )

        result = await tx.run(
            f"""
            MATCH (e:Entity {{id: $id}})
            SET e.confidence = $confidence,
                e.aliases = $aliases,
                e.properties_json = $properties_json,
                e.updated_at = datetime()
            RETURN {_ENTITY_RETURN}
            """,
            id=node["id"],
            confidence=confidence,
            aliases=aliases,
            properties_json=_dump_properties(properties),
        )
        record = await result.single()
        return _entity_from_record(record["e"])

    async def upsert_node(self, entity: EntityCandidate) -> StoredEntity:
        try:
            async with self.session() as session:
                return await session.execute_write(self._upsert_node_tx, entity, str(uuid4()))

        except StoreError:
            raise
        except Exception as e:
            raise self._wrap_error("upsert entity", e, label=entity.label, entity_type=entity.entity_type)

    async def match_node(self, label: str, entity_type: str) -> StoredEntity | None:
        query = f"""
        MATCH (e:Entity {{entity_type: $entity_type}})
        WHERE toLower(e.label) = toLower($label)
           OR any(alias IN coalesce(e.aliases, []) WHERE toLower(alias) = toLower($label))
        RETURN {_ENTITY_RETURN}
        ORDER BY CASE
            WHEN e.label = $label THEN 0
            WHEN toLower(e.label) = toLower($label) THEN 1
            ELSE 2
        END
        LIMIT 1
        """

        try:
            async with self.session() as session:
                result = await session.run(query, label=label, entity_type=entity_type)
                record = await result.single()

                if not record:
                    return None
                return _entity_from_record(record["e"])

        except StoreError:
            raise
        except Exception as e:
            raise self._wrap_error("match entity", e, label=label, entity_type=entity_type)

    # =========================================================================
    # Relationship Operations
    # =========================================================================

    async def find_edge(
        self,
        source_id: str,
        target_id: str,
        relation_type: str,
    ) -> StoredRelationship | None:
        rel_type = _relationship_type(relation_type)
        query = f"""
        MATCH (a:Entity {{id: $source_id}})-[r:{rel_type}]->(b:Entity {{id: $target_id}})
        RETURN {_RELATIONSHIP_RETURN}
        LIMIT 1
        """

        try:
            async with self.session() as session:
                result = await session.run(query, source_id=source_id, target_id=target_id)
                record = await result.single()

                if not record:
                    return None
                return _relationship_from_record(record)

        except StoreError:
            raise
        except Exception as e:
            raise self._wrap_error("find relationship", e, relation_type=rel_type)

    async def create_edge_if_absent(
        self,
        source_id: str,
        target_id: str,
        relation_type: str,
        properties: dict[str, Any],
        confidence: float,
    ) -> tuple[StoredRelationship, bool]:
        rel_type = _relationship_type(relation_type)
        new_id = str(uuid4())
        query = f"""
        MATCH (a:Entity {{id: $source_id}})
        MATCH (b:Entity {{id: $target_id}})
        MERGE (a)-[r:{rel_type}]->(b)
        ON CREATE SET
            r.id = $new_id,
            r.confidence = $confidence,
            r.properties_json = $properties_json,
            r.created_at = datetime()
        RETURN {_RELATIONSHIP_RETURN}
        """

        try:
            async with self.session() as session:
                result = await session.run(
                    query,
                    source_id=source_id,
                    target_id=target_id,
                    new_id=new_id,
                    confidence=confidence,
                    properties_json=_dump_properties(properties),
                )
                record = await result.single()

        except StoreError:
            raise
        except Exception as e:
            raise self._wrap_error("create relationship", e, relation_type=rel_type)

        if not record:
            raise StoreError(
                "Cannot create relationship: endpoint node missing",
                details={"source_id": source_id, "target_id": target_id},
            )

        relationship = _relationship_from_record(record)
        return relationship, relationship.id == new_id

    # =========================================================================
    # Bulk Operations
    # =========================================================================

    async def _delete(self, query: str, action: str) -> int:
        try:
            async with self.session() as session:
                result = await session.run(query)
                record = await result.single()
                return record["deleted"] if record else 0

        except StoreError:
            raise
        except Exception as e:
            raise self._wrap_error(action, e)

    async def delete_all_edges(self) -> int:
        return await self._delete(
            "MATCH ()-[r]->() DELETE r RETURN count(r) AS deleted",
            "delete relationships",
        )

    async def delete_all_nodes(self) -> int:
        return await self._delete(
            "MATCH (n) DELETE n RETURN count(n) AS deleted",
            "delete nodes",
        )

    async def snapshot(self) -> GraphSnapshot:
        entity_query = f"""
        MATCH (e:Entity)
        RETURN {_ENTITY_RETURN}
        ORDER BY coalesce(e.confidence, 1.0) DESC, e.label
        """
        relationship_query = f"""
        MATCH (a:Entity)-[r]->(b:Entity)
        RETURN {_RELATIONSHIP_RETURN}
        ORDER BY coalesce(r.confidence, 1.0) DESC
        """

        try:
            async with self.session() as session:
                result = await session.run(entity_query)
                entity_records = await result.data()
                result = await session.run(relationship_query)
                relationship_records = await result.data()

        except StoreError:
            raise
        except Exception as e:
            raise self._wrap_error("read graph snapshot", e)

        return GraphSnapshot(
            entities=[_entity_from_record(r["e"]) for r in entity_records],
            relationships=[_relationship_from_record(r) for r in relationship_records],
        )
