"""
Tests for the in-memory NetworkX graph store.
"""

import pytest

from textgraph.core.exceptions import StoreError
from textgraph.core.types import EntityCandidate
from textgraph.kg.graph_store import merge_entity_fields
from textgraph.kg.networkx_store import NetworkXGraphStore


class TestMergeEntityFields:
    async def test_rules(self, store):
        existing = await store.upsert_node(
            EntityCandidate(label="Apple", entity_type="COMPANY", confidence=0.7,
                            aliases=["AAPL"], properties={"a": 1})
        )
        incoming = EntityCandidate(label="Apple", entity_type="COMPANY", confidence=0.9,
                                   aliases=["Apple Inc"], properties={"a": 2, "b": 3})
        assert merge_entity_fields(existing, incoming) == (0.9, ["AAPL", "Apple Inc"], {"a": 2, "b": 3})


class TestNetworkXGraphStore:
    async def test_context_manager(self):
        async with NetworkXGraphStore() as store:
            assert store._initialized is True
        assert store._initialized is False

    async def test_one_edge_per_triple(self, store):
        a = await store.upsert_node(EntityCandidate(label="A1", entity_type="PERSON"))
        b = await store.upsert_node(EntityCandidate(label="B1", entity_type="PERSON"))

        first, created_first = await store.create_edge_if_absent(a.id, b.id, "KNOWS", {}, 0.8)
        second, created_second = await store.create_edge_if_absent(a.id, b.id, "KNOWS", {}, 0.9)

        assert created_first is True
        assert created_second is False
        assert second.id == first.id
        assert store.graph.number_of_edges() == 1

    async def test_find_edge(self, store):
        a = await store.upsert_node(EntityCandidate(label="A1", entity_type="PERSON"))
        b = await store.upsert_node(EntityCandidate(label="B1", entity_type="PERSON"))
        assert await store.find_edge(a.id, b.id, "KNOWS") is None

        await store.create_edge_if_absent(a.id, b.id, "KNOWS", {}, 0.8)
        assert (await store.find_edge(a.id, b.id, "knows")).relation_type == "KNOWS"
        assert await store.find_edge(b.id, a.id, "KNOWS") is None

    async def test_edge_to_missing_node(self, store):
        a = await store.upsert_node(EntityCandidate(label="A1", entity_type="PERSON"))
        with pytest.raises(StoreError, match="endpoint node missing"):
            await store.create_edge_if_absent(a.id, "nope", "KNOWS", {}, 0.8)

    async def test_match_node_exact_label_preferred(self, store):
        await store.upsert_node(EntityCandidate(label="Robert", entity_type="PERSON", aliases=["Bob"]))
        bob = await store.upsert_node(EntityCandidate(label="Bob", entity_type="PERSON"))

        matched = await store.match_node("bob", "PERSON")
        assert matched.id == bob.id

    async def test_match_node_respects_type(self, store):
        await store.upsert_node(EntityCandidate(label="Apple", entity_type="COMPANY"))
        assert await store.match_node("Apple", "FOOD") is None

    async def test_returned_models_are_copies(self, store):
        entity = await store.upsert_node(EntityCandidate(label="Apple", entity_type="COMPANY"))
        entity.aliases.append("mutated")
        again = await store.match_node("Apple", "COMPANY")
        assert again.aliases == []

    async def test_delete_nodes_requires_no_edges(self, store):
        a = await store.upsert_node(EntityCandidate(label="A1", entity_type="PERSON"))
        b = await store.upsert_node(EntityCandidate(label="B1", entity_type="PERSON"))
        await store.create_edge_if_absent(a.id, b.id, "KNOWS", {}, 0.8)

        with pytest.raises(StoreError):
            await store.delete_all_nodes()

        assert await store.delete_all_edges() == 1
        assert await store.delete_all_nodes() == 2
        assert await store.match_node("A1", "PERSON") is None
