"""
Knowledge Graph module for entity extraction and graph persistence.

Components:
- Text normalization
- Pattern-based entity and relationship extraction
- Candidate filtering
- Graph stores (Neo4j, NetworkX) and reconciliation
"""

from textgraph.kg.candidate_filter import CandidateFilter
from textgraph.kg.entity_extractor import PatternEntityExtractor
from textgraph.kg.graph_reconciler import GraphReconciler
from textgraph.kg.graph_store import GraphStore
from textgraph.kg.neo4j_client import Neo4jClient
from textgraph.kg.networkx_store import NetworkXGraphStore
from textgraph.kg.normalizer import normalize
from textgraph.kg.relation_extractor import PatternRelationshipExtractor

__all__ = [
    "CandidateFilter",
    "GraphReconciler",
    "GraphStore",
    "Neo4jClient",
    "NetworkXGraphStore",
    "PatternEntityExtractor",
    "PatternRelationshipExtractor",
    "normalize",
]
