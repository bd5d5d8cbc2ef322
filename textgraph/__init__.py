"""
textgraph: text to knowledge graph extraction.

Turns unstructured text into a typed graph of entities and relationships:
- Rule-based entity and relationship extraction
- Generative-model extraction with local fallback
- Idempotent graph reconciliation (Neo4j or in-memory NetworkX)
"""

__version__ = "1.0.0"
__author__ = "textgraph Team"
