"""
Core data types and models for the textgraph system.

Uses Pydantic models for validation, serialization, and documentation.
Entity and relationship type tags are an open enumeration: the enums
below list the known tags, but any upper snake case tag is accepted.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field, field_validator


_TYPE_TAG_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def normalize_type_tag(value: Any) -> str:
    """
    Normalize a type tag to upper snake case.

    ``"founded by"`` and ``"Founded-By"`` both become ``"FOUNDED_BY"``.

    Raises:
        ValueError: If the tag is empty or cannot form a valid tag
    """
    if isinstance(value, Enum):
        value = value.value
    tag = re.sub(r"[^A-Za-z0-9]+", "_", str(value).strip()).strip("_").upper()
    if not _TYPE_TAG_PATTERN.match(tag):
        raise ValueError(f"Invalid type tag: {value!r}")
    return tag


def casefold_label(label: str) -> str:
    """In-memory identity of a label: trimmed and case-folded."""
    return label.strip().casefold()


# =============================================================================
# Enums
# =============================================================================


class EntityType(str, Enum):
    """Known entity type tags."""

    PERSON = "PERSON"
    ORGANIZATION = "ORGANIZATION"
    COMPANY = "COMPANY"
    LOCATION = "LOCATION"
    EVENT = "EVENT"
    PRODUCT = "PRODUCT"
    TECHNOLOGY = "TECHNOLOGY"
    CONCEPT = "CONCEPT"
    DATE = "DATE"
    MONEY = "MONEY"
    PERCENTAGE = "PERCENTAGE"
    FOOD = "FOOD"
    ANIMAL = "ANIMAL"
    OBJECT = "OBJECT"
    VEHICLE = "VEHICLE"
    BUILDING = "BUILDING"
    BOOK = "BOOK"
    MOVIE = "MOVIE"
    SONG = "SONG"
    PROFESSION = "PROFESSION"
    ATTRIBUTE = "ATTRIBUTE"
    ACTION = "ACTION"
    BRAND = "BRAND"


class RelationType(str, Enum):
    """Known relationship type tags."""

    FOUNDED_BY = "FOUNDED_BY"
    OWNS = "OWNS"
    IS_A = "IS_A"
    HAS = "HAS"
    HAS_ATTRIBUTE = "HAS_ATTRIBUTE"
    WORKS_AT = "WORKS_AT"
    CEO_OF = "CEO_OF"
    LIVES_IN = "LIVES_IN"
    BORN_IN = "BORN_IN"
    STUDIED_AT = "STUDIED_AT"
    KNOWS = "KNOWS"
    FRIENDS_WITH = "FRIENDS_WITH"
    CLASSMATES_WITH = "CLASSMATES_WITH"
    COLLEAGUES_WITH = "COLLEAGUES_WITH"
    FAMILY_OF = "FAMILY_OF"
    PARENT_OF = "PARENT_OF"
    CHILD_OF = "CHILD_OF"
    SIBLING_OF = "SIBLING_OF"
    MARRIED_TO = "MARRIED_TO"
    USES = "USES"
    LIKES = "LIKES"
    LOVES = "LOVES"
    HATES = "HATES"
    EATS = "EATS"
    DRINKS = "DRINKS"
    READS = "READS"
    WRITES = "WRITES"
    PLAYS = "PLAYS"
    DRIVES = "DRIVES"
    TEACHES = "TEACHES"
    STUDIES = "STUDIES"
    LEARNS = "LEARNS"
    CREATES = "CREATES"
    DESTROYS = "DESTROYS"
    VISITS = "VISITS"
    TRAVELS_TO = "TRAVELS_TO"
    WORKS_WITH = "WORKS_WITH"
    COLLABORATES_WITH = "COLLABORATES_WITH"
    COMPETES_WITH = "COMPETES_WITH"
    HELPS = "HELPS"
    SUPPORTS = "SUPPORTS"
    OPPOSES = "OPPOSES"
    LEADS = "LEADS"
    FOLLOWS = "FOLLOWS"
    MANAGES = "MANAGES"
    REPORTS_TO = "REPORTS_TO"


class ProcessingMethod(str, Enum):
    """Which extraction strategy produced a result."""

    EXTERNAL = "external"
    LOCAL = "local"


# =============================================================================
# Candidates (request-scoped)
# =============================================================================


class EntityCandidate(BaseModel):
    """An entity mention extracted from text, not yet persisted."""

    label: str = Field(description="Label as found in text")
    entity_type: str = Field(description="Entity type tag")
    properties: dict[str, Any] = Field(default_factory=dict, description="Open property map")
    confidence: float = Field(default=0.8, ge=0, le=1, description="Extraction confidence")
    aliases: list[str] = Field(default_factory=list, description="Alternative labels")

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        """Ensure label is not empty."""
        if not v or not v.strip():
            raise ValueError("Entity label cannot be empty")
        return v.strip()

    @field_validator("entity_type", mode="before")
    @classmethod
    def validate_entity_type(cls, v: Any) -> str:
        return normalize_type_tag(v)

    @field_validator("aliases")
    @classmethod
    def dedupe_aliases(cls, v: list[str]) -> list[str]:
        """Drop blank aliases and repeats, keeping first-seen order."""
        return list(dict.fromkeys(a.strip() for a in v if a and a.strip()))

    @property
    def key(self) -> str:
        """Type-agnostic dedup key."""
        return casefold_label(self.label)


class RelationshipCandidate(BaseModel):
    """A directed relationship between two extracted labels, not yet persisted."""

    source: str = Field(description="Source entity label")
    target: str = Field(description="Target entity label")
    relation_type: str = Field(description="Relationship type tag")
    properties: dict[str, Any] = Field(default_factory=dict, description="Open property map")
    confidence: float = Field(default=0.8, ge=0, le=1, description="Extraction confidence")
    context: str = Field(default="", description="Provenance snippet")

    @field_validator("source", "target")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Relationship endpoint cannot be empty")
        return v.strip()

    @field_validator("relation_type", mode="before")
    @classmethod
    def validate_relation_type(cls, v: Any) -> str:
        return normalize_type_tag(v)

    @property
    def is_self_loop(self) -> bool:
        return casefold_label(self.source) == casefold_label(self.target)

    @property
    def as_triple(self) -> tuple[str, str, str]:
        """Return as (source, relation, target) triple."""
        return (self.source, self.relation_type, self.target)


class ExtractionResult(BaseModel):
    """Candidates produced by one extraction strategy."""

    entities: list[EntityCandidate] = Field(default_factory=list)
    relationships: list[RelationshipCandidate] = Field(default_factory=list)
    method: ProcessingMethod = Field(description="Strategy that produced the result")

    @property
    def is_empty(self) -> bool:
        return not self.entities and not self.relationships


class Unavailable(BaseModel):
    """Tagged "no result" variant returned by a strategy that could not run."""

    reason: str = Field(description="Why no result is available")


# =============================================================================
# Persisted graph items
# =============================================================================


class StoredEntity(BaseModel):
    """An entity node as held by the graph store."""

    id: str = Field(description="Store-assigned id")
    label: str
    entity_type: str
    properties: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=1.0, ge=0, le=1)
    aliases: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def identity(self) -> tuple[str, str]:
        """Persisted identity (label, type)."""
        return (self.label, self.entity_type)


class StoredRelationship(BaseModel):
    """A directed, typed edge as held by the graph store."""

    id: str = Field(description="Store-assigned id")
    source_id: str
    target_id: str
    source_label: str | None = None
    target_label: str | None = None
    relation_type: str
    properties: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=1.0, ge=0, le=1)
    created_at: datetime | None = None

    @property
    def as_triple(self) -> tuple[str, str, str]:
        """Persisted identity (source id, type, target id)."""
        return (self.source_id, self.relation_type, self.target_id)


class GraphSnapshot(BaseModel):
    """Full read of the graph."""

    entities: list[StoredEntity] = Field(default_factory=list)
    relationships: list[StoredRelationship] = Field(default_factory=list)


# =============================================================================
# Processing results
# =============================================================================


class ProcessingStatistics(BaseModel):
    """Per-request counts."""

    extracted_entities: int = 0
    extracted_relationships: int = 0
    persisted_entities: int = 0
    persisted_relationships: int = 0
    failed_entities: int = 0
    failed_relationships: int = 0
    skipped_relationships: int = 0


class ProcessingResult(BaseModel):
    """Response for one processing request."""

    entities: list[StoredEntity] = Field(description="Full entity snapshot")
    relationships: list[StoredRelationship] = Field(description="Full relationship snapshot")
    processing_method: ProcessingMethod
    statistics: ProcessingStatistics = Field(default_factory=ProcessingStatistics)
    processing_time_ms: float = 0.0

    @computed_field
    @property
    def entity_count(self) -> int:
        """Entities persisted by this request."""
        return self.statistics.persisted_entities

    @computed_field
    @property
    def relationship_count(self) -> int:
        """Relationships persisted by this request."""
        return self.statistics.persisted_relationships
