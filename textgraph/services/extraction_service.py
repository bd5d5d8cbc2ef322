"""
Text-to-graph service.

Orchestrates one processing request:
1. Input validation and normalization
2. Optional graph clear
3. Extraction (external first, local fallback)
4. Reconciliation of entities, then relationships
5. Snapshot of the resulting graph
"""

import asyncio
import time
from typing import Any

from textgraph.core.exceptions import (
    RequestCancelledError,
    StoreError,
    StoreUnavailableError,
    ValidationError,
)
from textgraph.core.logging import LoggerMixin, log_operation, request_context
from textgraph.core.types import (
    ExtractionResult,
    ProcessingMethod,
    ProcessingResult,
    ProcessingStatistics,
    casefold_label,
)
from textgraph.extraction.coordinator import ExtractionCoordinator
from textgraph.kg.graph_reconciler import GraphReconciler
from textgraph.kg.normalizer import normalize


class GraphExtractionService(LoggerMixin):
    """
    Service turning free text into persisted graph items.

    Store calls run sequentially in request order. Each entity and edge is
    its own unit of work: a failed item is counted and skipped, while an
    unreachable store aborts the request.
    """

    def __init__(
        self,
        coordinator: ExtractionCoordinator,
        reconciler: GraphReconciler,
        max_input_chars: int = 200_000,
        clear_before_processing: bool = False,
    ) -> None:
        """
        Initialize extraction service.

        Args:
            coordinator: Extraction coordinator
            reconciler: Graph reconciler
            max_input_chars: Longest accepted input
            clear_before_processing: Default for ``process_text(clear_before=None)``
        """
        self.coordinator = coordinator
        self.reconciler = reconciler
        self.max_input_chars = max_input_chars
        self.clear_before_processing = clear_before_processing

    def _validate(self, text: Any) -> str:
        if not isinstance(text, str):
            raise ValidationError("Text must be a string", field="text", value=type(text).__name__)
        if not text.strip():
            raise ValidationError("Text cannot be empty", field="text")
        if len(text) > self.max_input_chars:
            raise ValidationError(
                f"Text exceeds {self.max_input_chars} characters",
                field="text",
                details={"length": len(text)},
            )
        return text

    async def process_text(
        self,
        text: str,
        clear_before: bool | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ProcessingResult:
        """
        Extract entities and relationships from text and persist them.

        Args:
            text: Raw input text
            clear_before: Clear the graph first (None uses the service default)
            cancel_event: Checked before every store call

        Returns:
            ProcessingResult with the full graph snapshot

        Raises:
            ValidationError: Invalid input
            RequestCancelledError: ``cancel_event`` was set mid-request
            StoreUnavailableError: The graph store became unreachable
            StoreError: Clearing or the final snapshot failed
        """
        text = self._validate(text)
        if clear_before is None:
            clear_before = self.clear_before_processing

        start_time = time.perf_counter()
        stats = ProcessingStatistics()

        with request_context(operation="process_text", input_chars=len(text)):
            try:
                normalized = normalize(text)

                if clear_before:
                    self._check_cancelled(cancel_event, stats)
                    await self._run_store(self.reconciler.clear_all(), stats)

                if normalized:
                    extraction = await self.coordinator.extract(normalized)
                else:
                    self.logger.info("Normalized text is empty, skipping extraction")
                    extraction = ExtractionResult(method=ProcessingMethod.LOCAL)

                stats.extracted_entities = len(extraction.entities)
                stats.extracted_relationships = len(extraction.relationships)

                await self._persist(extraction, stats, cancel_event)
                snapshot = await self._run_store(self.reconciler.snapshot(), stats)

            except (RequestCancelledError, StoreError) as e:
                log_operation(
                    "process_text",
                    success=False,
                    duration_ms=(time.perf_counter() - start_time) * 1000,
                    error=type(e).__name__,
                    **stats.model_dump(),
                )
                if isinstance(e, StoreError) and not isinstance(e, StoreUnavailableError):
                    # clear or snapshot failed; item failures never reach here
                    raise StoreError(
                        f"Graph store failed: {e.message}",
                        **self._counts(stats),
                        cause=e,
                    )
                raise

            processing_time_ms = (time.perf_counter() - start_time) * 1000
            log_operation(
                "process_text",
                duration_ms=processing_time_ms,
                processing_method=extraction.method.value,
                **stats.model_dump(),
            )

        return ProcessingResult(
            entities=snapshot.entities,
            relationships=snapshot.relationships,
            processing_method=extraction.method,
            statistics=stats,
            processing_time_ms=processing_time_ms,
        )

    async def _persist(
        self,
        extraction: ExtractionResult,
        stats: ProcessingStatistics,
        cancel_event: asyncio.Event | None,
    ) -> None:
        # Endpoint types come from what this request actually persisted.
        persisted_types: dict[str, str] = {}

        for candidate in extraction.entities:
            self._check_cancelled(cancel_event, stats)
            try:
                stored = await self._run_store(self.reconciler.upsert_entity(candidate), stats)
            except StoreUnavailableError:
                raise
            except StoreError as e:
                stats.failed_entities += 1
                self.logger.warning(
                    "entity_failed",
                    label=candidate.label,
                    entity_type=candidate.entity_type,
                    error=str(e),
                )
                continue

            stats.persisted_entities += 1
            persisted_types.setdefault(candidate.key, stored.entity_type)

        for rel in extraction.relationships:
            source_type = persisted_types.get(casefold_label(rel.source))
            target_type = persisted_types.get(casefold_label(rel.target))
            if source_type is None or target_type is None:
                stats.skipped_relationships += 1
                self.logger.info(
                    "relationship_skipped",
                    reason="endpoint_not_persisted",
                    source=rel.source,
                    target=rel.target,
                    relation_type=rel.relation_type,
                )
                continue

            self._check_cancelled(cancel_event, stats)
            try:
                created = await self._run_store(
                    self.reconciler.create_relationship(
                        source_label=rel.source,
                        target_label=rel.target,
                        source_type=source_type,
                        target_type=target_type,
                        relation_type=rel.relation_type,
                        properties={**rel.properties, "context": rel.context},
                        confidence=rel.confidence,
                    ),
                    stats,
                )
            except StoreUnavailableError:
                raise
            except StoreError as e:
                stats.failed_relationships += 1
                self.logger.warning(
                    "relationship_failed",
                    source=rel.source,
                    target=rel.target,
                    relation_type=rel.relation_type,
                    error=str(e),
                )
                continue

            if created is None:
                stats.skipped_relationships += 1
            else:
                stats.persisted_relationships += 1

    async def _run_store(self, call: Any, stats: ProcessingStatistics) -> Any:
        """Await a store call, attaching progress counts if the store is unreachable."""
        try:
            return await call
        except StoreUnavailableError as e:
            self.logger.error("Graph store unavailable, aborting request", error=str(e))
            raise StoreUnavailableError(
                f"Graph store unavailable: {e.message}",
                **self._counts(stats),
                cause=e,
            )

    @staticmethod
    def _counts(stats: ProcessingStatistics) -> dict[str, int]:
        return {
            "persisted_entities": stats.persisted_entities,
            "persisted_relationships": stats.persisted_relationships,
            "failed_entities": stats.failed_entities,
            "failed_relationships": stats.failed_relationships,
        }

    def _check_cancelled(
        self,
        cancel_event: asyncio.Event | None,
        stats: ProcessingStatistics,
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self.logger.warning("Request cancelled", **self._counts(stats))
            raise RequestCancelledError("Processing request cancelled", **self._counts(stats))

    async def clear_graph(self) -> dict[str, int]:
        """
        Delete every relationship and entity. Safe to call on an empty graph.

        Returns:
            Deleted counts
        """
        with request_context(operation="clear_graph"):
            start_time = time.perf_counter()
            relationships_deleted, entities_deleted = await self.reconciler.clear_all()
            log_operation(
                "clear_graph",
                duration_ms=(time.perf_counter() - start_time) * 1000,
                relationships_deleted=relationships_deleted,
                entities_deleted=entities_deleted,
            )

        return {
            "relationships_deleted": relationships_deleted,
            "entities_deleted": entities_deleted,
        }
