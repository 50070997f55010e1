# ABOUTME: Workflow controller: the state machine sequencing search, selection, confirmation, and generation.
# ABOUTME: Holds the record under review between steps and refuses out-of-order operations.

import logging
from collections.abc import Callable
from dataclasses import replace
from enum import Enum

from bookdrop.core.pipeline import GenerationResult
from bookdrop.metadata.resolver import ResolutionEngine
from bookdrop.metadata.types import Ambiguous, BookRecord, Found, NotFound, ResolutionOutcome

logger = logging.getLogger(__name__)


class WorkflowState(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    CONFIRMING = "confirming"
    SELECTING = "selecting"
    MANUAL_FALLBACK = "manual_fallback"
    GENERATING = "generating"


_TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.IDLE: frozenset({WorkflowState.RESOLVING, WorkflowState.CONFIRMING}),
    WorkflowState.RESOLVING: frozenset({
        WorkflowState.CONFIRMING,
        WorkflowState.SELECTING,
        WorkflowState.MANUAL_FALLBACK,
        WorkflowState.IDLE,
    }),
    WorkflowState.SELECTING: frozenset({
        WorkflowState.CONFIRMING,
        WorkflowState.RESOLVING,
        WorkflowState.IDLE,
    }),
    WorkflowState.MANUAL_FALLBACK: frozenset({WorkflowState.RESOLVING, WorkflowState.IDLE}),
    WorkflowState.CONFIRMING: frozenset({
        WorkflowState.GENERATING,
        WorkflowState.RESOLVING,
        WorkflowState.IDLE,
    }),
    WorkflowState.GENERATING: frozenset({WorkflowState.IDLE}),
}


class InvalidTransition(Exception):
    """Raised when an operation is not allowed in the current state."""

    def __init__(self, current: WorkflowState, target: WorkflowState) -> None:
        super().__init__(f"Cannot move from {current.value} to {target.value}")
        self.current = current
        self.target = target


class Workflow:
    """One user's path from a search to a generated EPUB.

    Searches land in CONFIRMING (one record), SELECTING (several candidates),
    or MANUAL_FALLBACK (nothing found). Confirmation packages the held record
    and always returns to IDLE, also when packaging fails.
    """

    def __init__(
        self,
        engine: ResolutionEngine,
        generate: Callable[[BookRecord], GenerationResult],
    ) -> None:
        self._engine = engine
        self._generate = generate
        self._state = WorkflowState.IDLE
        self._record: BookRecord | None = None
        self._candidates: tuple[BookRecord, ...] = ()
        self._fallback_isbn = ""

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def record(self) -> BookRecord | None:
        """The record awaiting confirmation, if any."""
        return self._record

    @property
    def candidates(self) -> tuple[BookRecord, ...]:
        return self._candidates

    @property
    def fallback_isbn(self) -> str:
        """The ISBN that found nothing, carried into the manual search."""
        return self._fallback_isbn

    def search_isbn(self, isbn: str) -> ResolutionOutcome:
        outcome = self._resolve(lambda: self._engine.resolve_isbn(isbn))
        self._fallback_isbn = isbn if isinstance(outcome, NotFound) else ""
        return outcome

    def search_manual(self, title: str, author: str) -> ResolutionOutcome:
        return self._resolve(lambda: self._engine.resolve_title_author(title, author))

    def search_cover(self, image_data: str) -> ResolutionOutcome:
        return self._resolve(lambda: self._engine.resolve_cover(image_data))

    def select(self, index: int) -> BookRecord:
        """Pick one of the candidates (zero-based) for confirmation."""
        if self._state is not WorkflowState.SELECTING:
            raise InvalidTransition(self._state, WorkflowState.CONFIRMING)
        if not 0 <= index < len(self._candidates):
            raise IndexError(f"No candidate at position {index + 1}")

        record = self._candidates[index]
        self._move(WorkflowState.CONFIRMING)
        self._record = record
        self._candidates = ()
        return record

    def load(self, record: BookRecord) -> BookRecord:
        """Hold an externally supplied record (e.g. edited by a client) for confirmation."""
        self._move(WorkflowState.CONFIRMING)
        self._record = record.with_placeholders()
        return self._record

    def edit(
        self,
        *,
        title: str | None = None,
        author: str | None = None,
        subtitle: str | None = None,
        isbn: str | None = None,
    ) -> BookRecord:
        """Override free-text fields of the held record. None leaves a field as is."""
        if self._state is not WorkflowState.CONFIRMING or self._record is None:
            raise InvalidTransition(self._state, WorkflowState.CONFIRMING)

        overrides = {
            name: value.strip()
            for name, value in (
                ("title", title),
                ("author", author),
                ("subtitle", subtitle),
                ("isbn", isbn),
            )
            if value is not None
        }
        self._record = replace(self._record, **overrides).with_placeholders()
        return self._record

    def confirm(self) -> GenerationResult:
        """Package the held record.

        Raises:
            EpubWriteError: If packaging fails; the workflow is back in IDLE.
        """
        if self._record is None:
            raise InvalidTransition(self._state, WorkflowState.GENERATING)

        record = self._record
        self._move(WorkflowState.GENERATING)
        try:
            result = self._generate(record)
        finally:
            self.reset()
        return result

    def reset(self) -> None:
        if self._state is not WorkflowState.IDLE:
            self._move(WorkflowState.IDLE)
        self._record = None
        self._candidates = ()
        self._fallback_isbn = ""

    def _resolve(self, run: Callable[[], ResolutionOutcome]) -> ResolutionOutcome:
        self._move(WorkflowState.RESOLVING)
        self._record = None
        self._candidates = ()
        try:
            outcome = run()
        except Exception:
            self.reset()
            raise

        if isinstance(outcome, Found):
            self._record = outcome.record
            self._move(WorkflowState.CONFIRMING)
        elif isinstance(outcome, Ambiguous):
            self._candidates = outcome.candidates
            self._move(WorkflowState.SELECTING)
        else:
            self._move(WorkflowState.MANUAL_FALLBACK)
        return outcome

    def _move(self, target: WorkflowState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise InvalidTransition(self._state, target)
        logger.debug("Workflow %s -> %s", self._state.value, target.value)
        self._state = target
