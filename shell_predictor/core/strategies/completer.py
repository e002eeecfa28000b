"""Suggestions backed by an external completion source."""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from prompt_toolkit.completion import CompleteEvent, Completer
from prompt_toolkit.document import Document

from ..merge import merge
from .base import SuggestionStrategy
from .types import MAX_SUGGESTION_LENGTH, StrategyKind, SuggestionCandidate, SuggestionResult, UnavailableReason

logger = logging.getLogger("shell_predictor.completer")


@dataclass(frozen=True)
class Completion:
    """A raw candidate produced by a completion source."""

    completion_text: str
    tooltip: str | None = None


class CompletionSource(ABC):
    """Abstract base class for external completion sources.

    Implementations are expected to be fast, synchronous and side-effect
    free, and to return candidates already ranked.
    """

    @abstractmethod
    def complete(self, text: str) -> Sequence[Completion]:
        """Return completion candidates for ``text``."""
        pass


class PromptToolkitCompletionSource(CompletionSource):
    """Adapts a prompt_toolkit ``Completer`` into a completion source."""

    def __init__(self, completer: Completer) -> None:
        self.completer = completer

    def complete(self, text: str) -> Sequence[Completion]:
        document = Document(text, cursor_position=len(text))
        event = CompleteEvent(completion_requested=True)
        return [
            Completion(completion_text=c.text, tooltip=c.display_meta_text or None)
            for c in self.completer.get_completions(document, event)
            if c.text
        ]


class CompleterStrategy(SuggestionStrategy):
    """Folds each external completion onto the typed text."""

    kind = StrategyKind.COMPLETER
    id = uuid.UUID("01a1e2c5-fbc1-4cf3-8178-ac2e55232434")
    name = "Completer"
    description = "Suggests commands using an external auto-completer."

    def __init__(self, source: CompletionSource) -> None:
        self.source = source

    def suggest(self, text: str, cancellation: threading.Event | None = None) -> SuggestionResult:
        typed = text.rstrip()
        if not typed:
            return SuggestionResult.unavailable(UnavailableReason.EMPTY_INPUT)

        suggestions: list[SuggestionCandidate] = []
        for completion in self.source.complete(typed):
            merged = merge(typed, completion.completion_text)
            if len(merged) > MAX_SUGGESTION_LENGTH:
                logger.debug("Dropping over-long completion for %r", completion.completion_text)
                continue
            suggestions.append(SuggestionCandidate(merged, completion.tooltip))

        return SuggestionResult.of(suggestions)
