"""Suggestion strategy abstract base class."""

import threading
import uuid
from abc import ABC, abstractmethod

from .types import StrategyKind, SuggestionResult


class SuggestionStrategy(ABC):
    """Abstract base class for suggestion strategies.

    Subclasses declare a stable ``id`` plus a display ``name`` and a one-line
    ``description``; the host uses these for registration and labeling.
    """

    kind: StrategyKind
    id: uuid.UUID
    name: str
    description: str

    @abstractmethod
    def suggest(self, text: str, cancellation: threading.Event | None = None) -> SuggestionResult:
        """Compute suggestions for the partially typed ``text``."""
        pass

    def warm_up(self) -> None:
        """Prepare any lazily held resources. Must not block."""

    def close(self) -> None:
        """Release any resources held by the strategy."""
