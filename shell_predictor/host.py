"""Host-facing adapter: strategy construction, registration and lifecycle."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from .core.config import Settings, settings
from .core.model.resource import ModelResource
from .core.strategies import (
    CompleterStrategy,
    CompletionSource,
    GenerationBudget,
    KnownCommandsStrategy,
    LocalModelStrategy,
    PromptToolkitCompletionSource,
    StrategyKind,
    SuggestionCandidate,
    SuggestionStrategy,
)

logger = logging.getLogger("shell_predictor.host")


@dataclass(frozen=True)
class ClientInfo:
    """Identifies the host asking for suggestions."""

    name: str
    kind: str = "terminal"


class StrategyRegistry:
    """In-memory registry of strategies keyed by their identifier."""

    def __init__(self) -> None:
        self._strategies: dict[uuid.UUID, SuggestionStrategy] = {}

    def register(self, strategy: SuggestionStrategy) -> None:
        if strategy.id in self._strategies:
            raise ValueError(f"Strategy already registered: {strategy.id}")
        self._strategies[strategy.id] = strategy

    def unregister(self, strategy_id: uuid.UUID) -> SuggestionStrategy | None:
        return self._strategies.pop(strategy_id, None)

    def get(self, strategy_id: uuid.UUID) -> SuggestionStrategy | None:
        return self._strategies.get(strategy_id)

    def list_ids(self) -> list[uuid.UUID]:
        return list(self._strategies)


def create_strategy(
    kind: StrategyKind | str,
    config: Settings | None = None,
    *,
    completion_source: CompletionSource | None = None,
    model_resource: ModelResource | None = None,
) -> SuggestionStrategy:
    """Build the strategy for ``kind`` from configuration."""
    config = config or settings
    kind = StrategyKind(kind)

    if kind == StrategyKind.KNOWN_COMMANDS:
        return KnownCommandsStrategy()
    elif kind == StrategyKind.COMPLETER:
        if completion_source is None:
            from .completer import CommandCompleter

            completion_source = PromptToolkitCompletionSource(CommandCompleter())
        return CompleterStrategy(completion_source)
    elif kind == StrategyKind.LOCAL_MODEL:
        resource = model_resource or ModelResource(config.model_dir)
        budget = GenerationBudget(max_tokens=config.max_tokens, temperature=config.temperature, top_p=config.top_p)
        return LocalModelStrategy(
            resource,
            budget,
            min_input_length=config.min_input_length,
            max_suggestions=config.max_suggestions,
        )
    else:
        raise ValueError(f"Unsupported strategy: {kind}")


class PredictorHost:
    """Registers strategies on load and answers suggestion requests.

    The first configured strategy is the active one. Every failure is turned
    into an empty suggestion list; nothing raised by a strategy reaches the
    caller of ``get_suggestion``.
    """

    def __init__(
        self,
        config: Settings | None = None,
        *,
        kinds: Sequence[StrategyKind | str] | None = None,
        registry: StrategyRegistry | None = None,
        completion_source: CompletionSource | None = None,
        model_resource: ModelResource | None = None,
    ) -> None:
        self.config = config or settings
        self.kinds = [StrategyKind(k) for k in (kinds or [self.config.strategy])]
        self.registry = registry or StrategyRegistry()
        self._completion_source = completion_source
        self._model_resource = model_resource
        self._identifiers: list[uuid.UUID] = []

    @property
    def identifiers(self) -> list[uuid.UUID]:
        return list(self._identifiers)

    @property
    def active(self) -> SuggestionStrategy | None:
        if not self._identifiers:
            return None
        return self.registry.get(self._identifiers[0])

    def on_load(self) -> None:
        """Build and register each configured strategy."""
        for kind in self.kinds:
            strategy = create_strategy(
                kind,
                self.config,
                completion_source=self._completion_source,
                model_resource=self._model_resource,
            )
            self.registry.register(strategy)
            self._identifiers.append(strategy.id)
            strategy.warm_up()
            logger.info("Registered strategy %s (%s)", strategy.name, strategy.id)

    def on_unload(self) -> None:
        """Unregister every strategy registered by this host and release its resources."""
        for strategy_id in self._identifiers:
            strategy = self.registry.unregister(strategy_id)
            if strategy is None:
                continue
            try:
                strategy.close()
            except Exception as e:
                logger.exception("Error closing strategy %s: %s", strategy.name, e)
        self._identifiers.clear()

    def get_suggestion(
        self,
        client: ClientInfo | None,
        text: str,
        cancellation: threading.Event | None = None,
    ) -> list[SuggestionCandidate]:
        """Return suggestions from the active strategy, or an empty list."""
        strategy = self.active
        if strategy is None:
            return []

        try:
            result = strategy.suggest(text, cancellation)
        except Exception as e:
            logger.exception("Strategy %s failed: %s", strategy.name, e)
            return []

        if not result.ok:
            logger.debug(
                "No suggestion from %s for client=%s: %s",
                strategy.name,
                client.name if client else None,
                result.reason.value if result.reason else None,
            )
            return []
        return result.suggestions
