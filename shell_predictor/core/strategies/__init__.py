# Suggestion strategies for shell-predictor

from .base import SuggestionStrategy
from .completer import CompleterStrategy, Completion, CompletionSource, PromptToolkitCompletionSource
from .known_commands import KNOWN_COMMANDS, KnownCommandsStrategy
from .local_model import LocalModelStrategy
from .types import (
    MAX_GENERATED_SUGGESTIONS,
    MAX_SUGGESTION_LENGTH,
    MIN_GENERATIVE_INPUT_LENGTH,
    GenerationBudget,
    StrategyKind,
    SuggestionCandidate,
    SuggestionResult,
    SuggestionStatus,
    UnavailableReason,
)

__all__ = [
    "KNOWN_COMMANDS",
    "MAX_GENERATED_SUGGESTIONS",
    "MAX_SUGGESTION_LENGTH",
    "MIN_GENERATIVE_INPUT_LENGTH",
    "CompleterStrategy",
    "Completion",
    "CompletionSource",
    "GenerationBudget",
    "KnownCommandsStrategy",
    "LocalModelStrategy",
    "PromptToolkitCompletionSource",
    "StrategyKind",
    "SuggestionCandidate",
    "SuggestionResult",
    "SuggestionStatus",
    "SuggestionStrategy",
    "UnavailableReason",
]
