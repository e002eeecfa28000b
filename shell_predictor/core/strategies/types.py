"""Data types for suggestion strategies."""

from dataclasses import dataclass, field
from enum import Enum

# Named constants for the suggestion limits
MAX_SUGGESTION_LENGTH = 200
MAX_GENERATED_SUGGESTIONS = 3
MIN_GENERATIVE_INPUT_LENGTH = 3
DEFAULT_MAX_TOKENS = 64
DEFAULT_TEMPERATURE = 0.3
DEFAULT_TOP_P = 0.9


class StrategyKind(str, Enum):
    """The closed set of available suggestion strategies."""

    KNOWN_COMMANDS = "known_commands"
    COMPLETER = "completer"
    LOCAL_MODEL = "local_model"


class SuggestionStatus(str, Enum):
    """Outcome of a single suggestion request."""

    OK = "ok"
    UNAVAILABLE = "unavailable"


class UnavailableReason(str, Enum):
    """Why a strategy had nothing to offer."""

    EMPTY_INPUT = "empty_input"
    INPUT_TOO_SHORT = "input_too_short"
    NO_MATCHES = "no_matches"
    MODEL_NOT_READY = "model_not_ready"
    GENERATION_FAILED = "generation_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SuggestionCandidate:
    """One completion to render inline, with an optional tooltip."""

    text: str
    tooltip: str | None = None

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("Suggestion text must not be empty")
        if len(self.text) > MAX_SUGGESTION_LENGTH:
            raise ValueError(f"Suggestion text exceeds {MAX_SUGGESTION_LENGTH} characters")


@dataclass
class SuggestionResult:
    """Result of a strategy call.

    ``suggestions`` is in rendering order; the first entry is the primary
    suggestion. Unavailable results always carry an empty list.
    """

    suggestions: list[SuggestionCandidate] = field(default_factory=list)
    status: SuggestionStatus = SuggestionStatus.OK
    reason: UnavailableReason | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == SuggestionStatus.OK

    @classmethod
    def of(cls, suggestions: list[SuggestionCandidate]) -> "SuggestionResult":
        if not suggestions:
            return cls.unavailable(UnavailableReason.NO_MATCHES)
        return cls(suggestions=list(suggestions))

    @classmethod
    def unavailable(cls, reason: UnavailableReason, detail: str | None = None) -> "SuggestionResult":
        return cls(status=SuggestionStatus.UNAVAILABLE, reason=reason, detail=detail)


@dataclass(frozen=True)
class GenerationBudget:
    """Sampling parameters bounding one generation call."""

    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
