"""Command suggestions generated by a local language model."""

import logging
import threading
import uuid

from ..model.resource import ModelHandle, ModelResource, ModelState
from .base import SuggestionStrategy
from .types import (
    MAX_GENERATED_SUGGESTIONS,
    MAX_SUGGESTION_LENGTH,
    MIN_GENERATIVE_INPUT_LENGTH,
    GenerationBudget,
    StrategyKind,
    SuggestionCandidate,
    SuggestionResult,
    UnavailableReason,
)

logger = logging.getLogger("shell_predictor.local_model")

SYSTEM_PROMPT = (
    "You are a shell command completion assistant. Given a partial command, "
    "suggest the most likely completions.\n"
    "Output only the completed command(s), one per line. Do not include explanations."
)
USER_PROMPT_PREFIX = "Complete this command: "

# Phi-3 chat turn delimiters
SYSTEM_MARKER = "<|system|>"
USER_MARKER = "<|user|>"
ASSISTANT_MARKER = "<|assistant|>"
END_MARKER = "<|end|>"

_ECHO_FRAGMENTS = (USER_PROMPT_PREFIX.strip(), "command completion assistant", "Output only the completed")


def build_prompt(text: str) -> str:
    """Build the chat prompt asking the model to complete ``text``."""
    return (
        f"{SYSTEM_MARKER}\n{SYSTEM_PROMPT}\n{END_MARKER}\n"
        f"{USER_MARKER}\n{USER_PROMPT_PREFIX}{text}\n{END_MARKER}\n"
        f"{ASSISTANT_MARKER}"
    )


def is_protocol_line(line: str) -> bool:
    """True for chat turn delimiters and other special-token lines."""
    return line.startswith("<|")


def is_instruction_echo(line: str) -> bool:
    """True when the model repeats part of the prompt instead of answering."""
    return any(fragment in line for fragment in _ECHO_FRAGMENTS)


def is_within_length_bound(line: str) -> bool:
    return 0 < len(line) <= MAX_SUGGESTION_LENGTH


def parse_suggestions(output: str, limit: int = MAX_GENERATED_SUGGESTIONS) -> list[SuggestionCandidate]:
    """Extract up to ``limit`` suggestions, one per line, from generated text."""
    suggestions: list[SuggestionCandidate] = []
    for raw in output.splitlines():
        line = raw.strip()
        if not line or is_protocol_line(line) or is_instruction_echo(line):
            continue
        if not is_within_length_bound(line):
            continue
        suggestions.append(SuggestionCandidate(line))
        if len(suggestions) >= limit:
            break
    return suggestions


class GenerationCancelled(Exception):
    """Raised when the caller cancels a request mid-generation."""


class LocalModelStrategy(SuggestionStrategy):
    """Suggests full commands using a local Phi-3 model."""

    kind = StrategyKind.LOCAL_MODEL
    id = uuid.UUID("a3f8e2c7-9b41-4df3-b178-ac2e55232999")
    name = "Local AI"
    description = "Suggests commands using a local language model (Phi-3)."

    def __init__(
        self,
        resource: ModelResource,
        budget: GenerationBudget | None = None,
        *,
        min_input_length: int = MIN_GENERATIVE_INPUT_LENGTH,
        max_suggestions: int = MAX_GENERATED_SUGGESTIONS,
    ) -> None:
        self.resource = resource
        self.budget = budget or GenerationBudget()
        self.min_input_length = min_input_length
        self.max_suggestions = min(max_suggestions, MAX_GENERATED_SUGGESTIONS)

    def warm_up(self) -> None:
        self.resource.load_in_background()

    def close(self) -> None:
        self.resource.release()

    def _generate(self, handle: ModelHandle, prompt: str, cancellation: threading.Event | None) -> str:
        tokens = handle.tokenize(prompt)
        session = handle.start(tokens, self.budget)
        decoder = handle.create_decoder()

        output: list[str] = []
        generated = 0
        while not session.is_done() and generated < self.budget.max_tokens:
            if cancellation is not None and cancellation.is_set():
                raise GenerationCancelled()
            session.step()
            output.append(decoder.decode(session.last_token()))
            generated += 1

        return "".join(output)

    def suggest(self, text: str, cancellation: threading.Event | None = None) -> SuggestionResult:
        typed = text.strip()
        if len(typed) < self.min_input_length:
            return SuggestionResult.unavailable(UnavailableReason.INPUT_TOO_SHORT)

        if self.resource.state == ModelState.UNINITIALIZED:
            self.resource.load_in_background()

        with self.resource.acquire() as handle:
            if handle is None:
                return SuggestionResult.unavailable(UnavailableReason.MODEL_NOT_READY, self.resource.state.value)

            try:
                output = self._generate(handle, build_prompt(typed), cancellation)
            except GenerationCancelled:
                logger.debug("Generation cancelled for %r", typed)
                return SuggestionResult.unavailable(UnavailableReason.CANCELLED)
            except Exception as e:
                logger.warning("Local model generation failed: %s", e)
                return SuggestionResult.unavailable(UnavailableReason.GENERATION_FAILED, str(e))

        return SuggestionResult.of(parse_suggestions(output, self.max_suggestions))
