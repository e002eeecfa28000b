"""Shared test helpers for the test suite."""

import threading
from collections.abc import Sequence
from pathlib import Path

from shell_predictor.core.model.resource import ModelHandle
from shell_predictor.core.strategies.types import GenerationBudget


class FakeSession:
    """Generation session replaying a fixed list of token ids."""

    def __init__(self, token_ids: list[int], fail_at: int | None = None) -> None:
        self._token_ids = token_ids
        self._fail_at = fail_at
        self._position = 0
        self.steps = 0

    def is_done(self) -> bool:
        return self._position >= len(self._token_ids)

    def step(self) -> None:
        if self._fail_at is not None and self.steps == self._fail_at:
            raise RuntimeError("inference exploded")
        self._position += 1
        self.steps += 1

    def last_token(self) -> int:
        return self._token_ids[self._position - 1]


class FakeDecoder:
    def __init__(self, pieces: list[str]) -> None:
        self._pieces = pieces

    def decode(self, token: int) -> str:
        return self._pieces[token]


class FakeModelHandle(ModelHandle):
    """Model handle whose generated output is ``pieces`` joined together."""

    def __init__(self, pieces: Sequence[str] = (), *, fail_at: int | None = None, tokenize_error: bool = False) -> None:
        self.pieces = list(pieces)
        self.fail_at = fail_at
        self.tokenize_error = tokenize_error
        self.prompts: list[str] = []
        self.budgets: list[GenerationBudget] = []
        self.sessions: list[FakeSession] = []
        self.closed = False

    def tokenize(self, text: str) -> Sequence[int]:
        if self.tokenize_error:
            raise ValueError("bad prompt")
        self.prompts.append(text)
        return list(range(len(text.split())))

    def start(self, tokens: Sequence[int], budget: GenerationBudget) -> FakeSession:
        self.budgets.append(budget)
        session = FakeSession(list(range(len(self.pieces))), fail_at=self.fail_at)
        self.sessions.append(session)
        return session

    def create_decoder(self) -> FakeDecoder:
        return FakeDecoder(self.pieces)

    def close(self) -> None:
        self.closed = True


class CountingLoader:
    """Model loader that records how many times it was called."""

    def __init__(self, handle: ModelHandle | None = None, error: Exception | None = None, delay: float = 0.0) -> None:
        self.handle = handle or FakeModelHandle()
        self.error = error
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, path: Path) -> ModelHandle:
        with self._lock:
            self.calls += 1
        if self.delay:
            threading.Event().wait(self.delay)
        if self.error is not None:
            raise self.error
        return self.handle
