"""Lazy, one-time, thread-safe ownership of the local inference model."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..strategies.types import GenerationBudget

logger = logging.getLogger("shell_predictor.model")

MODEL_DOWNLOAD_URL = "https://huggingface.co/microsoft/Phi-3-mini-4k-instruct-onnx"


class ModelState(str, Enum):
    """Lifecycle state of the model resource."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class ModelLoadError(Exception):
    """Raised when the model artifact is missing or cannot be loaded."""


class GenerationSession(Protocol):
    """One generation run over an appended prompt."""

    def is_done(self) -> bool: ...

    def step(self) -> None: ...

    def last_token(self) -> int: ...


class TokenDecoder(Protocol):
    def decode(self, token: int) -> str: ...


class ModelHandle(ABC):
    """A loaded model plus tokenizer, as seen by the generative strategy."""

    @abstractmethod
    def tokenize(self, text: str) -> Sequence[int]:
        pass

    @abstractmethod
    def start(self, tokens: Sequence[int], budget: GenerationBudget) -> GenerationSession:
        pass

    @abstractmethod
    def create_decoder(self) -> TokenDecoder:
        """Return an incremental decoder; it keeps state across multi-token characters."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass


ModelLoader = Callable[[Path], ModelHandle]


def _default_loader(path: Path) -> ModelHandle:
    from .runtime import load_onnx_model

    return load_onnx_model(path)


class ModelResource:
    """Owns the model handle and its Uninitialized/Ready/Failed lifecycle.

    Loading happens at most once per resource; a failed load is terminal
    until ``release`` resets the resource. ``release`` waits for in-flight
    ``acquire`` blocks to finish before closing the handle, and background
    loads requested before or during a release are dropped.
    """

    def __init__(self, model_dir: Path, loader: ModelLoader | None = None) -> None:
        self.model_dir = model_dir
        self._loader = loader or _default_loader
        self._lock = threading.Lock()
        self._idle = threading.Condition(threading.Lock())
        self._in_use = 0
        self._handle: ModelHandle | None = None
        self._state = ModelState.UNINITIALIZED
        self._releasing = False
        self._epoch = 0
        self._loader_thread: threading.Thread | None = None
        self.load_attempts = 0

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def releasing(self) -> bool:
        return self._releasing

    def _load(self) -> ModelHandle:
        if not self.model_dir.is_dir():
            raise ModelLoadError(f"Model not found at {self.model_dir}; download it from {MODEL_DOWNLOAD_URL}")
        try:
            return self._loader(self.model_dir)
        except Exception as e:
            raise ModelLoadError(f"Failed to load model: {e}") from e

    def ensure_loaded(self) -> ModelState:
        """Load the model if nobody has tried yet and return the resulting state."""
        return self._ensure_loaded(epoch=None)

    def _ensure_loaded(self, epoch: int | None) -> ModelState:
        if self._state != ModelState.UNINITIALIZED:
            return self._state

        with self._lock:
            if self._state != ModelState.UNINITIALIZED:
                return self._state
            # A background load scheduled before a release must not resurrect the model
            if epoch is not None and epoch != self._epoch:
                return self._state

            self.load_attempts += 1
            try:
                handle = self._load()
            except ModelLoadError as e:
                logger.warning("Local model disabled: %s", e)
                self._state = ModelState.FAILED
                return self._state

            self._handle = handle
            self._state = ModelState.READY
            logger.info("Local model loaded from %s", self.model_dir)
            return self._state

    def load_in_background(self) -> None:
        """Start loading on a daemon thread if no load has happened yet."""
        if self._state != ModelState.UNINITIALIZED:
            return
        with self._idle:
            if self._releasing:
                return
            if self._loader_thread is not None and self._loader_thread.is_alive():
                return
            self._loader_thread = threading.Thread(
                target=self._ensure_loaded,
                args=(self._epoch,),
                name="shell-predictor-model-loader",
                daemon=True,
            )
            self._loader_thread.start()

    def join_loader(self, timeout: float | None = None) -> None:
        """Wait for a pending background load, if any."""
        thread = self._loader_thread
        if thread is not None:
            thread.join(timeout)

    @contextmanager
    def acquire(self) -> Iterator[ModelHandle | None]:
        """Yield the loaded handle, or None when the model is not ready."""
        with self._idle:
            handle = self._handle if self._state == ModelState.READY else None
            if handle is not None:
                self._in_use += 1
        try:
            yield handle
        finally:
            if handle is not None:
                with self._idle:
                    self._in_use -= 1
                    if self._in_use == 0:
                        self._idle.notify_all()

    def release(self) -> None:
        """Close the handle and reset to the uninitialized state."""
        with self._idle:
            self._releasing = True
            self._epoch += 1
            self._state = ModelState.UNINITIALIZED
        try:
            with self._lock:
                with self._idle:
                    self._state = ModelState.UNINITIALIZED
                    while self._in_use:
                        self._idle.wait()
                    handle, self._handle = self._handle, None
                if handle is not None:
                    handle.close()
                    logger.info("Local model released")
        finally:
            with self._idle:
                self._releasing = False
