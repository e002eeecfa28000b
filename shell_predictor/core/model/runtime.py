"""onnxruntime-genai backed model handle."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import onnxruntime_genai as og

from ..strategies.types import GenerationBudget
from .resource import ModelHandle


class OnnxGenerationSession:
    """A single generation run over an appended prompt."""

    def __init__(self, generator: Any) -> None:
        self._generator = generator

    def is_done(self) -> bool:
        return bool(self._generator.is_done())

    def step(self) -> None:
        self._generator.generate_next_token()

    def last_token(self) -> int:
        return int(self._generator.get_next_tokens()[0])


class OnnxTokenDecoder:
    """Incremental token decoder; keeps state across multi-token characters."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream

    def decode(self, token: int) -> str:
        return str(self._stream.decode(token))


class OnnxModelHandle(ModelHandle):
    """A loaded ONNX model and its tokenizer."""

    def __init__(self, model: Any, tokenizer: Any) -> None:
        self.model = model
        self.tokenizer = tokenizer

    def tokenize(self, text: str) -> Sequence[int]:
        return self.tokenizer.encode(text)

    def start(self, tokens: Sequence[int], budget: GenerationBudget) -> OnnxGenerationSession:
        params = og.GeneratorParams(self.model)
        # max_length counts the prompt as well as the generated tokens
        params.set_search_options(
            max_length=len(tokens) + budget.max_tokens,
            do_sample=True,
            temperature=budget.temperature,
            top_p=budget.top_p,
        )
        generator = og.Generator(self.model, params)
        generator.append_tokens(tokens)
        return OnnxGenerationSession(generator)

    def create_decoder(self) -> OnnxTokenDecoder:
        return OnnxTokenDecoder(self.tokenizer.create_stream())

    def close(self) -> None:
        self.tokenizer = None
        self.model = None


def load_onnx_model(path: Path) -> OnnxModelHandle:
    """Load the model directory at ``path`` and build its tokenizer."""
    model = og.Model(str(path))
    tokenizer = og.Tokenizer(model)
    return OnnxModelHandle(model, tokenizer)
