"""Tests for the host adapter: strategy construction, registration, lifecycle."""

import threading
import uuid
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from shell_predictor.core.config import Settings
from shell_predictor.core.model.resource import ModelResource, ModelState
from shell_predictor.core.strategies import (
    CompleterStrategy,
    Completion,
    CompletionSource,
    KnownCommandsStrategy,
    LocalModelStrategy,
    StrategyKind,
    SuggestionCandidate,
    SuggestionResult,
    SuggestionStrategy,
    UnavailableReason,
)
from shell_predictor.host import ClientInfo, PredictorHost, StrategyRegistry, create_strategy
from tests.helpers import CountingLoader, FakeModelHandle

CLIENT = ClientInfo(name="tests")


def _settings(**kwargs: object) -> Settings:
    return Settings(**kwargs)  # type: ignore[arg-type]


class TestCreateStrategy:
    def test_known_commands(self) -> None:
        assert isinstance(create_strategy("known_commands", _settings()), KnownCommandsStrategy)

    def test_completer_defaults_to_command_completer(self) -> None:
        strategy = create_strategy(StrategyKind.COMPLETER, _settings())
        assert isinstance(strategy, CompleterStrategy)
        assert [s.text for s in strategy.suggest("scoop al").suggestions] == ["scoop alias"]

    def test_completer_uses_injected_source(self) -> None:
        source = MagicMock(spec=CompletionSource)
        source.complete.return_value = [Completion("scoop", "desc")]
        strategy = create_strategy(StrategyKind.COMPLETER, _settings(), completion_source=source)
        assert strategy.suggest("sco").suggestions == [SuggestionCandidate("scoop", "desc")]

    def test_local_model_from_settings(self, tmp_path: Path) -> None:
        config = _settings(model_dir=tmp_path, max_tokens=12, temperature=0.2, top_p=0.8, min_input_length=4)
        strategy = create_strategy(StrategyKind.LOCAL_MODEL, config)
        assert isinstance(strategy, LocalModelStrategy)
        assert strategy.resource.model_dir == tmp_path
        assert strategy.budget.max_tokens == 12
        assert strategy.budget.temperature == 0.2
        assert strategy.budget.top_p == 0.8
        assert strategy.min_input_length == 4

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError):
            create_strategy("telepathy", _settings())


class TestRegistry:
    def test_register_and_unregister(self) -> None:
        registry = StrategyRegistry()
        strategy = KnownCommandsStrategy()
        registry.register(strategy)
        assert registry.get(strategy.id) is strategy
        assert registry.list_ids() == [strategy.id]
        assert registry.unregister(strategy.id) is strategy
        assert registry.list_ids() == []

    def test_duplicate_registration(self) -> None:
        registry = StrategyRegistry()
        registry.register(KnownCommandsStrategy())
        with pytest.raises(ValueError):
            registry.register(KnownCommandsStrategy())

    def test_unregister_unknown(self) -> None:
        assert StrategyRegistry().unregister(uuid.uuid4()) is None


class TestPredictorHost:
    def test_nothing_before_load(self) -> None:
        host = PredictorHost(_settings())
        assert host.active is None
        assert host.get_suggestion(CLIENT, "git st") == []

    def test_load_registers_configured_strategy(self) -> None:
        registry = StrategyRegistry()
        host = PredictorHost(_settings(strategy="known_commands"), registry=registry)
        host.on_load()
        assert registry.list_ids() == [KnownCommandsStrategy.id]
        assert isinstance(host.active, KnownCommandsStrategy)
        assert [s.text for s in host.get_suggestion(CLIENT, "git st")] == ["git status"]

    def test_first_kind_is_active(self) -> None:
        host = PredictorHost(_settings(), kinds=["completer", "known_commands"])
        host.on_load()
        assert len(host.identifiers) == 2
        assert isinstance(host.active, CompleterStrategy)

    def test_unload_unregisters_everything(self) -> None:
        registry = StrategyRegistry()
        host = PredictorHost(_settings(), kinds=["completer", "known_commands"], registry=registry)
        host.on_load()
        host.on_unload()
        assert registry.list_ids() == []
        assert host.identifiers == []
        assert host.get_suggestion(CLIENT, "git") == []

    def test_unavailable_becomes_empty_list(self) -> None:
        host = PredictorHost(_settings())
        host.on_load()
        assert host.get_suggestion(CLIENT, "") == []
        assert host.get_suggestion(None, "kubectl") == []

    def test_strategy_exception_never_escapes(self) -> None:
        source = MagicMock(spec=CompletionSource)
        source.complete.side_effect = RuntimeError("completer crashed")
        host = PredictorHost(_settings(strategy="completer"), completion_source=source)
        host.on_load()
        assert host.get_suggestion(CLIENT, "git") == []

    def test_cancellation_forwarded(self) -> None:
        strategy = MagicMock(spec=SuggestionStrategy)
        strategy.id = uuid.uuid4()
        strategy.name = "mock"
        strategy.suggest.return_value = SuggestionResult.unavailable(UnavailableReason.CANCELLED)
        registry = StrategyRegistry()
        host = PredictorHost(_settings(), kinds=[], registry=registry)
        registry.register(strategy)
        host._identifiers.append(strategy.id)  # pyright: ignore[reportPrivateUsage]
        event = threading.Event()
        assert host.get_suggestion(CLIENT, "git", event) == []
        strategy.suggest.assert_called_once_with("git", event)


class TestLocalModelLifecycle:
    def test_load_warms_up_and_unload_releases(self, model_dir: Path) -> None:
        handle = FakeModelHandle(["git status\n"])
        loader = CountingLoader(handle)
        resource = ModelResource(model_dir, loader=loader)
        host = PredictorHost(_settings(strategy="local_model"), model_resource=resource)

        host.on_load()
        assert resource.ensure_loaded() == ModelState.READY
        assert [s.text for s in host.get_suggestion(CLIENT, "git st")] == ["git status"]
        assert loader.calls == 1

        host.on_unload()
        assert handle.closed
        assert resource.state == ModelState.UNINITIALIZED

    def test_missing_model_gives_empty(self, tmp_path: Path) -> None:
        host = PredictorHost(_settings(strategy="local_model", model_dir=tmp_path / "missing"))
        host.on_load()
        active = host.active
        assert isinstance(active, LocalModelStrategy)
        assert active.resource.ensure_loaded() == ModelState.FAILED
        assert host.get_suggestion(CLIENT, "git status") == []
        host.on_unload()
