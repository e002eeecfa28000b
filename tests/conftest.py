"""Shared test fixtures for the test suite."""

from pathlib import Path

import pytest

from shell_predictor.core.model.resource import ModelResource

from tests.helpers import CountingLoader, FakeModelHandle


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    path = tmp_path / "models" / "phi3"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def fake_handle() -> FakeModelHandle:
    return FakeModelHandle(["git status\n", "git stash\n", "git stash pop\n"])


@pytest.fixture
def ready_resource(model_dir: Path, fake_handle: FakeModelHandle) -> ModelResource:
    resource = ModelResource(model_dir, loader=CountingLoader(fake_handle))
    resource.ensure_loaded()
    return resource
