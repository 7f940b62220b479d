"""Shared pytest fixtures for autoregister tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from types import ModuleType

import pytest

from autoregister.settings import GeneratorSettings


@pytest.fixture()
def generator_settings(tmp_path: Path) -> GeneratorSettings:
    """Settings writing only to a temporary build cache."""
    return GeneratorSettings(cache_dir=tmp_path / "cache", write_beside_sources=False)


@pytest.fixture()
def load_artifact(monkeypatch: pytest.MonkeyPatch) -> Callable[[str, str], ModuleType]:
    """Execute generated module text and register it in ``sys.modules`` for one test."""

    def load(name: str, source: str) -> ModuleType:
        module = ModuleType(name)
        monkeypatch.setitem(sys.modules, name, module)
        exec(compile(source, f"<{name}>", "exec"), module.__dict__)  # noqa: S102
        return module

    return load
