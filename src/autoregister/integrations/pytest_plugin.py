from __future__ import annotations

from collections.abc import Iterator

import pytest

from autoregister.lock_mode import LockMode
from autoregister.registry import Registry
from autoregister.registry_context import registry_context


@pytest.fixture()
def autoregister_lock_mode() -> LockMode:
    """Lock mode of the per-test registry. Override to test single-threaded setups."""
    return LockMode.THREAD


@pytest.fixture()
def autoregister_registry(autoregister_lock_mode: LockMode) -> Iterator[Registry]:
    """Bind a fresh registry to ``registry_context`` for the duration of one test.

    Generated accessors called inside the test resolve through this registry.
    On teardown the registry is reset and the previous binding is restored, so
    shared instances never leak between tests.

    Yields:
        A new, empty ``Registry``.

    """
    previous = registry_context.find_current()
    registry = Registry(lock_mode=autoregister_lock_mode)
    registry_context.set_current(registry)
    try:
        yield registry
    finally:
        registry.reset()
        if previous is None:
            registry_context.clear()
        else:
            registry_context.set_current(previous)
