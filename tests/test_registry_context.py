"""Tests for the registry binding used by generated accessors."""

from __future__ import annotations

import pytest

from autoregister import (
    LockMode,
    RegisterAs,
    Registry,
    RegistryContext,
    RegistryNotSetError,
    registry_context,
)

pytest_plugins = ["autoregister.integrations.pytest_plugin"]


class Service:
    pass


def test_get_current_without_binding_raises() -> None:
    context = RegistryContext()

    with pytest.raises(RegistryNotSetError, match="set_current"):
        context.get_current()
    assert context.find_current() is None


def test_set_current_binds_registry() -> None:
    context = RegistryContext()
    registry = Registry()

    context.set_current(registry)

    assert context.get_current() is registry


def test_clear_unbinds_registry() -> None:
    context = RegistryContext()
    context.set_current(Registry())

    context.clear()

    assert context.find_current() is None


@pytest.mark.parametrize("run", [1, 2])
def test_plugin_fixture_binds_fresh_registry_per_test(
    autoregister_registry: Registry,
    run: int,
) -> None:
    assert registry_context.get_current() is autoregister_registry
    assert len(autoregister_registry) == 0

    autoregister_registry.register(Service, Service, RegisterAs.SINGLETON)
    assert autoregister_registry.is_registered(Service), run


class TestLockModeOverride:
    @pytest.fixture()
    def autoregister_lock_mode(self) -> LockMode:
        return LockMode.NONE

    def test_overridden_lock_mode_is_used(self, autoregister_registry: Registry) -> None:
        assert autoregister_registry._lock_mode is LockMode.NONE

        first = autoregister_registry.get_or_register(Service, Service, RegisterAs.LAZY_SINGLETON)

        assert autoregister_registry.get(Service) is first
