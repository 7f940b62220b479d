from __future__ import annotations

from autoregister.exceptions import RegistryNotSetError
from autoregister.registry import Registry


class RegistryContext:
    """Binding point for the registry used by generated accessors.

    The active registry binding is process-global for this ``RegistryContext``
    instance. It is not task-local or thread-local. The application's
    composition root binds it once at startup; tests bind a fresh registry per
    scenario through the pytest plugin.
    """

    def __init__(self) -> None:
        self._registry: Registry | None = None

    def set_current(self, registry: Registry) -> None:
        """Bind ``registry`` as the one generated accessors resolve through."""
        self._registry = registry

    def get_current(self) -> Registry:
        """Return the bound registry or raise when none is bound."""
        if self._registry is None:
            msg = (
                "Registry is not set for registry_context. "
                "Call registry_context.set_current(registry) before calling generated accessors."
            )
            raise RegistryNotSetError(msg)
        return self._registry

    def find_current(self) -> Registry | None:
        """Return the bound registry, or ``None`` when unbound."""
        return self._registry

    def clear(self) -> None:
        """Unbind the current registry."""
        self._registry = None


registry_context = RegistryContext()
"""Shared context imported by every generated accessor module."""
