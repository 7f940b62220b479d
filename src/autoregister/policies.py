from __future__ import annotations

from enum import Enum


class RegisterAs(Enum):
    """Select how a registry entry creates and shares its instance.

    Sync members are accepted by ``Registry.get_or_register``; async members by
    ``Registry.get_or_register_async``. Generated accessors pass the member
    chosen with ``auto_register``.
    """

    FACTORY = "factory"
    """Create a new instance on every request."""

    SINGLETON = "singleton"
    """Create the instance at registration and share it."""

    LAZY_SINGLETON = "lazy_singleton"
    """Create the instance on first request and share it."""

    FACTORY_ASYNC = "factory_async"
    """Await a new instance on every request."""

    SINGLETON_ASYNC = "singleton_async"
    """Await the instance at registration; later reads are synchronous."""

    LAZY_SINGLETON_ASYNC = "lazy_singleton_async"
    """Await the instance on first request and share it."""

    @property
    def is_async(self) -> bool:
        """Return whether the producer for this policy is a coroutine function."""
        return self in _ASYNC_POLICIES

    @property
    def is_shared(self) -> bool:
        """Return whether one instance is cached and shared by all requests."""
        return self not in (RegisterAs.FACTORY, RegisterAs.FACTORY_ASYNC)

    @property
    def is_eager(self) -> bool:
        """Return whether the instance is created as part of registration."""
        return self in (RegisterAs.SINGLETON, RegisterAs.SINGLETON_ASYNC)


_ASYNC_POLICIES = frozenset(
    {
        RegisterAs.FACTORY_ASYNC,
        RegisterAs.SINGLETON_ASYNC,
        RegisterAs.LAZY_SINGLETON_ASYNC,
    },
)
