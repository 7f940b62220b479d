from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from concurrent.futures import Future
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from enum import Enum
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar

from autoregister.exceptions import (
    AsyncServiceInSyncContextError,
    CircularDependencyError,
    InvalidRegistrationError,
    PolicyMismatchError,
    ServiceNotRegisteredError,
)
from autoregister.lock_mode import LockMode
from autoregister.policies import RegisterAs

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)

_MISSING: Any = object()


class EntryState(Enum):
    """Registration state of one key in a ``Registry``."""

    UNREGISTERED = "unregistered"
    """No entry exists for the key."""

    REGISTERED_SYNC = "registered_sync"
    """The key is registered with a sync policy."""

    REGISTERED_ASYNC_PENDING = "registered_async_pending"
    """The key is registered with an async policy and has no cached instance."""

    REGISTERED_ASYNC_RESOLVED = "registered_async_resolved"
    """The key is registered with a shared async policy and its instance is cached."""


@dataclass(slots=True)
class _RegistryEntry:
    key: Any
    policy: RegisterAs
    producer: Callable[[], Any]
    lock: AbstractContextManager[Any]
    instance: Any = _MISSING
    in_flight: Future[Any] | None = None
    leader_task: asyncio.Task[Any] | None = None
    creating_thread: int | None = None

    @property
    def state(self) -> EntryState:
        if not self.policy.is_async:
            return EntryState.REGISTERED_SYNC
        if self.instance is _MISSING:
            return EntryState.REGISTERED_ASYNC_PENDING
        return EntryState.REGISTERED_ASYNC_RESOLVED


class Registry:
    """Cache one instance-producing policy per key and resolve instances on demand.

    Keys are usually classes. Each key is registered at most once: later
    registration attempts keep the first producer and policy and only resolve
    the existing entry. Shared policies create their instance at most once,
    even when many threads or coroutines resolve the key at the same time.

    Generated accessors reach the application's registry through
    ``registry_context``; tests construct a fresh registry per scenario.
    """

    def __init__(self, *, lock_mode: LockMode = LockMode.THREAD) -> None:
        """Initialize an empty registry.

        Args:
            lock_mode: ``LockMode.THREAD`` guards registration and sync creation
                with thread locks. ``LockMode.NONE`` skips them for registries
                used from a single thread.

        Examples:
            .. code-block:: python

                registry = Registry()
                registry_context.set_current(registry)

        """
        self._lock_mode = lock_mode
        self._lock = self._new_lock()
        self._entries: dict[Any, _RegistryEntry] = {}

    # region Registration
    def register(
        self,
        key: type[T],
        producer: Callable[[], T],
        policy: RegisterAs,
    ) -> None:
        """Register a sync producer without resolving it.

        ``RegisterAs.SINGLETON`` calls the producer immediately. Registering an
        already registered key is a no-op.

        Raises:
            PolicyMismatchError: If ``policy`` is an async policy.
            InvalidRegistrationError: If ``producer`` is not callable.

        """
        self._ensure_policy(policy, expect_async=False, entry_point="register")
        self._register(key, producer, policy)

    async def register_async(
        self,
        key: type[T],
        producer: Callable[[], Awaitable[T]],
        policy: RegisterAs,
    ) -> None:
        """Register an async producer without resolving it.

        ``RegisterAs.SINGLETON_ASYNC`` awaits the producer before returning.
        Registering an already registered key is a no-op.

        Raises:
            PolicyMismatchError: If ``policy`` is a sync policy.
            InvalidRegistrationError: If ``producer`` is not callable.

        """
        self._ensure_policy(policy, expect_async=True, entry_point="register_async")
        await self._register_async(key, producer, policy)

    def get_or_register(
        self,
        key: type[T],
        producer: Callable[[], T],
        policy: RegisterAs,
    ) -> T:
        """Return the instance for ``key``, registering ``producer`` on first use.

        When ``key`` is already registered, ``producer`` and ``policy`` are
        ignored and the existing entry is resolved.

        Args:
            key: Type identifier of the entry.
            producer: Zero-argument callable creating the instance.
            policy: One of ``FACTORY``, ``SINGLETON`` or ``LAZY_SINGLETON``.

        Raises:
            PolicyMismatchError: If ``policy`` is an async policy.

        """
        self._ensure_policy(policy, expect_async=False, entry_point="get_or_register")
        entry = self._entries.get(key)
        if entry is None:
            entry = self._register(key, producer, policy)
        return self._resolve_sync(entry)

    async def get_or_register_async(
        self,
        key: type[T],
        producer: Callable[[], Awaitable[T]],
        policy: RegisterAs,
    ) -> T:
        """Return the instance for ``key``, registering ``producer`` on first use.

        When ``key`` is already registered, ``producer`` and ``policy`` are
        ignored and the existing entry is resolved.

        Args:
            key: Type identifier of the entry.
            producer: Zero-argument coroutine function creating the instance.
            policy: One of ``FACTORY_ASYNC``, ``SINGLETON_ASYNC`` or
                ``LAZY_SINGLETON_ASYNC``.

        Raises:
            PolicyMismatchError: If ``policy`` is a sync policy.

        """
        self._ensure_policy(policy, expect_async=True, entry_point="get_or_register_async")
        entry = self._entries.get(key)
        if entry is None:
            entry = await self._register_async(key, producer, policy)
        return await self._resolve_async(entry)

    def get_or_register_factory(self, key: type[T], producer: Callable[[], T]) -> T:
        """Shortcut for ``get_or_register(key, producer, RegisterAs.FACTORY)``."""
        return self.get_or_register(key, producer, RegisterAs.FACTORY)

    def get_or_register_singleton(self, key: type[T], producer: Callable[[], T]) -> T:
        """Shortcut for ``get_or_register(key, producer, RegisterAs.SINGLETON)``."""
        return self.get_or_register(key, producer, RegisterAs.SINGLETON)

    def get_or_register_lazy_singleton(self, key: type[T], producer: Callable[[], T]) -> T:
        """Shortcut for ``get_or_register(key, producer, RegisterAs.LAZY_SINGLETON)``."""
        return self.get_or_register(key, producer, RegisterAs.LAZY_SINGLETON)

    async def get_or_register_factory_async(
        self,
        key: type[T],
        producer: Callable[[], Awaitable[T]],
    ) -> T:
        """Shortcut for ``get_or_register_async`` with ``RegisterAs.FACTORY_ASYNC``."""
        return await self.get_or_register_async(key, producer, RegisterAs.FACTORY_ASYNC)

    async def get_or_register_singleton_async(
        self,
        key: type[T],
        producer: Callable[[], Awaitable[T]],
    ) -> T:
        """Shortcut for ``get_or_register_async`` with ``RegisterAs.SINGLETON_ASYNC``."""
        return await self.get_or_register_async(key, producer, RegisterAs.SINGLETON_ASYNC)

    async def get_or_register_lazy_singleton_async(
        self,
        key: type[T],
        producer: Callable[[], Awaitable[T]],
    ) -> T:
        """Shortcut for ``get_or_register_async`` with ``RegisterAs.LAZY_SINGLETON_ASYNC``."""
        return await self.get_or_register_async(key, producer, RegisterAs.LAZY_SINGLETON_ASYNC)

    # endregion Registration

    # region Resolution
    def get(self, key: type[T]) -> T:
        """Resolve a registered key synchronously.

        Async entries are awaited on a private event loop when the calling
        thread has no running loop, or waited for when another caller is
        already creating the instance.

        Raises:
            ServiceNotRegisteredError: If ``key`` is not registered.
            AsyncServiceInSyncContextError: If ``key`` has an async policy, has
                no cached instance, and the calling thread runs an event loop.

        """
        return self._resolve_sync(self._require_entry(key))

    async def get_async(self, key: type[T]) -> T:
        """Resolve a registered key, awaiting async producers.

        Raises:
            ServiceNotRegisteredError: If ``key`` is not registered.

        """
        return await self._resolve_async(self._require_entry(key))

    # endregion Resolution

    def is_registered(self, key: Any) -> bool:
        """Return whether ``key`` has an entry."""
        return key in self._entries

    def state(self, key: Any) -> EntryState:
        """Return the registration state of ``key``."""
        entry = self._entries.get(key)
        if entry is None:
            return EntryState.UNREGISTERED
        return entry.state

    def reset(self) -> None:
        """Drop every entry, returning all keys to ``EntryState.UNREGISTERED``.

        Intended for test teardown. Cached instances are released without any
        cleanup; their resources belong to the code that used them.
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug("Registry reset: %d entries dropped", count)

    def __len__(self) -> int:
        return len(self._entries)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.reset()

    def _register(
        self,
        key: Any,
        producer: Callable[[], Any],
        policy: RegisterAs,
    ) -> _RegistryEntry:
        entry, is_new = self._add_entry(key, producer, policy)
        if is_new and policy is RegisterAs.SINGLETON:
            self._create_shared_sync(entry)
        return entry

    async def _register_async(
        self,
        key: Any,
        producer: Callable[[], Awaitable[Any]],
        policy: RegisterAs,
    ) -> _RegistryEntry:
        entry, is_new = self._add_entry(key, producer, policy)
        if is_new and policy is RegisterAs.SINGLETON_ASYNC:
            await self._create_shared_async(entry)
        return entry

    def _add_entry(
        self,
        key: Any,
        producer: Callable[[], Any],
        policy: RegisterAs,
    ) -> tuple[_RegistryEntry, bool]:
        if not callable(producer):
            msg = f"Producer for {key!r} must be callable, got {producer!r}."
            raise InvalidRegistrationError(msg)

        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing, False
            entry = _RegistryEntry(
                key=key,
                policy=policy,
                producer=producer,
                lock=self._new_lock(),
            )
            self._entries[key] = entry

        logger.debug("Registered %r with policy %s", key, policy.value)
        return entry, True

    def _require_entry(self, key: Any) -> _RegistryEntry:
        entry = self._entries.get(key)
        if entry is None:
            msg = f"{key!r} is not registered."
            raise ServiceNotRegisteredError(msg)
        return entry

    def _resolve_sync(self, entry: _RegistryEntry) -> Any:
        instance = entry.instance
        if instance is not _MISSING:
            return instance
        if entry.policy is RegisterAs.FACTORY:
            return entry.producer()
        if entry.policy.is_async:
            return self._resolve_async_entry_sync(entry)
        return self._create_shared_sync(entry)

    async def _resolve_async(self, entry: _RegistryEntry) -> Any:
        instance = entry.instance
        if instance is not _MISSING:
            return instance
        if not entry.policy.is_async:
            return self._resolve_sync(entry)
        if entry.policy is RegisterAs.FACTORY_ASYNC:
            return await entry.producer()
        return await self._create_shared_async(entry)

    def _create_shared_sync(self, entry: _RegistryEntry) -> Any:
        current_thread = threading.get_ident()
        if entry.creating_thread == current_thread:
            msg = f"Circular dependency detected while creating {entry.key!r}."
            raise CircularDependencyError(msg)

        with entry.lock:
            if entry.instance is _MISSING:
                entry.creating_thread = current_thread
                try:
                    entry.instance = entry.producer()
                finally:
                    entry.creating_thread = None
                logger.debug("Created shared instance for %r", entry.key)
            return entry.instance

    def _resolve_async_entry_sync(self, entry: _RegistryEntry) -> Any:
        if _has_running_loop():
            msg = (
                f"{entry.key!r} is registered with {entry.policy.value} and has no cached "
                "instance; resolve it with 'await registry.get_async(...)' inside a running "
                "event loop."
            )
            raise AsyncServiceInSyncContextError(msg)

        if entry.policy is RegisterAs.FACTORY_ASYNC:
            return asyncio.run(_await_producer(entry.producer))

        flight, is_leader = self._claim_flight(entry)
        if not is_leader:
            return flight.result()
        return asyncio.run(self._lead_flight(entry, flight))

    async def _create_shared_async(self, entry: _RegistryEntry) -> Any:
        flight, is_leader = self._claim_flight(entry)
        if is_leader:
            return await self._lead_flight(entry, flight)

        current_task = asyncio.current_task()
        if current_task is not None and entry.leader_task is current_task:
            msg = f"Circular dependency detected while creating {entry.key!r}."
            raise CircularDependencyError(msg)
        return await asyncio.wrap_future(flight)

    def _claim_flight(self, entry: _RegistryEntry) -> tuple[Future[Any], bool]:
        with entry.lock:
            if entry.instance is not _MISSING:
                done: Future[Any] = Future()
                done.set_result(entry.instance)
                return done, False
            if entry.in_flight is not None:
                return entry.in_flight, False
            flight: Future[Any] = Future()
            entry.in_flight = flight
            return flight, True

    async def _lead_flight(self, entry: _RegistryEntry, flight: Future[Any]) -> Any:
        entry.leader_task = asyncio.current_task()
        try:
            instance = await entry.producer()
        except BaseException as error:
            with entry.lock:
                entry.in_flight = None
                entry.leader_task = None
            if isinstance(error, asyncio.CancelledError):
                flight.cancel()
            else:
                flight.set_exception(error)
            raise

        with entry.lock:
            entry.instance = instance
            entry.in_flight = None
            entry.leader_task = None
        flight.set_result(instance)
        logger.debug("Created shared async instance for %r", entry.key)
        return instance

    def _ensure_policy(self, policy: RegisterAs, *, expect_async: bool, entry_point: str) -> None:
        if policy.is_async is expect_async:
            return
        expected = "an async" if expect_async else "a sync"
        msg = f"{entry_point}() requires {expected} policy, got RegisterAs.{policy.name}."
        raise PolicyMismatchError(msg)

    def _new_lock(self) -> AbstractContextManager[Any]:
        if self._lock_mode is LockMode.NONE:
            return nullcontext()
        return threading.Lock()


def _has_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


async def _await_producer(producer: Callable[[], Awaitable[Any]]) -> Any:
    return await producer()
