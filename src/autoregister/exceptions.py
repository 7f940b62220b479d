from __future__ import annotations


class AutoRegisterError(Exception):
    """Represent a base class for all autoregister-specific failures.

    Catch this type when you want to handle any autoregister error path without
    matching each concrete exception class individually.
    """


class InvalidRegistrationError(AutoRegisterError):
    """Signal invalid registration input.

    Raised by ``auto_register`` when it decorates something that is not a
    class, and by ``Registry`` registration methods when the producer is not
    callable.
    """


class GenerationError(AutoRegisterError):
    """Signal that an accessor could not be generated for one class.

    Generation errors are local to one class. A build pass collects them as
    diagnostics and keeps generating the remaining classes.

    Typical triggers are an unusable constructor (abstract class, unresolvable
    annotations, a required parameter that can neither be injected nor filled
    with a literal) and a synchronous class depending on an asynchronous one.
    """

    def __init__(
        self,
        reason: str,
        *,
        class_name: str,
        module: str,
        source_file: str | None = None,
        source_line: int | None = None,
    ) -> None:
        self.reason = reason
        self.class_name = class_name
        self.module = module
        self.source_file = source_file
        self.source_line = source_line
        super().__init__(f"Cannot generate accessor for '{module}.{class_name}': {reason}")

    @property
    def location(self) -> str:
        """Return ``file:line`` of the class declaration when known."""
        if self.source_file is None:
            return self.module
        if self.source_line is None:
            return self.source_file
        return f"{self.source_file}:{self.source_line}"


class PolicyMismatchError(AutoRegisterError):
    """Signal a registration policy passed to the wrong registry entry point.

    Raised by ``Registry.get_or_register``/``Registry.register`` for async
    policies and by ``Registry.get_or_register_async``/``Registry.register_async``
    for sync policies. The registry state is left untouched.

    Typical fix is calling the entry point matching the policy, or changing the
    policy passed to ``auto_register``.
    """


class ServiceNotRegisteredError(AutoRegisterError):
    """Signal that a key has no registry entry.

    Raised by ``Registry.get`` and ``Registry.get_async``. Generated accessors
    never raise it because they register on first use.
    """


class AsyncServiceInSyncContextError(AutoRegisterError):
    """Signal a synchronous read of an unresolved async entry inside an event loop.

    Blocking the running loop while the same loop is expected to produce the
    instance would deadlock, so ``Registry.get`` refuses instead.

    Typical fix is switching to ``await registry.get_async(...)`` or awaiting the
    generated async accessor.
    """


class CircularDependencyError(AutoRegisterError):
    """Signal that a producer re-entered creation of the entry it is creating."""


class RegistryNotSetError(AutoRegisterError):
    """Signal use of ``registry_context`` before a registry is bound.

    Typical fix is calling ``registry_context.set_current(registry)`` during
    application startup before any generated accessor runs.
    """
