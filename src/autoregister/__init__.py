from autoregister.exceptions import (
    AsyncServiceInSyncContextError,
    AutoRegisterError,
    CircularDependencyError,
    GenerationError,
    InvalidRegistrationError,
    PolicyMismatchError,
    RegistryNotSetError,
    ServiceNotRegisteredError,
)
from autoregister.lock_mode import LockMode
from autoregister.markers import AutoRegister, auto_register
from autoregister.policies import RegisterAs
from autoregister.registry import EntryState, Registry
from autoregister.registry_context import RegistryContext, registry_context

__all__ = [
    "AsyncServiceInSyncContextError",
    "AutoRegister",
    "AutoRegisterError",
    "CircularDependencyError",
    "EntryState",
    "GenerationError",
    "InvalidRegistrationError",
    "LockMode",
    "PolicyMismatchError",
    "RegisterAs",
    "Registry",
    "RegistryContext",
    "RegistryNotSetError",
    "ServiceNotRegisteredError",
    "auto_register",
    "registry_context",
]
