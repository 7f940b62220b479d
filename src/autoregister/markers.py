from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, NamedTuple, TypeVar, overload

from autoregister.exceptions import InvalidRegistrationError
from autoregister.policies import RegisterAs

C = TypeVar("C", bound=type[Any])

AUTOREGISTER_MARKER_ATTR = "__autoregister__"


class AutoRegister(NamedTuple):
    """Mark a class for accessor generation.

    ``policy`` is the lifecycle the generated accessor passes to the registry.
    ``None`` and unrecognized values fall back to ``RegisterAs.FACTORY`` at
    generation time.
    """

    policy: RegisterAs | str | None = RegisterAs.FACTORY


@overload
def auto_register(cls: C, /) -> C: ...


@overload
def auto_register(
    policy: RegisterAs | str | None = RegisterAs.FACTORY,
    /,
) -> Callable[[C], C]: ...


def auto_register(
    target: Any = RegisterAs.FACTORY,
    /,
) -> Any:
    """Attach an ``AutoRegister`` marker to a class.

    Supports both the bare decorator form and the call form with a policy.

    Args:
        target: The class in bare form, or the registration policy in call form.

    Returns:
        The decorated class in bare form, or a decorator callable in call form.

    Raises:
        InvalidRegistrationError: If the decorated object is not a class, or the
            class already carries its own marker.

    Examples:
        .. code-block:: python

            @auto_register
            class EmailService: ...


            @auto_register(RegisterAs.LAZY_SINGLETON)
            class HttpClient:
                def __init__(self, config: AppConfig) -> None: ...

    """
    if inspect.isclass(target):
        return _mark(target, AutoRegister())

    policy: RegisterAs | str | None = target

    def decorator(cls: C) -> C:
        return _mark(cls, AutoRegister(policy=policy))

    return decorator


def find_marker(cls: type[Any]) -> AutoRegister | None:
    """Return the marker declared on ``cls`` itself, ignoring inherited markers."""
    marker = cls.__dict__.get(AUTOREGISTER_MARKER_ATTR)
    if isinstance(marker, AutoRegister):
        return marker
    return None


def _mark(cls: Any, marker: AutoRegister) -> Any:
    if not inspect.isclass(cls):
        msg = f"auto_register can only decorate classes, got {cls!r}."
        raise InvalidRegistrationError(msg)
    if find_marker(cls) is not None:
        msg = f"Class '{cls.__qualname__}' is already marked with auto_register."
        raise InvalidRegistrationError(msg)
    setattr(cls, AUTOREGISTER_MARKER_ATTR, marker)
    return cls


__all__ = [
    "AUTOREGISTER_MARKER_ATTR",
    "AutoRegister",
    "auto_register",
    "find_marker",
]
