from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias

from autoregister.markers import AutoRegister
from autoregister.policies import RegisterAs


class ParameterKind(Enum):
    """How a constructor argument is passed at the call site."""

    POSITIONAL = "positional"
    """Positional-only parameter; passed without a name."""

    NAMED = "named"
    """Parameter accepting a keyword; passed as ``name=value``."""


@dataclass(frozen=True, slots=True)
class ConstructorParameter:
    """One constructor parameter as read from the class signature."""

    name: str
    annotation: Any
    """Resolved type hint; ``typing.Any`` for unannotated parameters."""
    kind: ParameterKind
    required: bool
    default_expression: str | None = None
    """Literal source of the declared default, when the default is a plain literal."""


@dataclass(frozen=True, slots=True)
class AnnotatedClass:
    """A class carrying an ``AutoRegister`` marker, as read by one build pass."""

    target: type[Any]
    class_name: str
    module: str
    policy: RegisterAs | None
    """Policy from the marker; ``None`` when absent or unrecognized."""
    parameters: tuple[ConstructorParameter, ...] | None
    """Ordered constructor parameters; ``None`` when the constructor is unusable."""
    marker: AutoRegister | None = None
    constructor_error: str | None = None
    """Why ``parameters`` is ``None``."""
    source_file: str | None = None
    source_line: int | None = None


@dataclass(frozen=True, slots=True)
class DependencyParam:
    """Parameter resolved through another managed class's accessor."""

    parameter: ConstructorParameter
    dependency: type[Any]


@dataclass(frozen=True, slots=True)
class ValueParam:
    """Parameter filled with a literal in the generated constructor call."""

    parameter: ConstructorParameter


ClassifiedParameter: TypeAlias = DependencyParam | ValueParam


@dataclass(frozen=True, slots=True)
class ManagedClass:
    """Capability map entry for a class that gets an accessor in the current pass."""

    target: type[Any]
    class_name: str
    module: str
    accessor_name: str
    artifact_module: str
    policy: RegisterAs


@dataclass(frozen=True, slots=True)
class GeneratedAccessor:
    """Rendered accessor function for one annotated class."""

    accessor_name: str
    class_name: str
    module: str
    artifact_module: str
    policy: RegisterAs
    is_async: bool
    source: str
    """Function source text, without imports."""
