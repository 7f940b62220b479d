from __future__ import annotations

import collections.abc
import datetime
import decimal
import pathlib
import re
import types
from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, TypeVar, Union, get_args, get_origin
from urllib.parse import ParseResult

from autoregister.model import (
    ClassifiedParameter,
    ConstructorParameter,
    DependencyParam,
    ManagedClass,
    ValueParam,
)

_NONE_TYPE = type(None)

VALUE_TYPES: frozenset[Any] = frozenset(
    {
        str,
        bytes,
        int,
        float,
        complex,
        bool,
        decimal.Decimal,
        list,
        tuple,
        dict,
        set,
        frozenset,
        datetime.timedelta,
        datetime.datetime,
        datetime.date,
        datetime.time,
        ParseResult,
        pathlib.Path,
        pathlib.PurePath,
        re.Pattern,
        object,
        _NONE_TYPE,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Mapping,
        collections.abc.MutableMapping,
        collections.abc.Set,
        collections.abc.MutableSet,
        collections.abc.Collection,
        collections.abc.Iterable,
    },
)
"""Types never resolved through the registry; parametrized forms count too."""

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)
_NOT_OPTIONAL: Any = object()


class ParameterClassifier:
    """Split constructor parameters into registry dependencies and literal values.

    A parameter is a dependency only when its type is a class managed in the
    current pass. Value types, bare ``TypeVar``s and ``Optional`` parameters
    without a default are always values; anything else that is not managed is a
    value too, so classification never fails.
    """

    def classify(
        self,
        parameter: ConstructorParameter,
        managed: Mapping[type[Any], ManagedClass],
    ) -> ClassifiedParameter:
        """Return the classification of ``parameter`` against the managed map."""
        annotation = strip_annotated(parameter.annotation)
        if is_type_var(annotation):
            return ValueParam(parameter)

        optional_inner = optional_member(annotation)
        if optional_inner is not _NOT_OPTIONAL:
            if parameter.required:
                return ValueParam(parameter)
            annotation = strip_annotated(optional_inner)

        if is_value_type(annotation):
            return ValueParam(parameter)
        if isinstance(annotation, type) and annotation in managed:
            return DependencyParam(parameter=parameter, dependency=annotation)
        return ValueParam(parameter)

    def is_unmanaged_class(self, parameter: ConstructorParameter) -> bool:
        """Return whether a value parameter names a class no literal can stand in for."""
        annotation = strip_annotated(parameter.annotation)
        if optional_member(annotation) is not _NOT_OPTIONAL:
            return False
        return (
            isinstance(annotation, type)
            and get_origin(annotation) is None
            and not is_value_type(annotation)
        )


def is_value_type(annotation: Any) -> bool:
    """Return whether ``annotation`` denotes a value filled by a literal."""
    if annotation is None or annotation is Any or is_type_var(annotation):
        return True
    if annotation in VALUE_TYPES:
        return True

    origin = get_origin(annotation)
    if origin is Literal or origin in _UNION_ORIGINS:
        return True
    if origin is not None and origin in VALUE_TYPES:
        return True

    return isinstance(annotation, type) and issubclass(annotation, Enum)


def is_type_var(annotation: Any) -> bool:
    """Return whether ``annotation`` is a bare generic type parameter."""
    return isinstance(annotation, TypeVar)


def strip_annotated(annotation: Any) -> Any:
    """Return the inner type of ``Annotated[T, ...]``, or ``annotation`` unchanged."""
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def optional_member(annotation: Any) -> Any:
    """Return ``X`` for ``Optional[X]``/``X | None``; a private sentinel otherwise."""
    if get_origin(annotation) not in _UNION_ORIGINS:
        return _NOT_OPTIONAL
    members = [member for member in get_args(annotation) if member is not _NONE_TYPE]
    if len(members) != len(get_args(annotation)) - 1 or len(members) != 1:
        return _NOT_OPTIONAL
    return members[0]


def is_optional(annotation: Any) -> bool:
    """Return whether ``annotation`` is ``Optional[X]`` for a single ``X``."""
    return optional_member(strip_annotated(annotation)) is not _NOT_OPTIONAL
