"""Tests for splitting constructor parameters into dependencies and values."""

from __future__ import annotations

import datetime
import enum
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, TypeVar, Union

import pytest

from autoregister import RegisterAs
from autoregister.codegen.classifier import ParameterClassifier, is_optional, is_value_type
from autoregister.model import (
    ConstructorParameter,
    DependencyParam,
    ManagedClass,
    ParameterKind,
    ValueParam,
)

T = TypeVar("T")


class Database:
    pass


class Clock:
    pass


class Color(enum.Enum):
    RED = "red"


MANAGED = {
    Database: ManagedClass(
        target=Database,
        class_name="Database",
        module="app.db",
        accessor_name="get_database",
        artifact_module="app.db_accessors",
        policy=RegisterAs.LAZY_SINGLETON,
    ),
}


def _parameter(annotation: Any, *, required: bool = True) -> ConstructorParameter:
    return ConstructorParameter(
        name="value",
        annotation=annotation,
        kind=ParameterKind.NAMED,
        required=required,
        default_expression=None,
    )


@pytest.fixture()
def classifier() -> ParameterClassifier:
    return ParameterClassifier()


def test_managed_class_is_a_dependency(classifier: ParameterClassifier) -> None:
    classified = classifier.classify(_parameter(Database), MANAGED)

    assert classified == DependencyParam(parameter=_parameter(Database), dependency=Database)


def test_annotated_managed_class_is_a_dependency(classifier: ParameterClassifier) -> None:
    classified = classifier.classify(_parameter(Annotated[Database, "primary"]), MANAGED)

    assert isinstance(classified, DependencyParam)


def test_optional_managed_class_without_default_is_a_value(
    classifier: ParameterClassifier,
) -> None:
    classified = classifier.classify(_parameter(Optional[Database]), MANAGED)  # noqa: UP045

    assert isinstance(classified, ValueParam)


def test_optional_managed_class_with_default_is_a_dependency(
    classifier: ParameterClassifier,
) -> None:
    classified = classifier.classify(_parameter(Database | None, required=False), MANAGED)

    assert isinstance(classified, DependencyParam)


def test_unmanaged_class_is_a_value(classifier: ParameterClassifier) -> None:
    parameter = _parameter(Clock)

    assert isinstance(classifier.classify(parameter, MANAGED), ValueParam)
    assert classifier.is_unmanaged_class(parameter)


def test_type_var_is_a_value(classifier: ParameterClassifier) -> None:
    parameter = _parameter(T)

    assert isinstance(classifier.classify(parameter, MANAGED), ValueParam)
    assert not classifier.is_unmanaged_class(parameter)


@pytest.mark.parametrize(
    "annotation",
    [
        str,
        int,
        bool,
        float,
        bytes,
        list[int],
        dict[str, int],
        Sequence[str],
        Mapping[str, Any],
        Path,
        datetime.timedelta,
        Literal["a", "b"],
        Union[int, str],  # noqa: UP007
        Color,
        Any,
        object,
    ],
)
def test_value_types(annotation: Any) -> None:
    assert is_value_type(annotation)
    assert not ParameterClassifier().is_unmanaged_class(_parameter(annotation))


def test_is_optional() -> None:
    assert is_optional(Optional[int])  # noqa: UP045
    assert is_optional(Annotated[int | None, "x"])
    assert not is_optional(int | str | None)
    assert not is_optional(int)
