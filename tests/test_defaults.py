"""Tests for literals synthesized for value parameters."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Literal, Optional

import pytest

from autoregister.codegen.defaults import DEFAULT_STRING_PLACEHOLDER, DefaultSynthesizer
from autoregister.model import ConstructorParameter, ParameterKind


def _parameter(
    name: str,
    annotation: Any,
    *,
    required: bool = True,
    default_expression: str | None = None,
) -> ConstructorParameter:
    return ConstructorParameter(
        name=name,
        annotation=annotation,
        kind=ParameterKind.NAMED,
        required=required,
        default_expression=default_expression,
    )


@pytest.fixture()
def synthesizer() -> DefaultSynthesizer:
    return DefaultSynthesizer()


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("databaseConnection", "postgresql://localhost:5432/app"),
        ("base_url", "https://example.com"),
        ("client_secret", "your-secret"),
        ("accessToken", "your-token"),
        ("apiKey", "your-api-key"),
        ("tenant_id", "default-id"),
        ("sender", DEFAULT_STRING_PLACEHOLDER),
    ],
)
def test_required_string_gets_name_based_placeholder(
    synthesizer: DefaultSynthesizer,
    name: str,
    expected: str,
) -> None:
    assert synthesizer.synthesize(_parameter(name, str)) == repr(expected)


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (int, "0"),
        (float, "0.0"),
        (bool, "False"),
        (bytes, 'b""'),
        (list[str], "[]"),
        (Sequence[int], "[]"),
        (dict[str, int], "{}"),
        (Mapping[str, Any], "{}"),
        (tuple[int, ...], "()"),
        (set[str], "set()"),
        (Optional[int], "None"),  # noqa: UP045
        (Literal["fast", "slow"], "'fast'"),
        (Any, "None"),
        (object, "None"),
    ],
)
def test_required_parameter_gets_type_based_literal(
    synthesizer: DefaultSynthesizer,
    annotation: Any,
    expected: str,
) -> None:
    assert synthesizer.synthesize(_parameter("value", annotation)) == expected


def test_literal_default_is_reused(synthesizer: DefaultSynthesizer) -> None:
    parameter = _parameter("retries", int, required=False, default_expression="3")

    assert synthesizer.synthesize(parameter) == "3"


def test_non_literal_default_is_omitted(synthesizer: DefaultSynthesizer) -> None:
    parameter = _parameter("created_at", object, required=False)

    assert synthesizer.synthesize(parameter) is None
