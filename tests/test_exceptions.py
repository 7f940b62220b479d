"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from autoregister import (
    AsyncServiceInSyncContextError,
    AutoRegisterError,
    CircularDependencyError,
    GenerationError,
    InvalidRegistrationError,
    PolicyMismatchError,
    RegistryNotSetError,
    ServiceNotRegisteredError,
)


@pytest.mark.parametrize(
    "error_type",
    [
        AsyncServiceInSyncContextError,
        CircularDependencyError,
        GenerationError,
        InvalidRegistrationError,
        PolicyMismatchError,
        RegistryNotSetError,
        ServiceNotRegisteredError,
    ],
)
def test_every_error_derives_from_base(error_type: type[Exception]) -> None:
    assert issubclass(error_type, AutoRegisterError)


def test_generation_error_message_names_class() -> None:
    error = GenerationError("boom", class_name="Service", module="app.services")

    assert str(error) == "Cannot generate accessor for 'app.services.Service': boom"
    assert error.reason == "boom"


@pytest.mark.parametrize(
    ("source_file", "source_line", "expected"),
    [
        ("app/services.py", 12, "app/services.py:12"),
        ("app/services.py", None, "app/services.py"),
        (None, None, "app.services"),
    ],
)
def test_generation_error_location(
    source_file: str | None,
    source_line: int | None,
    expected: str,
) -> None:
    error = GenerationError(
        "boom",
        class_name="Service",
        module="app.services",
        source_file=source_file,
        source_line=source_line,
    )

    assert error.location == expected
