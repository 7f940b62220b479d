"""Tests for RegisterAs policy properties."""

from __future__ import annotations

import pytest

from autoregister import RegisterAs


@pytest.mark.parametrize(
    ("policy", "is_async", "is_shared", "is_eager"),
    [
        (RegisterAs.FACTORY, False, False, False),
        (RegisterAs.SINGLETON, False, True, True),
        (RegisterAs.LAZY_SINGLETON, False, True, False),
        (RegisterAs.FACTORY_ASYNC, True, False, False),
        (RegisterAs.SINGLETON_ASYNC, True, True, True),
        (RegisterAs.LAZY_SINGLETON_ASYNC, True, True, False),
    ],
)
def test_policy_properties(
    policy: RegisterAs,
    is_async: bool,  # noqa: FBT001
    is_shared: bool,  # noqa: FBT001
    is_eager: bool,  # noqa: FBT001
) -> None:
    assert policy.is_async is is_async
    assert policy.is_shared is is_shared
    assert policy.is_eager is is_eager
