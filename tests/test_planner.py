"""Tests for accessor planning: naming, argument expressions and plan-time errors."""

from __future__ import annotations

from typing import Any

import pytest

from autoregister import GenerationError, RegisterAs
from autoregister.codegen.planner import (
    AccessorPlanner,
    ArgumentPlan,
    ImportPlan,
    accessor_name_for,
    snake_case,
)
from autoregister.model import AnnotatedClass, ConstructorParameter, ParameterKind


class Config:
    pass


class Pool:
    pass


class Repository:
    pass


class Clock:
    pass


def _parameter(
    name: str,
    annotation: Any,
    *,
    kind: ParameterKind = ParameterKind.NAMED,
    required: bool = True,
    default_expression: str | None = None,
) -> ConstructorParameter:
    return ConstructorParameter(
        name=name,
        annotation=annotation,
        kind=kind,
        required=required,
        default_expression=default_expression,
    )


def _annotated(
    target: type[Any],
    *parameters: ConstructorParameter,
    module: str = "app.services",
    policy: RegisterAs | None = RegisterAs.FACTORY,
) -> AnnotatedClass:
    return AnnotatedClass(
        target=target,
        class_name=target.__name__,
        module=module,
        policy=policy,
        parameters=parameters,
        source_file="app/services.py",
        source_line=10,
    )


def _planner(*classes: AnnotatedClass) -> AccessorPlanner:
    managed = AccessorPlanner.build_managed_map(
        classes,
        accessor_prefix="get_",
        artifact_suffix="_accessors",
    )
    return AccessorPlanner(managed)


@pytest.mark.parametrize(
    ("class_name", "expected"),
    [
        ("AppConfig", "app_config"),
        ("HTTPClient", "http_client"),
        ("OAuth2Token", "o_auth2_token"),
        ("Service", "service"),
    ],
)
def test_snake_case(class_name: str, expected: str) -> None:
    assert snake_case(class_name) == expected


def test_accessor_name_uses_prefix() -> None:
    assert accessor_name_for("UserRepository", "get_") == "get_user_repository"


def test_missing_policy_falls_back_to_factory() -> None:
    annotated = _annotated(Config, policy=None)

    plan = _planner(annotated).build(annotated)

    assert plan.policy is RegisterAs.FACTORY
    assert plan.is_async is False


def test_dependencies_and_values_become_arguments() -> None:
    config = _annotated(Config, module="app.config", policy=RegisterAs.SINGLETON)
    repository = _annotated(
        Repository,
        _parameter("config", Config),
        _parameter("table", str),
        _parameter("retries", int, required=False, default_expression="3"),
        _parameter("clock", Clock, required=False),
    )

    plan = _planner(config, repository).build(repository)

    assert plan.arguments == (
        ArgumentPlan(name="config", kind=ParameterKind.NAMED, expression="get_config()"),
        ArgumentPlan(name="table", kind=ParameterKind.NAMED, expression="'default-value'"),
        ArgumentPlan(name="retries", kind=ParameterKind.NAMED, expression="3"),
    )
    assert plan.dependencies == (Config,)
    assert plan.accessor_imports == (
        ImportPlan(module="app.config_accessors", name="get_config"),
    )


def test_same_module_dependency_needs_no_import() -> None:
    config = _annotated(Config)
    repository = _annotated(Repository, _parameter("config", Config))

    plan = _planner(config, repository).build(repository)

    assert plan.accessor_imports == ()
    assert plan.arguments[0].render() == "config=get_config()"


def test_positional_only_parameters_render_without_name() -> None:
    annotated = _annotated(Config, _parameter("name", str, kind=ParameterKind.POSITIONAL))

    plan = _planner(annotated).build(annotated)

    assert plan.arguments[0].render() == "'default-value'"


def test_async_class_awaits_async_dependencies_only() -> None:
    config = _annotated(Config, policy=RegisterAs.SINGLETON)
    pool = _annotated(Pool, policy=RegisterAs.LAZY_SINGLETON_ASYNC)
    repository = _annotated(
        Repository,
        _parameter("pool", Pool),
        _parameter("config", Config),
        policy=RegisterAs.FACTORY_ASYNC,
    )

    plan = _planner(config, pool, repository).build(repository)

    assert plan.is_async is True
    assert [argument.expression for argument in plan.arguments] == [
        "await get_pool()",
        "get_config()",
    ]


def test_sync_class_depending_on_async_class_fails() -> None:
    pool = _annotated(Pool, policy=RegisterAs.SINGLETON_ASYNC)
    repository = _annotated(Repository, _parameter("pool", Pool), policy=RegisterAs.SINGLETON)

    with pytest.raises(GenerationError, match="SINGLETON class depends on SINGLETON_ASYNC") as info:
        _planner(pool, repository).build(repository)

    assert info.value.class_name == "Repository"
    assert info.value.location == "app/services.py:10"


def test_required_unmanaged_class_parameter_fails() -> None:
    annotated = _annotated(Repository, _parameter("clock", Clock))

    with pytest.raises(GenerationError, match="'clock' of type 'Clock' is not marked"):
        _planner(annotated).build(annotated)


def test_omitted_positional_default_before_required_positional_fails() -> None:
    annotated = _annotated(
        Repository,
        _parameter("clock", Clock, kind=ParameterKind.POSITIONAL, required=False),
        _parameter("name", str, kind=ParameterKind.POSITIONAL),
    )

    with pytest.raises(GenerationError, match="positional-only parameter 'clock'"):
        _planner(annotated).build(annotated)


def test_constructor_error_is_reported() -> None:
    annotated = AnnotatedClass(
        target=Repository,
        class_name="Repository",
        module="app.services",
        policy=RegisterAs.FACTORY,
        parameters=None,
        constructor_error="abstract classes cannot be instantiated",
    )

    with pytest.raises(GenerationError, match="no usable constructor: abstract classes"):
        _planner(annotated).build(annotated)


def test_ambiguous_cross_module_accessor_is_imported_with_alias() -> None:
    first_config = type("Config", (), {})
    second_config = type("Config", (), {})
    first = _annotated(first_config, module="app.primary")
    second = _annotated(second_config, module="app.secondary")
    repository = _annotated(Repository, _parameter("config", first_config))

    plan = _planner(first, second, repository).build(repository)

    assert plan.accessor_imports == (
        ImportPlan(
            module="app.primary_accessors",
            name="get_config",
            alias="_app_primary_accessors_get_config",
        ),
    )
    assert plan.arguments[0].expression == "_app_primary_accessors_get_config()"


def test_build_artifact_sorts_class_names_and_imports() -> None:
    config = _annotated(Config, module="app.config")
    pool = _annotated(Pool, module="app.db")
    repository = _annotated(Repository, _parameter("pool", Pool), _parameter("config", Config))
    clock = _annotated(Clock, _parameter("config", Config))
    planner = _planner(config, pool, repository, clock)

    artifact = planner.build_artifact(
        artifact_module="app.services_accessors",
        source_module="app.services",
        source_file="app/services.py",
        accessors=[planner.build(repository), planner.build(clock)],
    )

    assert artifact.class_names == ("Clock", "Repository")
    assert [item.module for item in artifact.accessor_imports] == [
        "app.config_accessors",
        "app.db_accessors",
    ]
