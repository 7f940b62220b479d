from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from autoregister.codegen.classifier import ParameterClassifier
from autoregister.codegen.defaults import DefaultSynthesizer
from autoregister.exceptions import GenerationError
from autoregister.model import (
    AnnotatedClass,
    DependencyParam,
    ManagedClass,
    ParameterKind,
)
from autoregister.policies import RegisterAs

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """Return ``name`` converted from CapWords to snake_case."""
    return _WORD_BOUNDARY.sub("_", name).lower()


def accessor_name_for(class_name: str, prefix: str) -> str:
    """Return the accessor function name generated for ``class_name``."""
    return f"{prefix}{snake_case(class_name)}"


def artifact_module_for(module: str, suffix: str) -> str:
    """Return the module name of the artifact generated for ``module``."""
    return f"{module}{suffix}"


@dataclass(frozen=True, slots=True)
class ImportPlan:
    """One ``from module import name`` line of a generated artifact."""

    module: str
    name: str
    alias: str | None = None

    @property
    def bound_name(self) -> str:
        """Name the import binds in the artifact namespace."""
        return self.alias or self.name

    def render_name(self) -> str:
        """Return the imported name with its alias clause."""
        if self.alias is None:
            return self.name
        return f"{self.name} as {self.alias}"


@dataclass(frozen=True, slots=True)
class ArgumentPlan:
    """One argument of the generated constructor call."""

    name: str
    kind: ParameterKind
    expression: str

    def render(self) -> str:
        """Return the argument as written in the call."""
        if self.kind is ParameterKind.POSITIONAL:
            return self.expression
        return f"{self.name}={self.expression}"


@dataclass(frozen=True, slots=True)
class AccessorPlan:
    """Deterministic metadata consumed by the renderer for one accessor."""

    managed: ManagedClass
    is_async: bool
    arguments: tuple[ArgumentPlan, ...]
    dependencies: tuple[type[Any], ...]
    accessor_imports: tuple[ImportPlan, ...]

    @property
    def policy(self) -> RegisterAs:
        """Policy passed to the registry by the accessor."""
        return self.managed.policy


@dataclass(frozen=True, slots=True)
class ArtifactPlan:
    """Deterministic metadata consumed by the renderer for one generated module."""

    artifact_module: str
    source_module: str
    source_file: str | None
    class_names: tuple[str, ...]
    accessor_imports: tuple[ImportPlan, ...]
    accessors: tuple[AccessorPlan, ...]


class AccessorPlanner:
    """Build accessor plans for the annotated classes of one pass.

    The planner owns the per-pass capability map: every class that will get an
    accessor is listed as a ``ManagedClass``, and parameters are classified
    against that map rather than against type names.
    """

    def __init__(
        self,
        managed: Mapping[type[Any], ManagedClass],
        *,
        classifier: ParameterClassifier | None = None,
        synthesizer: DefaultSynthesizer | None = None,
    ) -> None:
        self._managed = managed
        self._classifier = classifier or ParameterClassifier()
        self._synthesizer = synthesizer or DefaultSynthesizer()
        accessor_counts = Counter(item.accessor_name for item in managed.values())
        self._ambiguous_accessor_names = {
            name for name, count in accessor_counts.items() if count > 1
        }

    @staticmethod
    def build_managed_map(
        classes: Iterable[AnnotatedClass],
        *,
        accessor_prefix: str,
        artifact_suffix: str,
    ) -> dict[type[Any], ManagedClass]:
        """Return the capability map for ``classes``; the first record per class wins."""
        managed: dict[type[Any], ManagedClass] = {}
        for annotated in classes:
            if annotated.target in managed:
                continue
            managed[annotated.target] = ManagedClass(
                target=annotated.target,
                class_name=annotated.class_name,
                module=annotated.module,
                accessor_name=accessor_name_for(annotated.class_name, accessor_prefix),
                artifact_module=artifact_module_for(annotated.module, artifact_suffix),
                policy=annotated.policy or RegisterAs.FACTORY,
            )
        return managed

    def build(self, annotated: AnnotatedClass) -> AccessorPlan:
        """Build the plan for one class.

        Raises:
            GenerationError: If the constructor is unusable or a sync policy
                depends on an async-policy class.

        """
        if annotated.parameters is None:
            raise self._error(annotated, f"no usable constructor: {annotated.constructor_error}")

        managed = self._managed[annotated.target]
        is_async = managed.policy.is_async
        arguments: list[ArgumentPlan] = []
        dependencies: list[type[Any]] = []
        accessor_imports: list[ImportPlan] = []
        omitted_positional: str | None = None

        for parameter in annotated.parameters:
            classified = self._classifier.classify(parameter, self._managed)
            if isinstance(classified, DependencyParam):
                dependency = self._managed[classified.dependency]
                if dependency.policy.is_async and not is_async:
                    raise self._error(
                        annotated,
                        (
                            f"{managed.policy.name} class depends on {dependency.policy.name} "
                            f"class '{dependency.class_name}' through parameter "
                            f"'{parameter.name}'; use an async policy or make the "
                            "dependency synchronous"
                        ),
                    )
                call_name, import_plan = self._dependency_call_name(managed, dependency)
                if import_plan is not None:
                    accessor_imports.append(import_plan)
                dependencies.append(dependency.target)
                expression = f"{call_name}()"
                if is_async and dependency.policy.is_async:
                    expression = f"await {expression}"
            else:
                if parameter.required and self._classifier.is_unmanaged_class(parameter):
                    raise self._error(
                        annotated,
                        (
                            f"no usable constructor: parameter '{parameter.name}' of type "
                            f"'{_type_name(parameter.annotation)}' is not marked with "
                            "auto_register and has no default"
                        ),
                    )
                expression = self._synthesizer.synthesize(parameter)
                if expression is None:
                    if parameter.kind is ParameterKind.POSITIONAL and omitted_positional is None:
                        omitted_positional = parameter.name
                    continue

            if parameter.kind is ParameterKind.POSITIONAL and omitted_positional is not None:
                raise self._error(
                    annotated,
                    (
                        f"no usable constructor: positional-only parameter "
                        f"'{omitted_positional}' has a non-literal default but "
                        f"'{parameter.name}' after it must be passed"
                    ),
                )
            arguments.append(
                ArgumentPlan(name=parameter.name, kind=parameter.kind, expression=expression),
            )

        return AccessorPlan(
            managed=managed,
            is_async=is_async,
            arguments=tuple(arguments),
            dependencies=tuple(dependencies),
            accessor_imports=tuple(accessor_imports),
        )

    def build_artifact(
        self,
        *,
        artifact_module: str,
        source_module: str,
        source_file: str | None,
        accessors: Iterable[AccessorPlan],
    ) -> ArtifactPlan:
        """Group accessor plans of one source module into an artifact plan."""
        accessor_plans = tuple(accessors)
        imports = {
            (item.module, item.name, item.alias): item
            for plan in accessor_plans
            for item in plan.accessor_imports
        }
        return ArtifactPlan(
            artifact_module=artifact_module,
            source_module=source_module,
            source_file=source_file,
            class_names=tuple(sorted({plan.managed.class_name for plan in accessor_plans})),
            accessor_imports=tuple(imports[key] for key in sorted(imports, key=_import_sort_key)),
            accessors=accessor_plans,
        )

    def _dependency_call_name(
        self,
        owner: ManagedClass,
        dependency: ManagedClass,
    ) -> tuple[str, ImportPlan | None]:
        if dependency.artifact_module == owner.artifact_module:
            return dependency.accessor_name, None
        alias = None
        if dependency.accessor_name in self._ambiguous_accessor_names:
            alias = "_{}_{}".format(
                dependency.artifact_module.replace(".", "_"),
                dependency.accessor_name,
            )
        import_plan = ImportPlan(
            module=dependency.artifact_module,
            name=dependency.accessor_name,
            alias=alias,
        )
        return import_plan.bound_name, import_plan

    def _error(self, annotated: AnnotatedClass, reason: str) -> GenerationError:
        return GenerationError(
            reason,
            class_name=annotated.class_name,
            module=annotated.module,
            source_file=annotated.source_file,
            source_line=annotated.source_line,
        )


def _import_sort_key(key: tuple[str, str, str | None]) -> tuple[str, str, str]:
    module, name, alias = key
    return module, name, alias or ""


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__qualname__", None) or repr(annotation)
