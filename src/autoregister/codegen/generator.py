from __future__ import annotations

import keyword
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from autoregister.codegen.classifier import ParameterClassifier
from autoregister.codegen.defaults import DefaultSynthesizer
from autoregister.codegen.planner import AccessorPlan, AccessorPlanner
from autoregister.codegen.renderer import AccessorRenderer
from autoregister.exceptions import GenerationError
from autoregister.model import AnnotatedClass, GeneratedAccessor, ManagedClass
from autoregister.settings import GeneratorSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of one generation pass."""

    artifacts: dict[str, str] = field(default_factory=dict)
    """Artifact module name -> generated module text."""
    artifact_sources: dict[str, str | None] = field(default_factory=dict)
    """Artifact module name -> source file of the module it was generated for."""
    accessors: tuple[GeneratedAccessor, ...] = ()
    diagnostics: tuple[GenerationError, ...] = ()

    @property
    def ok(self) -> bool:
        """Return whether every class produced an accessor."""
        return not self.diagnostics


class AccessorGenerator:
    """Turn annotated classes into accessor functions grouped per source module.

    One ``run_pass`` call is one build pass: it deduplicates its input, builds
    the capability map, plans every class, drops classes whose dependencies
    failed or form a cycle, and renders the surviving accessors. Failures are
    returned as diagnostics; they never abort the pass.
    """

    def __init__(
        self,
        settings: GeneratorSettings | None = None,
        *,
        classifier: ParameterClassifier | None = None,
        synthesizer: DefaultSynthesizer | None = None,
        renderer: AccessorRenderer | None = None,
    ) -> None:
        self._settings = settings or GeneratorSettings()
        self._classifier = classifier or ParameterClassifier()
        self._synthesizer = synthesizer or DefaultSynthesizer()
        self._renderer = renderer or AccessorRenderer()

    def build_managed_map(self, classes: Iterable[AnnotatedClass]) -> dict[type[Any], ManagedClass]:
        """Return the capability map for ``classes`` using the configured naming."""
        return AccessorPlanner.build_managed_map(
            classes,
            accessor_prefix=self._settings.accessor_prefix,
            artifact_suffix=self._settings.artifact_suffix,
        )

    def build_accessor(
        self,
        annotated: AnnotatedClass,
        managed: Mapping[type[Any], ManagedClass],
    ) -> GeneratedAccessor:
        """Generate the accessor for one class against an existing capability map.

        Raises:
            GenerationError: If the class cannot get an accessor.

        """
        plan = self._planner(managed).build(annotated)
        return self._to_generated(plan)

    def run_pass(self, classes: Iterable[AnnotatedClass]) -> BuildResult:
        """Generate every artifact for one build pass.

        Args:
            classes: Annotated classes in source order.

        """
        records = list(classes)
        unique, duplicate_errors = self._deduplicate(records)
        managed = self.build_managed_map(unique)
        planner = self._planner(managed)

        plans: dict[type[Any], AccessorPlan] = {}
        errors: dict[type[Any], GenerationError] = {}
        claimed_names: dict[tuple[str, str], str] = {}
        by_target = {annotated.target: annotated for annotated in unique}

        for annotated in unique:
            item = managed[annotated.target]
            name_error = self._check_accessor_name(annotated, item, claimed_names)
            if name_error is not None:
                errors[annotated.target] = name_error
                continue
            try:
                plans[annotated.target] = planner.build(annotated)
            except GenerationError as error:
                errors[annotated.target] = error

        self._propagate_failures(
            order=[annotated.target for annotated in unique],
            plans=plans,
            errors=errors,
            by_target=by_target,
        )
        for target in errors:
            plans.pop(target, None)

        result = self._assemble(
            unique=unique,
            plans=plans,
            planner=planner,
            diagnostics=self._ordered_diagnostics(records, errors, duplicate_errors),
        )
        logger.info(
            (
                "Accessor generation pass: class_count=%d accessor_count=%d "
                "artifact_count=%d diagnostic_count=%d"
            ),
            len(unique),
            len(result.accessors),
            len(result.artifacts),
            len(result.diagnostics),
        )
        return result

    def _planner(self, managed: Mapping[type[Any], ManagedClass]) -> AccessorPlanner:
        return AccessorPlanner(
            managed,
            classifier=self._classifier,
            synthesizer=self._synthesizer,
        )

    def _deduplicate(
        self,
        records: list[AnnotatedClass],
    ) -> tuple[list[AnnotatedClass], dict[int, GenerationError]]:
        processed: set[tuple[int, int]] = set()
        marker_by_target: dict[type[Any], int] = {}
        unique: list[AnnotatedClass] = []
        duplicate_errors: dict[int, GenerationError] = {}

        for index, annotated in enumerate(records):
            key = (id(annotated.target), id(annotated.marker))
            if key in processed:
                continue
            processed.add(key)
            if annotated.target in marker_by_target:
                duplicate_errors[index] = _error(
                    annotated,
                    "class already received an accessor from another AutoRegister marker",
                )
                continue
            marker_by_target[annotated.target] = id(annotated.marker)
            unique.append(annotated)

        return unique, duplicate_errors

    def _check_accessor_name(
        self,
        annotated: AnnotatedClass,
        item: ManagedClass,
        claimed_names: dict[tuple[str, str], str],
    ) -> GenerationError | None:
        if not item.accessor_name.isidentifier() or keyword.iskeyword(item.accessor_name):
            return _error(annotated, f"accessor name '{item.accessor_name}' is not an identifier")
        claim = (item.artifact_module, item.accessor_name)
        owner = claimed_names.get(claim)
        if owner is not None:
            return _error(
                annotated,
                f"accessor name '{item.accessor_name}' is already generated for '{owner}'",
            )
        claimed_names[claim] = item.class_name
        return None

    def _propagate_failures(
        self,
        *,
        order: list[type[Any]],
        plans: dict[type[Any], AccessorPlan],
        errors: dict[type[Any], GenerationError],
        by_target: dict[type[Any], AnnotatedClass],
    ) -> None:
        failed: dict[type[Any], bool] = {}
        in_progress: list[type[Any]] = []

        def visit(target: type[Any]) -> bool:
            known = failed.get(target)
            if known is not None:
                return known
            if target in in_progress:
                cycle = [*in_progress[in_progress.index(target) :], target]
                description = " -> ".join(member.__name__ for member in cycle)
                for member in cycle[:-1]:
                    errors.setdefault(
                        member,
                        _error(by_target[member], f"circular dependency: {description}"),
                    )
                return True
            if target in errors:
                failed[target] = True
                return True

            in_progress.append(target)
            failed_dependency: type[Any] | None = None
            for dependency in plans[target].dependencies:
                if visit(dependency):
                    failed_dependency = dependency
                    break
            in_progress.pop()

            if target not in errors and failed_dependency is not None:
                errors[target] = _error(
                    by_target[target],
                    (
                        f"depends on '{failed_dependency.__name__}', "
                        "whose accessor could not be generated"
                    ),
                )
            failed[target] = target in errors
            return failed[target]

        for target in order:
            visit(target)

    def _assemble(
        self,
        *,
        unique: list[AnnotatedClass],
        plans: dict[type[Any], AccessorPlan],
        planner: AccessorPlanner,
        diagnostics: tuple[GenerationError, ...],
    ) -> BuildResult:
        grouped: dict[str, list[AccessorPlan]] = {}
        first_class: dict[str, AnnotatedClass] = {}
        for annotated in unique:
            plan = plans.get(annotated.target)
            if plan is None:
                continue
            artifact_module = plan.managed.artifact_module
            grouped.setdefault(artifact_module, []).append(plan)
            first_class.setdefault(artifact_module, annotated)

        artifacts: dict[str, str] = {}
        artifact_sources: dict[str, str | None] = {}
        accessors: list[GeneratedAccessor] = []
        for artifact_module, accessor_plans in grouped.items():
            annotated = first_class[artifact_module]
            artifact_plan = planner.build_artifact(
                artifact_module=artifact_module,
                source_module=annotated.module,
                source_file=annotated.source_file,
                accessors=accessor_plans,
            )
            artifacts[artifact_module] = self._renderer.render_artifact(artifact_plan)
            artifact_sources[artifact_module] = annotated.source_file
            accessors.extend(self._to_generated(plan) for plan in accessor_plans)

        return BuildResult(
            artifacts=artifacts,
            artifact_sources=artifact_sources,
            accessors=tuple(accessors),
            diagnostics=diagnostics,
        )

    def _ordered_diagnostics(
        self,
        records: list[AnnotatedClass],
        errors: dict[type[Any], GenerationError],
        duplicate_errors: dict[int, GenerationError],
    ) -> tuple[GenerationError, ...]:
        reported: set[type[Any]] = set()
        diagnostics: list[GenerationError] = []
        for index, annotated in enumerate(records):
            duplicate_error = duplicate_errors.get(index)
            if duplicate_error is not None:
                diagnostics.append(duplicate_error)
                continue
            error = errors.get(annotated.target)
            if error is not None and annotated.target not in reported:
                reported.add(annotated.target)
                diagnostics.append(error)
        return tuple(diagnostics)

    def _to_generated(self, plan: AccessorPlan) -> GeneratedAccessor:
        return GeneratedAccessor(
            accessor_name=plan.managed.accessor_name,
            class_name=plan.managed.class_name,
            module=plan.managed.module,
            artifact_module=plan.managed.artifact_module,
            policy=plan.policy,
            is_async=plan.is_async,
            source=self._renderer.render_accessor(plan),
        )


def _error(annotated: AnnotatedClass, reason: str) -> GenerationError:
    return GenerationError(
        reason,
        class_name=annotated.class_name,
        module=annotated.module,
        source_file=annotated.source_file,
        source_line=annotated.source_line,
    )
