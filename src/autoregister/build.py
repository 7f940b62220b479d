from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from types import ModuleType

from autoregister.codegen.generator import AccessorGenerator, BuildResult
from autoregister.emission import EmissionSink, FileEmissionSink
from autoregister.introspection import ClassInspector
from autoregister.model import AnnotatedClass
from autoregister.settings import GeneratorSettings

logger = logging.getLogger(__name__)


def collect_classes(
    modules: Iterable[str | ModuleType],
    *,
    inspector: ClassInspector | None = None,
) -> list[AnnotatedClass]:
    """Import ``modules`` and return their annotated classes in module, then source order."""
    inspector = inspector or ClassInspector()
    classes: list[AnnotatedClass] = []
    for module in modules:
        imported = importlib.import_module(module) if isinstance(module, str) else module
        classes.extend(inspector.inspect_module(imported))
    return classes


def build_modules(
    modules: Iterable[str | ModuleType],
    *,
    settings: GeneratorSettings | None = None,
    sink: EmissionSink | None = None,
) -> BuildResult:
    """Run one build pass over ``modules`` and emit every generated artifact.

    Generation errors are logged with the class location and returned in
    ``BuildResult.diagnostics``; classes without errors are still emitted.

    Args:
        modules: Module names or module objects holding ``auto_register`` classes.
        settings: Generation settings. Defaults read ``AUTOREGISTER_*`` variables.
        sink: Artifact destination. Defaults to a ``FileEmissionSink``.

    Examples:
        .. code-block:: python

            result = build_modules(["app.config", "app.services"])
            for diagnostic in result.diagnostics:
                print(diagnostic.location, diagnostic.reason)

    """
    settings = settings or GeneratorSettings()
    sink = sink if sink is not None else FileEmissionSink(settings)

    result = AccessorGenerator(settings).run_pass(collect_classes(modules))
    for diagnostic in result.diagnostics:
        logger.error("%s: %s", diagnostic.location, diagnostic)
    for artifact_id, content in result.artifacts.items():
        sink.emit(artifact_id, content, source_file=result.artifact_sources.get(artifact_id))
    return result
