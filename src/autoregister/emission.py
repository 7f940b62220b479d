from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from autoregister.settings import GeneratorSettings

logger = logging.getLogger(__name__)


class EmissionSink(Protocol):
    """Destination for generated artifacts."""

    def emit(self, artifact_id: str, content: str, *, source_file: str | None = None) -> None:
        """Store ``content`` for the artifact module named ``artifact_id``.

        Args:
            artifact_id: Dotted module name of the artifact.
            content: Generated module text.
            source_file: Source file of the module the artifact was generated for.

        """
        ...


class MemoryEmissionSink:
    """Keep emitted artifacts in memory, keyed by artifact module name."""

    def __init__(self) -> None:
        self.artifacts: dict[str, str] = {}

    def emit(self, artifact_id: str, content: str, *, source_file: str | None = None) -> None:
        """Store ``content`` under ``artifact_id``; ``source_file`` is ignored."""
        _ = source_file
        self.artifacts[artifact_id] = content


class FileEmissionSink:
    """Write artifacts to the build cache and, best-effort, beside their sources.

    The cache copy lives at ``<cache_dir>/<artifact/module/path>.py`` and failing
    to write it raises. The copy beside the source module is a convenience for
    importing and reading generated code; failures there are logged and ignored.
    """

    def __init__(self, settings: GeneratorSettings | None = None) -> None:
        self._settings = settings or GeneratorSettings()

    def emit(self, artifact_id: str, content: str, *, source_file: str | None = None) -> None:
        """Write ``content`` for ``artifact_id``.

        Raises:
            OSError: If the build cache copy cannot be written.

        """
        cache_path = self.cache_path(artifact_id)
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s to %s", artifact_id, cache_path)

        if not self._settings.write_beside_sources or source_file is None:
            return
        beside_path = self.beside_source_path(artifact_id, source_file)
        try:
            beside_path.write_text(content, encoding="utf-8")
        except OSError as error:
            logger.warning(
                "Could not write %s beside its source (%s): %s",
                artifact_id,
                beside_path,
                error,
            )
        else:
            logger.debug("Wrote %s to %s", artifact_id, beside_path)

    def cache_path(self, artifact_id: str) -> Path:
        """Return the build cache location of ``artifact_id``."""
        return self._settings.cache_dir.joinpath(*artifact_id.split(".")).with_suffix(".py")

    def beside_source_path(self, artifact_id: str, source_file: str) -> Path:
        """Return the location of ``artifact_id`` next to ``source_file``."""
        leaf = artifact_id.rsplit(".", maxsplit=1)[-1]
        source_path = Path(source_file)
        # A package's artifact is a sibling of the package directory.
        if source_path.name == "__init__.py":
            source_path = source_path.parent
        return source_path.with_name(f"{leaf}.py")
