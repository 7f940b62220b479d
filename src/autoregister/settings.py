from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeneratorSettings(BaseSettings):
    """Build-time configuration for accessor generation.

    Values come from keyword arguments or ``AUTOREGISTER_*`` environment
    variables, for example ``AUTOREGISTER_CACHE_DIR=build/generated``.
    """

    model_config = SettingsConfigDict(env_prefix="AUTOREGISTER_", frozen=True)

    cache_dir: Path = Path(".autoregister_cache")
    """Build cache root; every artifact is written below it."""

    write_beside_sources: bool = True
    """Also write each artifact next to its source module, best-effort."""

    artifact_suffix: str = "_accessors"
    """Appended to a source module name to form the artifact module name."""

    accessor_prefix: str = "get_"
    """Prepended to the snake_case class name to form the accessor name."""

    @field_validator("artifact_suffix")
    @classmethod
    def _validate_artifact_suffix(cls, value: str) -> str:
        if not value or not f"m{value}".isidentifier():
            msg = f"artifact_suffix must extend a module name into an identifier, got {value!r}."
            raise ValueError(msg)
        return value

    @field_validator("accessor_prefix")
    @classmethod
    def _validate_accessor_prefix(cls, value: str) -> str:
        if not f"{value}x".isidentifier():
            msg = f"accessor_prefix must start a valid identifier, got {value!r}."
            raise ValueError(msg)
        return value
