from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from jinja2 import Environment, StrictUndefined, Template

from autoregister.codegen.planner import AccessorPlan, ArtifactPlan, ImportPlan
from autoregister.codegen.templates import (
    ASYNC_ACCESSOR_TEMPLATE,
    MODULE_TEMPLATE,
    SOURCE_IMPORT_TEMPLATE,
    SYNC_ACCESSOR_TEMPLATE,
)

_INDENT = " " * 4
_CALL_DEPTH = 2
_GENERATOR_SOURCE = "autoregister.codegen.renderer.AccessorRenderer.render_artifact"


class AccessorRenderer:
    """Renderer for generated accessor modules."""

    def __init__(self) -> None:
        self._env = Environment(
            autoescape=False,  # noqa: S701 - renders Python source, not HTML
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )
        self._module_template = self._template(MODULE_TEMPLATE)
        self._source_import_template = self._template(SOURCE_IMPORT_TEMPLATE)
        self._sync_accessor_template = self._template(SYNC_ACCESSOR_TEMPLATE)
        self._async_accessor_template = self._template(ASYNC_ACCESSOR_TEMPLATE)

    def render_artifact(self, plan: ArtifactPlan) -> str:
        """Render the full module text for one artifact.

        Args:
            plan: Artifact plan produced by ``AccessorPlanner.build_artifact``.

        """
        accessors_block = "\n\n\n".join(self.render_accessor(accessor) for accessor in plan.accessors)
        rendered = self._module_template.render(
            module_docstring=self._render_module_docstring(plan=plan),
            imports_block=self._render_imports(plan=plan),
            accessors_block=accessors_block,
        )
        return f"{rendered.strip()}\n"

    def render_accessor(self, plan: AccessorPlan) -> str:
        """Render one accessor function, without imports."""
        template = self._async_accessor_template if plan.is_async else self._sync_accessor_template
        return template.render(
            accessor_name=plan.managed.accessor_name,
            class_name=plan.managed.class_name,
            constructor_call=self._render_constructor_call(plan=plan),
            policy_name=plan.policy.name,
        ).strip()

    def _render_module_docstring(self, *, plan: ArtifactPlan) -> str:
        lines = [
            f"Generated accessors for ``{plan.source_module}``.",
            "",
            "GENERATED CODE - DO NOT MODIFY BY HAND",
            f"Generated by: {_GENERATOR_SOURCE}",
            f"autoregister version used for generation: {self._resolve_version()}",
            "",
            f"- accessor count: {len(plan.accessors)}",
            f"- async accessor count: {sum(1 for accessor in plan.accessors if accessor.is_async)}",
            "",
        ]
        return "\n".join(lines)

    def _render_imports(self, *, plan: ArtifactPlan) -> str:
        blocks_by_module: dict[str, str] = {
            plan.source_module: self._render_import_block(
                module=plan.source_module,
                names=list(plan.class_names),
            ),
        }
        grouped: dict[str, list[ImportPlan]] = {}
        for item in plan.accessor_imports:
            grouped.setdefault(item.module, []).append(item)
        for module, items in grouped.items():
            blocks_by_module[module] = self._render_import_block(
                module=module,
                names=[item.render_name() for item in items],
            )
        return "\n".join(blocks_by_module[module] for module in sorted(blocks_by_module))

    def _render_import_block(self, *, module: str, names: list[str]) -> str:
        return self._source_import_template.render(module=module, names=names).strip()

    def _render_constructor_call(self, *, plan: AccessorPlan) -> str:
        class_name = plan.managed.class_name
        if not plan.arguments:
            return f"{class_name}()"
        argument_indent = _INDENT * (_CALL_DEPTH + 1)
        lines = [f"{class_name}("]
        lines.extend(f"{argument_indent}{argument.render()}," for argument in plan.arguments)
        lines.append(f"{_INDENT * _CALL_DEPTH})")
        return "\n".join(lines)

    def _resolve_version(self) -> str:
        try:
            return version("autoregister")
        except PackageNotFoundError:
            return "unknown"

    def _template(self, text: str) -> Template:
        return self._env.from_string(text)
