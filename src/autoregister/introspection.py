from __future__ import annotations

import ast
import inspect
import logging
import re
from types import ModuleType
from typing import Any, get_type_hints

from autoregister.markers import AutoRegister, find_marker
from autoregister.model import AnnotatedClass, ConstructorParameter, ParameterKind
from autoregister.policies import RegisterAs

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_SKIPPED_PARAMETER_KINDS = (
    inspect.Parameter.VAR_POSITIONAL,
    inspect.Parameter.VAR_KEYWORD,
)


class ClassInspector:
    """Read ``AutoRegister``-marked classes into ``AnnotatedClass`` records.

    The inspector works on imported modules: constructor signatures come from
    ``inspect.signature`` and annotations from ``typing.get_type_hints``.
    Problems with a constructor are recorded on the returned record instead of
    raised, so the generator can report them per class.
    """

    def inspect_module(self, module: ModuleType) -> list[AnnotatedClass]:
        """Return records for marked classes defined in ``module``, in source order."""
        classes = [
            value
            for value in vars(module).values()
            if inspect.isclass(value)
            and value.__module__ == module.__name__
            and find_marker(value) is not None
        ]
        records = [self.inspect_class(cls) for cls in classes]
        return sorted(records, key=lambda record: (record.source_line or 0, record.class_name))

    def inspect_class(self, cls: type[Any]) -> AnnotatedClass:
        """Return the record for one class.

        Classes without a marker are read as if marked with the default policy.
        """
        marker = find_marker(cls)
        parameters, constructor_error = self._read_parameters(cls)
        source_file, source_line = _source_location(cls)
        return AnnotatedClass(
            target=cls,
            class_name=cls.__name__,
            module=cls.__module__,
            policy=self._read_policy(cls, marker),
            parameters=parameters,
            marker=marker,
            constructor_error=constructor_error,
            source_file=source_file,
            source_line=source_line,
        )

    def _read_policy(self, cls: type[Any], marker: AutoRegister | None) -> RegisterAs | None:
        if marker is None:
            return None
        value = marker.policy
        if value is None or isinstance(value, RegisterAs):
            return value

        normalized = _CAMEL_BOUNDARY.sub("_", str(value).strip()).lower()
        try:
            return RegisterAs(normalized)
        except ValueError:
            logger.warning(
                "Unrecognized registration policy %r on %s.%s; using %s",
                value,
                cls.__module__,
                cls.__qualname__,
                RegisterAs.FACTORY.value,
            )
            return None

    def _read_parameters(
        self,
        cls: type[Any],
    ) -> tuple[tuple[ConstructorParameter, ...] | None, str | None]:
        if inspect.isabstract(cls):
            return None, "abstract classes cannot be instantiated"

        init = cls.__init__
        if init is object.__init__ and cls.__new__ is object.__new__:
            return (), None

        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError) as error:
            return None, f"constructor signature is not readable ({error})"

        try:
            type_hints = get_type_hints(init) if init is not object.__init__ else {}
        except (NameError, TypeError) as error:
            return None, f"constructor annotations cannot be resolved ({error})"

        parameters = tuple(
            self._read_parameter(parameter, type_hints)
            for parameter in signature.parameters.values()
            if parameter.kind not in _SKIPPED_PARAMETER_KINDS
        )
        return parameters, None

    def _read_parameter(
        self,
        parameter: inspect.Parameter,
        type_hints: dict[str, Any],
    ) -> ConstructorParameter:
        required = parameter.default is inspect.Parameter.empty
        return ConstructorParameter(
            name=parameter.name,
            annotation=type_hints.get(parameter.name, Any),
            kind=(
                ParameterKind.POSITIONAL
                if parameter.kind is inspect.Parameter.POSITIONAL_ONLY
                else ParameterKind.NAMED
            ),
            required=required,
            default_expression=None if required else literal_source(parameter.default),
        )


def literal_source(value: object) -> str | None:
    """Return Python source for ``value`` when it round-trips as a literal."""
    try:
        source = repr(value)
        parsed = ast.literal_eval(source)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        return None
    if type(parsed) is not type(value) or parsed != value:
        return None
    return source


def _source_location(cls: type[Any]) -> tuple[str | None, int | None]:
    try:
        source_file = inspect.getsourcefile(cls)
    except TypeError:
        return None, None
    try:
        _, source_line = inspect.getsourcelines(cls)
    except (OSError, TypeError):
        return source_file, None
    return source_file, source_line
