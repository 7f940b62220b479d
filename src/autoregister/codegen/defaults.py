from __future__ import annotations

import collections.abc
from typing import Any, Literal, get_args, get_origin

from autoregister.codegen.classifier import is_optional, strip_annotated
from autoregister.introspection import literal_source
from autoregister.model import ConstructorParameter

DEFAULT_STRING_PLACEHOLDER = "default-value"

# First matching substring of the lowercased parameter name wins.
STRING_PLACEHOLDERS: tuple[tuple[str, str], ...] = (
    ("connection", "postgresql://localhost:5432/app"),
    ("url", "https://example.com"),
    ("secret", "your-secret"),
    ("token", "your-token"),
    ("api", "your-api-key"),
    ("id", "default-id"),
)

_LITERALS_BY_TYPE: dict[Any, str] = {
    bool: "False",
    int: "0",
    float: "0.0",
    complex: "0j",
    bytes: 'b""',
    list: "[]",
    collections.abc.Sequence: "[]",
    collections.abc.MutableSequence: "[]",
    collections.abc.Collection: "[]",
    collections.abc.Iterable: "[]",
    tuple: "()",
    set: "set()",
    collections.abc.Set: "set()",
    collections.abc.MutableSet: "set()",
    frozenset: "frozenset()",
    dict: "{}",
    collections.abc.Mapping: "{}",
    collections.abc.MutableMapping: "{}",
}


class DefaultSynthesizer:
    """Pick the literal passed for a value parameter in a generated constructor call."""

    def synthesize(self, parameter: ConstructorParameter) -> str | None:
        """Return a literal expression for ``parameter``.

        A literal default declared by the constructor is reused verbatim. A
        non-literal default yields ``None``: the argument is omitted so the
        constructor applies its own default. Required parameters get a literal
        chosen by declared type.
        """
        if parameter.default_expression is not None:
            return parameter.default_expression
        if not parameter.required:
            return None

        annotation = strip_annotated(parameter.annotation)
        if is_optional(annotation):
            return "None"
        if annotation is str:
            return repr(self.string_placeholder(parameter.name))

        origin = get_origin(annotation)
        if origin is Literal:
            return self._first_literal(annotation)

        base = origin if origin is not None else annotation
        try:
            return _LITERALS_BY_TYPE.get(base, "None")
        except TypeError:
            return "None"

    def string_placeholder(self, name: str) -> str:
        """Return the placeholder string for a required ``str`` parameter named ``name``."""
        lowered = name.lower()
        for fragment, placeholder in STRING_PLACEHOLDERS:
            if fragment in lowered:
                return placeholder
        return DEFAULT_STRING_PLACEHOLDER

    def _first_literal(self, annotation: Any) -> str:
        for value in get_args(annotation):
            source = literal_source(value)
            if source is not None:
                return source
        return "None"
