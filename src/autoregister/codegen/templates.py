from textwrap import dedent

MODULE_TEMPLATE = dedent(
    '''
    """{{ module_docstring }}"""

    from __future__ import annotations

    from autoregister import RegisterAs, registry_context

    {{ imports_block }}


    {{ accessors_block }}
    ''',
).strip()

SOURCE_IMPORT_TEMPLATE = dedent(
    """
    {% if names|length == 1 %}
    from {{ module }} import {{ names[0] }}
    {% else %}
    from {{ module }} import (
    {% for name in names %}
        {{ name }},
    {% endfor %}
    )
    {% endif %}
    """,
).strip()

SYNC_ACCESSOR_TEMPLATE = dedent(
    """
    def {{ accessor_name }}() -> {{ class_name }}:
        return registry_context.get_current().get_or_register(
            {{ class_name }},
            lambda: {{ constructor_call }},
            RegisterAs.{{ policy_name }},
        )
    """,
).strip()

ASYNC_ACCESSOR_TEMPLATE = dedent(
    """
    async def {{ accessor_name }}() -> {{ class_name }}:
        async def create() -> {{ class_name }}:
            return {{ constructor_call }}

        return await registry_context.get_current().get_or_register_async(
            {{ class_name }},
            create,
            RegisterAs.{{ policy_name }},
        )
    """,
).strip()
