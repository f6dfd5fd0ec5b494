"""JSON schema clean-up for function declarations."""

from typing import Any, Dict

DROPPED_KEYS = {'title', 'additionalProperties', 'default', '$defs', 'definitions'}


def _resolve_ref(ref: str, definitions: Dict[str, Any]) -> Dict[str, Any]:
    return definitions[ref.split('/')[-1]]


def sanitize_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten a pydantic JSON schema into the subset every provider accepts.

    - inlines $ref definitions
    - collapses Optional[X] (anyOf [X, null]) to X
    - drops titles, defaults and additionalProperties
    """
    definitions = schema.get('$defs') or schema.get('definitions') or {}

    def clean(node: Any) -> Any:
        if isinstance(node, list):
            return [clean(item) for item in node]
        if not isinstance(node, dict):
            return node

        if '$ref' in node:
            return clean(_resolve_ref(node['$ref'], definitions))

        if 'anyOf' in node:
            options = [option for option in node['anyOf'] if option.get('type') != 'null']
            if len(options) == 1:
                merged = {k: v for k, v in node.items() if k != 'anyOf'}
                merged.update(options[0])
                return clean(merged)

        return {key: clean(value) for key, value in node.items() if key not in DROPPED_KEYS}

    return clean(schema)
