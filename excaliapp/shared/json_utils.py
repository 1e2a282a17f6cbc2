"""
Key conversion between camelCase wire names and snake_case attributes.
"""

import re
from typing import Any, Literal

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

ConversionMode = Literal["camel_to_snake", "snake_to_camel"]


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def convert_keys(data: Any, mode: ConversionMode) -> Any:
    """
    Recursively converts dictionary keys between camelCase and snake_case.

    Args:
        data: A dict, list or scalar. Only dict keys are rewritten.
        mode: "camel_to_snake" or "snake_to_camel".

    Returns:
        A new structure with converted keys; scalars are returned unchanged.
    """
    if mode == "camel_to_snake":
        convert = camel_to_snake
    elif mode == "snake_to_camel":
        convert = snake_to_camel
    else:
        raise ValueError(f"Unknown conversion mode: {mode}")

    if isinstance(data, dict):
        return {
            convert(key) if isinstance(key, str) else key: convert_keys(value, mode)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [convert_keys(item, mode) for item in data]
    return data
