"""
Utility functions shared across the layout intelligence package.

The extraction collaborator speaks camelCase JSON while hand-written
Python fixtures tend to use snake_case; these helpers let every
``from_dict`` accept both.
"""

import re
from typing import Any, Mapping

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def snake_case(name: str) -> str:
    """Convert ``frameIndex`` to ``frame_index``."""
    return _CAMEL_BOUNDARY.sub('_', name).lower()


def read_key(data: Mapping[str, Any], camel: str, default: Any = None) -> Any:
    """Read a key in camelCase or snake_case form."""
    if camel in data:
        return data[camel]
    return data.get(snake_case(camel), default)


def as_number(value: Any, name: str) -> float:
    """
    Coerce a JSON number to float.

    Raises:
        ValueError: For missing, boolean or non-numeric values
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)
