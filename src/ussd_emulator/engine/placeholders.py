"""Placeholder substitution for analytics event properties.

`$input` refers to the most recent free-text value captured through a wildcard
option, `$input_prev` to the one before it and `$input_prev2` to the one
before that. Placeholders without enough captured input pass through as-is.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from ussd_emulator.engine.core.models import PropertyValue


PLACEHOLDER_OFFSETS = {
    "$input": 1,
    "$input_prev": 2,
    "$input_prev2": 3,
}


def resolve_properties(
    properties: Mapping[str, PropertyValue] | None,
    input_buffer: Sequence[str],
) -> dict[str, PropertyValue]:
    if not properties:
        return {}

    resolved: dict[str, PropertyValue] = {}
    for key, value in properties.items():
        offset = PLACEHOLDER_OFFSETS.get(value) if isinstance(value, str) else None
        if offset is not None and len(input_buffer) >= offset:
            resolved[key] = input_buffer[-offset]
        else:
            resolved[key] = value
    return resolved
