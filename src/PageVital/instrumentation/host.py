# ============================================================================
# PageVital - Host Access Helpers
#
# Purpose: Read fields from whatever the host page adapter provides
#          (objects or dicts, snake_case or camelCase) without raising
# Inputs: Arbitrary host objects / performance entries
# Outputs: Field values or defaults
# Dependencies: math, collections.abc
# Usage: read_number(entry, "processing_start") tries processing_start, then processingStart
# ============================================================================

import math
from collections.abc import Mapping
from typing import Any, Iterable, List


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _variants(names: Iterable[str]) -> List[str]:
    out: List[str] = []
    for name in names:
        for candidate in (name, _camel(name)):
            if candidate not in out:
                out.append(candidate)
    return out


def read_field(obj: Any, *names: str, default: Any = None) -> Any:
    """
    First non-None value among the given field names.

    Host adapters may raise from property access (a detached frame, a revoked
    proxy); such fields are treated as absent.
    """
    if obj is None:
        return default
    for name in _variants(names):
        try:
            if isinstance(obj, Mapping):
                value = obj.get(name)
            else:
                value = getattr(obj, name, None)
        except Exception:
            continue
        if value is not None:
            return value
    return default


def read_number(obj: Any, *names: str, default: float = 0.0) -> float:
    """Like read_field, but coerces to a finite non-negative float."""
    value = read_field(obj, *names)
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number < 0:
        return default
    return number


def read_optional_number(obj: Any, *names: str) -> Any:
    """Finite non-negative float, or None when the field is missing or invalid."""
    value = read_number(obj, *names, default=-1.0)
    return None if value < 0 else value
