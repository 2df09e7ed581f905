# ============================================================================
# PageVital - Serialization Utilities
#
# Purpose: Convert snapshots, baselines and alerts to and from JSON
# Inputs: Models or JSON strings
# Outputs: JSON strings (camelCase keys) or validated models
# Dependencies: json, pydantic
# Usage: json_str = snapshot_to_json(snapshot)
#
# Changelog:
#   2026-09-02: Initial serialization for snapshots
#   2026-09-09: Generic dump_models/load_models for stored JSON arrays;
#               malformed array items are skipped and counted
# ============================================================================

import json
from typing import Any, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from PageVital.reporting.schema import MetricsSnapshot

ModelT = TypeVar("ModelT", bound=BaseModel)


def snapshot_to_json(snapshot: MetricsSnapshot, indent: Optional[int] = None) -> str:
    """
    Serialize a snapshot to JSON.

    Args:
        snapshot: Snapshot to serialize
        indent: JSON indentation (None for compact, 2 for pretty-print)

    Returns:
        JSON string with camelCase keys
    """
    data = snapshot.model_dump(mode="json", by_alias=True)
    if indent is None:
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(data, indent=indent, ensure_ascii=False)


def snapshot_from_json(json_str: str) -> MetricsSnapshot:
    """
    Deserialize a snapshot. Accepts camelCase or snake_case keys.

    Raises:
        ValueError: If the JSON is malformed or fails validation
    """
    return MetricsSnapshot.model_validate_json(json_str)


def dump_models(models: Sequence[BaseModel]) -> str:
    """Serialize a list of models as a compact JSON array."""
    return json.dumps(
        [m.model_dump(mode="json", by_alias=True) for m in models],
        separators=(",", ":"),
        ensure_ascii=False,
    )


def load_models(raw: Optional[str], model: Type[ModelT]) -> Tuple[List[ModelT], int]:
    """
    Parse a stored JSON array into models.

    Anything that is not a JSON array yields an empty list; array items that
    fail validation are skipped.

    Returns:
        (models, skipped_count)
    """
    if not raw:
        return [], 0
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError:
        return [], 0
    if not isinstance(data, list):
        return [], 0

    items: List[ModelT] = []
    skipped = 0
    for item in data:
        try:
            items.append(model.model_validate(item))
        except ValidationError:
            skipped += 1
    return items, skipped
