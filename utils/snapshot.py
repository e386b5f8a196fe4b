"""
Boundary adapters producing the key/value snapshot the collector reads.

A snapshot mirrors browser session storage: keys map to strings, JSON
strings, or (when posted by an API client) already-decoded objects.
"""
import json
from typing import Any, Dict, Mapping

from core.errors import BadRequest


def snapshot_from_mapping(obj: Any) -> Dict[str, Any]:
    """Snapshot from a request body. Nested keys are kept; None values are dropped."""
    if not isinstance(obj, Mapping):
        raise BadRequest("Snapshot must be a JSON object")
    snap: Dict[str, Any] = {}
    for key, value in obj.items():
        if value is None:
            continue
        if isinstance(value, bool):
            # sessionStorage stores booleans as "true"/"false"
            snap[str(key)] = "true" if value else "false"
        else:
            snap[str(key)] = value
    return snap


def load_snapshot(path: str) -> Dict[str, Any]:
    """Snapshot from a JSON dump of session storage, e.g. JSON.stringify(sessionStorage)."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return snapshot_from_mapping(data)
