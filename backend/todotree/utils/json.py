"""JSON helpers for list-valued database columns."""

import json


def parse_id_list(raw: str | list | None) -> list[str]:
    """Parse a JSON array of identifiers, returning [] for anything else.

    Accepts lists as-is. Returns [] for: None, empty string, invalid JSON,
    non-list JSON. Non-string entries are dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        if not raw:
            return []
        try:
            raw = json.loads(raw)
        except (ValueError, TypeError):
            return []
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, str)]


def id_list_str(ids: list[str]) -> str:
    """Serialize identifiers for the sub_todos column."""
    return json.dumps(list(ids))
