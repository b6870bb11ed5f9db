"""Cheap classification of raw generator output."""

from __future__ import annotations

import json

FORMAT_JSON = "json"
FORMAT_TEXT = "text"
FORMAT_MIXED = "mixed"


def detect_format(raw: str | None) -> str:
    """Return `json`, `mixed` or `text` for the given output.

    Only a hint: a `json` verdict may still be an array, and `mixed` covers
    both broken JSON and prose with embedded objects.
    """

    trimmed = (raw or "").strip()
    if trimmed.startswith(("{", "[")):
        try:
            json.loads(trimmed)
        except ValueError:
            return FORMAT_MIXED
        return FORMAT_JSON
    if '"' in trimmed and ":" in trimmed and "{" in trimmed:
        return FORMAT_MIXED
    return FORMAT_TEXT
