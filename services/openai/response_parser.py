"""Helpers to parse Responses API outputs."""

import json
from typing import Any, Dict, List, Optional


def parse_function_call(response: Any, *, tool_name: str) -> Dict[str, Any]:
    """Extract the decoded function call arguments for the specified tool name."""
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) == "function_call" and getattr(item, "name", None) == tool_name:
            return json.loads(getattr(item, "arguments", "{}") or "{}")
    raise RuntimeError(f"No function_call output for '{tool_name}' found in Responses API output.")


def select_labels(arguments: Dict[str, Any], *, max_labels: int, min_confidence: float) -> List[str]:
    """Return label names at or above `min_confidence`, most confident first, capped at `max_labels`.

    Duplicate names keep their first (highest confidence) occurrence.
    """
    entries = []
    for entry in arguments.get("labels") or []:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "").strip()
        try:
            confidence = float(entry.get("confidence", 0))
        except (TypeError, ValueError):
            continue
        if name and confidence >= min_confidence:
            entries.append((confidence, name))

    entries.sort(key=lambda pair: pair[0], reverse=True)
    labels: List[str] = []
    for _, name in entries:
        if name not in labels:
            labels.append(name)
        if len(labels) >= max_labels:
            break
    return labels


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "input_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "output_tokens", None) if usage else None,
    }
