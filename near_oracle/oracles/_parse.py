"""Strict integer parsing for oracle JSON payloads."""
import re
from typing import Any

from ..errors import MalformedResponseError

_INT_RE = re.compile(r"-?[0-9]+")


def parse_int(data: dict[str, Any], key: str, context: str) -> int:
    """Read ``key`` as an int; JSON numbers and decimal strings are accepted."""
    if key not in data:
        raise MalformedResponseError(f"{context}: missing '{key}'")
    value = data[key]
    if isinstance(value, bool):
        raise MalformedResponseError(f"{context}: '{key}' is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_RE.fullmatch(value):
        return int(value)
    raise MalformedResponseError(f"{context}: '{key}' is not an integer: {value!r}")
