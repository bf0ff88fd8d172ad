"""Value normalization with explicit comparison rules.

Two property values are considered equal iff their normalized forms are
equal. Normalized forms are tagged tuples so that values of different shapes
never collide (the list ``["a"]`` is not the string ``"a"``).

Rules:
- None/absent -> ABSENT sentinel (never equal to an empty string)
- bool -> "Yes"/"No" label, then string rules (True == "yes")
- str -> NFC, trimmed, internal whitespace collapsed, case-folded
- int/float -> direct numeric equality
- list/tuple/set -> multiset of normalized elements (order-insensitive),
  unless ``ordered=True``
- dict -> key-sorted canonical JSON of normalized values
- anything else -> str() coercion

Normalization never raises. A value that cannot be serialized (circular
structure, exotic type inside a dict) degrades to its ``str()`` form and the
optional ``on_fallback`` callback is told about it.
"""

import json
import logging
import re
import unicodedata
from typing import Any, Callable, Hashable, Optional

logger = logging.getLogger(__name__)

EMPTY_DISPLAY = "<empty>"

_WHITESPACE_RUN = re.compile(r"\s+")


class _Absent:
    """Sentinel for null/absent property values."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class _CycleDetected(ValueError):
    pass


def bool_label(value: bool) -> str:
    return "Yes" if value else "No"


def normalize_text(value: str) -> str:
    """Canonical comparable form of a string."""
    text = unicodedata.normalize("NFC", value)
    return _WHITESPACE_RUN.sub(" ", text.strip()).casefold()


def _normalize(value: Any, ordered: bool, seen: set) -> Hashable:
    if value is None:
        return ABSENT
    if isinstance(value, bool):
        return ("s", normalize_text(bool_label(value)))
    if isinstance(value, (int, float)):
        # 5.0 and 5 must also tokenize alike inside arrays and objects
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return ("n", value)
    if isinstance(value, str):
        return ("s", normalize_text(value))

    if isinstance(value, (list, tuple, set, frozenset, dict)):
        marker = id(value)
        if marker in seen:
            raise _CycleDetected(f"circular reference in {type(value).__name__}")
        seen.add(marker)
        try:
            if isinstance(value, dict):
                body = {
                    str(k): _to_jsonable(_normalize(v, ordered, seen))
                    for k, v in value.items()
                }
                return ("m", json.dumps(body, sort_keys=True, ensure_ascii=False, separators=(",", ":")))
            elements = [_sort_token(_normalize(v, ordered, seen)) for v in value]
            if ordered and not isinstance(value, (set, frozenset)):
                return ("l", tuple(elements))
            return ("l", tuple(sorted(elements)))
        finally:
            seen.discard(marker)

    return ("s", str(value))


def _to_jsonable(form: Hashable) -> Any:
    if form is ABSENT:
        return None
    tag, payload = form
    if tag == "l":
        return list(payload)
    return payload


def _sort_token(form: Hashable) -> str:
    # Mixed-type arrays must still sort deterministically
    if form is ABSENT:
        return "0:"
    tag, payload = form
    if tag == "l":
        return "l:" + json.dumps(list(payload), ensure_ascii=False)
    return f"{tag}:{payload}"


def normalize_value(
    value: Any,
    *,
    ordered: bool = False,
    on_fallback: Optional[Callable[[Any, Exception], None]] = None,
) -> Hashable:
    """Normalize a property value into a hashable comparable form.

    Args:
        value: Raw property value as collected
        ordered: Treat sequences as order-sensitive
        on_fallback: Called with (value, error) when the value had to be
            coerced with str() because it could not be serialized

    Returns:
        ABSENT or a (tag, payload) tuple
    """
    try:
        return _normalize(value, ordered, set())
    except (TypeError, ValueError, RecursionError) as e:
        logger.debug("Falling back to str() for %s: %s", type(value).__name__, e)
        if on_fallback is not None:
            on_fallback(value, e)
        try:
            return ("x", str(value))
        except Exception:  # str() of a hostile object
            return ("x", object.__repr__(value))


def values_equal(source: Any, target: Any, *, ordered: bool = False) -> bool:
    return normalize_value(source, ordered=ordered) == normalize_value(target, ordered=ordered)


def format_value(value: Any) -> str:
    """Format a raw value for display (not normalized).

    Strings keep their original spacing and case. Sequences keep their
    original order.
    """
    if value is None:
        return EMPTY_DISPLAY
    if isinstance(value, bool):
        return bool_label(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        try:
            payload = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
            if isinstance(payload, tuple):
                payload = list(payload)
            return json.dumps(payload, ensure_ascii=False, default=str)
        except (TypeError, ValueError, RecursionError):
            return str(value)
    return str(value)
