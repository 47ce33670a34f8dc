"""Strip absent values from documents before they are written remotely.

The remote store rejects (or silently deletes on) null/absent leaves, so
every write path runs its payload through :func:`strip_absent` first.
"""

from typing import Any


class _Absent:
    """Marker for a field that is explicitly unset."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def is_absent(value: Any) -> bool:
    return value is None or value is ABSENT


def strip_absent(value: Any) -> Any:
    """Return a copy of ``value`` with absent leaves removed at every depth.

    Dict entries whose value is absent are dropped; absent list items are
    dropped too. Containers are rebuilt, the input is never mutated.

    Examples:
        >>> strip_absent({"a": None, "b": [1, None, {"c": None, "d": 2}]})
        {'b': [1, {'d': 2}]}
    """
    if isinstance(value, dict):
        return {k: strip_absent(v) for k, v in value.items() if not is_absent(v)}
    if isinstance(value, (list, tuple)):
        return [strip_absent(v) for v in value if not is_absent(v)]
    return value
