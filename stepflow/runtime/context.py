"""
context.py - Mutable key/value store scoped to one flow execution.

A Context is owned by exactly one Session. Values are logically strings;
structured data must be serialized (e.g. JSON-encoded) before storing.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, KeysView, Mapping, Optional, Tuple


class Context:
    """String-keyed execution store.

    Purely a typed map wrapper: no operation raises.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._storage: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        """Return the value for ``key``, or None if absent."""
        return self._storage.get(key)

    def set(self, key: str, value: Any) -> None:
        self._storage[key] = value

    def has(self, key: str) -> bool:
        return key in self._storage

    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True iff it existed."""
        if key not in self._storage:
            return False
        del self._storage[key]
        return True

    def clear(self) -> None:
        self._storage.clear()

    def keys(self) -> KeysView[str]:
        return self._storage.keys()

    def snapshot(self) -> Dict[str, Any]:
        """Shallow copy of the current contents, for read-only inspection."""
        return dict(self._storage)

    def __contains__(self, key: object) -> bool:
        return key in self._storage

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return iter(list(self._storage.items()))

    def __len__(self) -> int:
        return len(self._storage)

    def __repr__(self) -> str:
        return f"Context({self._storage!r})"
