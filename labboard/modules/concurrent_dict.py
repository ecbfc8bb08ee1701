# =============================================================================
# File: concurrent_dict.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from threading import RLock
from typing import Any, Callable, Dict, List, Optional


class ConcurrentDict:
    """
    Thread-safe dictionary for concurrent access.
    Provides atomic get, remove and get-or-create operations. Entries are
    never evicted; they leave only through `remove`.
    """

    def __init__(self):
        self._lock = RLock()
        self._dict: Dict[Any, Any] = {}

    def get(self, key: Any, default: Optional[Any] = None) -> Any:
        with self._lock:
            return self._dict.get(key, default)

    def remove(self, key: Any) -> Any:
        """Remove `key` and return its value, or None if it was absent."""
        with self._lock:
            return self._dict.pop(key, None)

    def get_or_add(
        self,
        key: Any,
        factory: Callable[[], Any],
        replace_if: Optional[Callable[[Any], bool]] = None,
    ) -> Any:
        """
        Atomically gets the value for the key, or adds it using the factory if not present.
        When `replace_if` returns True for the existing value, it is replaced
        by a fresh one from the factory.
        """
        with self._lock:
            if key in self._dict:
                existing = self._dict[key]
                if replace_if is None or not replace_if(existing):
                    return existing
            value = factory()
            self._dict[key] = value
            return value

    def values(self) -> List[Any]:
        with self._lock:
            return list(self._dict.values())
