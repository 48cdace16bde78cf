import asyncio
import json
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional


def stable_key(params: Dict[str, Any]) -> str:
    """Same params in any order give the same key."""
    return json.dumps(params, sort_keys=True, default=str, ensure_ascii=False)


class TTLCache:
    """Small LRU map whose entries also expire after a time-to-live."""

    def __init__(self, max_size: int = 100, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[Hashable, tuple]" = OrderedDict()

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at, ttl = entry
        if self._clock() - stored_at > ttl:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None):
        # max_size <= 0 disables caching
        if self.max_size <= 0:
            return
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[key] = (value, self._clock(), self.ttl if ttl is None else ttl)

    def delete(self, key: Hashable):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return self.get(key) is not None


class RequestDeduplicator:
    """Shares one in-flight task between concurrent callers asking for the same key."""

    def __init__(self):
        self._active: Dict[Hashable, asyncio.Task] = {}

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> Any:
        task = self._active.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._active[key] = task
            task.add_done_callback(lambda _t, k=key: self._forget(k, _t))
        return await asyncio.shield(task)

    def _forget(self, key, task):
        if self._active.get(key) is task:
            del self._active[key]

    def clear(self):
        self._active.clear()

    @property
    def active_count(self) -> int:
        return len(self._active)
