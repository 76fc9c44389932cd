"""Memoization utilities for the orchestration layer."""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)

_PRIMITIVES = (str, bytes, int, float, bool, type(None))

KeyFunc = Callable[..., Hashable]


class _IdentityKey:
    """Key part comparing an opaque argument by reference."""

    __slots__ = ("obj",)

    def __init__(self, obj: Any) -> None:
        self.obj = obj

    def __hash__(self) -> int:
        return id(self.obj)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _IdentityKey) and other.obj is self.obj

    def __repr__(self) -> str:
        return f"<ref {type(self.obj).__name__} {id(self.obj):#x}>"


def _key_part(value: Any) -> Hashable:
    if isinstance(value, _PRIMITIVES):
        return (type(value), value)
    if isinstance(value, tuple):
        return tuple(_key_part(item) for item in value)
    return _IdentityKey(value)


def make_key(*args: Any, **kwargs: Any) -> Tuple[Hashable, ...]:
    """Primitives and tuples of primitives compare by value, anything else by reference."""

    positional = tuple(_key_part(arg) for arg in args)
    named = tuple((name, _key_part(value)) for name, value in sorted(kwargs.items()))
    return positional + named


class MemoCache:
    """Unbounded key/value store that shares in-flight computations.

    Entries are never evicted; a failed computation is not cached.
    """

    def __init__(self) -> None:
        self._entries: Dict[Hashable, Any] = {}
        self._pending: Dict[Hashable, asyncio.Task] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = value

    def delete(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_compute(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """Return the cached value for `key`, computing it through `factory` once."""

        if key in self._entries:
            self.hits += 1
            return self._entries[key]

        task = self._pending.get(key)
        if task is None:
            self.misses += 1
            task = asyncio.ensure_future(self._compute(key, factory))
            self._pending[key] = task
            task.add_done_callback(lambda done, pending_key=key: self._settle(pending_key, done))
        else:
            self.hits += 1

        # A cancelled caller must not cancel a computation other callers share.
        return await asyncio.shield(task)

    async def _compute(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        result = factory()
        if inspect.isawaitable(result):
            result = await result
        self._entries[key] = result
        return result

    def _settle(self, key: Hashable, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Memoized computation for %r failed: %s", key, task.exception())


def memoize(
    func: Callable[..., Any],
    *,
    cache: Optional[MemoCache] = None,
    key: Optional[KeyFunc] = None,
) -> Callable[..., Awaitable[Any]]:
    """Wrap `func` (sync or async) in an async, cached callable.

    The wrapper exposes its store as `wrapper.cache`.
    """

    store = cache if cache is not None else MemoCache()
    key_func = key or make_key
    namespace = _IdentityKey(func)

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        cache_key = (namespace,) + tuple(_as_tuple(key_func(*args, **kwargs)))
        return await store.get_or_compute(cache_key, lambda: func(*args, **kwargs))

    wrapper.cache = store  # type: ignore[attr-defined]
    return wrapper


def _as_tuple(value: Hashable) -> Tuple[Hashable, ...]:
    return value if isinstance(value, tuple) else (value,)
