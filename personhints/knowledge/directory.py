"""In-memory person directory queried by case-insensitive name prefixes."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from personhints.core.exceptions import DirectoryLoadError
from personhints.knowledge.loader import PersonLoader
from personhints.models.person import PersonRef
from personhints.utils.monitoring import snapshot_loads_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectorySnapshot:
    scope_key: Optional[str]
    persons: Tuple[PersonRef, ...]
    version: int


def match_prefix(snapshot: DirectorySnapshot, prefix: str) -> Tuple[PersonRef, ...]:
    """Case-insensitive prefix match against every person in `snapshot`."""

    needle = prefix.lower()
    return tuple(
        person
        for person in snapshot.persons
        if any(field.startswith(needle) for field in person.name_fields())
    )


class DirectoryIndex:
    """Holds the active person snapshot for one scope.

    A snapshot is replaced by a single attribute assignment, so readers see
    either the old or the new snapshot and never a partial one. Loads are
    serialized; concurrent loads of the same scope share one loader call.
    """

    def __init__(self) -> None:
        self._snapshot = DirectorySnapshot(scope_key=None, persons=(), version=0)
        self._lock = asyncio.Lock()
        self._inflight: Dict[str, asyncio.Task] = {}

    @property
    def scope_key(self) -> Optional[str]:
        return self._snapshot.scope_key

    @property
    def version(self) -> int:
        return self._snapshot.version

    def __len__(self) -> int:
        return len(self._snapshot.persons)

    def load_snapshot(self, scope_key: str, persons: Iterable[PersonRef]) -> bool:
        """Install `persons` as the active snapshot unless `scope_key` is already active."""

        current = self._snapshot
        if scope_key == current.scope_key:
            return False

        self._snapshot = DirectorySnapshot(
            scope_key=scope_key,
            persons=tuple(dict.fromkeys(persons)),
            version=current.version + 1,
        )
        logger.info(
            "Directory snapshot loaded",
            extra={"scope_key": scope_key, "persons": len(self._snapshot.persons), "version": self.version},
        )
        return True

    @property
    def snapshot(self) -> DirectorySnapshot:
        return self._snapshot

    def query_by_prefix(self, prefix: str) -> Tuple[PersonRef, ...]:
        """Persons whose full name, first name used or last name starts with `prefix`."""

        return match_prefix(self._snapshot, prefix)

    def query_all(self) -> FrozenSet[PersonRef]:
        return frozenset(self._snapshot.persons)

    async def ensure_loaded(self, scope_key: Optional[str], loader: PersonLoader) -> bool:
        """Load the snapshot for `scope_key` through `loader` when the scope changed.

        Returns whether a new snapshot was installed. Raises `DirectoryLoadError`
        when the loader fails; the active snapshot is then left untouched.
        """

        if scope_key is None or scope_key == self.scope_key:
            return False

        task = self._inflight.get(scope_key)
        if task is None:
            task = asyncio.create_task(self._load(scope_key, loader))
            self._inflight[scope_key] = task
            task.add_done_callback(lambda done, key=scope_key: self._forget(key, done))
        return await asyncio.shield(task)

    async def _load(self, scope_key: str, loader: PersonLoader) -> bool:
        async with self._lock:
            if scope_key == self.scope_key:
                return False

            try:
                persons = await loader.query(scope_key)
            except Exception as exc:
                snapshot_loads_total.labels(outcome="failed").inc()
                logger.error("Loading persons for scope %s failed: %s", scope_key, exc)
                raise DirectoryLoadError(
                    error_code="DIRECTORY_LOAD_FAILED",
                    message=f"Could not load persons for scope {scope_key}.",
                    details={"scope_key": scope_key, "cause": repr(exc)},
                ) from exc

            snapshot_loads_total.labels(outcome="loaded").inc()
            return self.load_snapshot(scope_key, persons)

    def _forget(self, scope_key: str, task: asyncio.Task) -> None:
        if self._inflight.get(scope_key) is task:
            del self._inflight[scope_key]
        if not task.cancelled():
            # Mark the exception as retrieved; awaiting callers still receive it.
            task.exception()
