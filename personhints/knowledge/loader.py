"""Person loader contract and an in-memory implementation."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Set, runtime_checkable

from personhints.models.person import PersonRef

logger = logging.getLogger(__name__)


@runtime_checkable
class PersonLoader(Protocol):
    """External directory providing the persons that belong to a scope."""

    async def query(self, scope_key: str) -> List[PersonRef]:
        ...

    async def query_all(self) -> Set[PersonRef]:
        ...


class InMemoryPersonLoader:
    """Serve persons from a `{scope_key: persons}` mapping."""

    def __init__(self, persons_by_scope: Optional[Mapping[str, Iterable[PersonRef | dict]]] = None) -> None:
        self._persons: Dict[str, List[PersonRef]] = {}
        self.calls: Counter[str] = Counter()
        for scope_key, persons in (persons_by_scope or {}).items():
            self.register(scope_key, persons)

    def register(self, scope_key: str, persons: Iterable[PersonRef | dict]) -> None:
        self._persons[scope_key] = [
            person if isinstance(person, PersonRef) else PersonRef.model_validate(person)
            for person in persons
        ]

    async def query(self, scope_key: str) -> List[PersonRef]:
        self.calls[scope_key] += 1
        persons = list(self._persons.get(scope_key, []))
        logger.debug("Serving %d persons for scope %s", len(persons), scope_key)
        return persons

    async def query_all(self) -> Set[PersonRef]:
        return {person for persons in self._persons.values() for person in persons}
