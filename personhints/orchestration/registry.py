"""Hint registry contract and an in-memory registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence, Tuple, runtime_checkable

from personhints.models.hint import Hint
from personhints.models.text import TextSpan

logger = logging.getLogger(__name__)


@runtime_checkable
class HintSink(Protocol):
    """Receives the engine's output."""

    def on_hints(self, request_id: str, owner_tag: str, hints: Sequence[Hint]) -> None:
        ...

    def on_clear_region(self, region: TextSpan, request_id: str, owner_tag: str) -> None:
        ...


@dataclass
class RegisteredHint:
    request_id: str
    owner_tag: str
    hint: Hint


@dataclass
class InMemoryHintsRegistry:
    """Stores hints per owner; clearing a region removes only that owner's hints inside it."""

    hints: List[RegisteredHint] = field(default_factory=list)
    operations: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

    def on_hints(self, request_id: str, owner_tag: str, hints: Sequence[Hint]) -> None:
        self.operations.append(
            ("add", {"request_id": request_id, "owner_tag": owner_tag, "count": len(hints)})
        )
        self.hints.extend(RegisteredHint(request_id, owner_tag, hint) for hint in hints)
        logger.debug("Registered %d hints for %s", len(hints), request_id)

    def on_clear_region(self, region: TextSpan, request_id: str, owner_tag: str) -> None:
        self.operations.append(
            ("clear", {"request_id": request_id, "owner_tag": owner_tag, "region": region.as_tuple()})
        )
        before = len(self.hints)
        self.hints = [
            entry
            for entry in self.hints
            if entry.owner_tag != owner_tag or not region.contains(entry.hint.normalized_location)
        ]
        logger.debug("Removed %d hints in region %s", before - len(self.hints), region.as_tuple())

    def hints_for(self, owner_tag: str) -> List[Hint]:
        return [entry.hint for entry in self.hints if entry.owner_tag == owner_tag]
