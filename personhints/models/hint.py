"""Token and hint result types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Sequence, Tuple

from personhints.models.person import PersonRef
from personhints.models.text import TextSpan


@dataclass(frozen=True)
class Token:
    """Candidate name span produced by the tokenizer.

    `normalized_location` and `matched_persons` stay empty until the token is
    resolved against a context; tokenizer output itself is never modified.
    """

    location: TextSpan
    sanitized_string: str
    normalized_location: Optional[TextSpan] = None
    matched_persons: Tuple[PersonRef, ...] = ()

    def resolved(self, region_start: int, persons: Sequence[PersonRef]) -> "Token":
        """Return a copy anchored at the absolute origin with its matches attached."""

        return replace(
            self,
            normalized_location=self.location.shift(region_start),
            matched_persons=tuple(persons),
        )


@dataclass(frozen=True)
class Hint:
    """A resolved span plus one matched person."""

    normalized_location: TextSpan
    person: PersonRef
    location: TextSpan
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
