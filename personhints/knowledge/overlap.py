"""Overlap resolution keeping only the most specific hint per text region."""

from __future__ import annotations

from typing import List, Sequence

from personhints.models.hint import Token
from personhints.models.text import TextSpan


def normalize_location(location: TextSpan, reference: TextSpan) -> TextSpan:
    """Map a snippet-local span onto the absolute origin of `reference`."""

    return location.shift(reference.start)


def resolve_overlaps(tokens: Sequence[Token]) -> List[Token]:
    """Drop every token whose span lies inside another, larger token's span.

    'Felix Ruiz' yields one hint for 'Felix Ruiz' rather than for 'Felix' as
    well. Identical spans do not subsume each other. Runs in O(n^2).
    """

    spans = [_span_of(token) for token in tokens]
    survivors: List[Token] = []
    for index, token in enumerate(tokens):
        span = spans[index]
        subsumed = any(
            other != span and other.contains(span)
            for other_index, other in enumerate(spans)
            if other_index != index
        )
        if not subsumed:
            survivors.append(token)
    return survivors


def _span_of(token: Token) -> TextSpan:
    if token.normalized_location is None:
        raise ValueError(f"token {token.sanitized_string!r} has no normalized location")
    return token.normalized_location
