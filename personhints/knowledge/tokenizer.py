"""Capitalization-driven tokenizer proposing candidate name spans.

The text is split into whitespace-delimited words (trailing whitespace kept
with each word). Every word starting with an uppercase character opens a
group that grows one word at a time, up to `max_group_size` words, emitting a
token per size until the sanitized group text drops below
`min_token_length`::

    >>> [t.sanitized_string for t in tokenize_names("Felix  Ruiz is here")]
    ['Felix', 'Felix Ruiz', 'Felix Ruiz is', 'Felix Ruiz is here', 'Ruiz', 'Ruiz is', 'Ruiz is here']
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from personhints.core.exceptions import TokenAnchorNotFoundError
from personhints.models.hint import Token
from personhints.models.text import TextSpan
from personhints.utils.monitoring import anchor_misses_total

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"\S+\s*")

AnchorMissHandler = Callable[[TokenAnchorNotFoundError], None]


def tokenize_names(
    text: str,
    min_token_length: int = 3,
    max_group_size: int = 5,
    *,
    on_anchor_miss: Optional[AnchorMissHandler] = None,
) -> Tuple[Token, ...]:
    """Return candidate name tokens for `text` in `(start word, group size)` order."""

    words = list(WORD_PATTERN.finditer(text))
    tokens: List[Token] = []

    for i, word in enumerate(words):
        if not starts_with_capital(word.group()):
            continue

        for j in range(i + 1, min(i + 1 + max_group_size, len(words) + 1)):
            group = words[i:j]
            sanitized = sanitize_words(match.group() for match in group)
            if len(sanitized) < min_token_length:
                break

            location = locate_group(text, [match.group() for match in group], word.start())
            if location is None:
                _report_anchor_miss(text, group, word.start(), on_anchor_miss)
                continue

            tokens.append(Token(location=location, sanitized_string=sanitized))

    return tuple(tokens)


def starts_with_capital(word: str) -> bool:
    return bool(word) and word[0].isupper()


def sanitize_words(words) -> str:
    """Trim every word and join them with single spaces."""

    return " ".join(word.strip() for word in words)


def locate_group(text: str, group: Sequence[str], anchor: int) -> Optional[TextSpan]:
    """Find the group's original text at `anchor`; `None` when it is not there.

    Groups come from `WORD_PATTERN` matches, so their raw text always starts
    at the first word's offset and `tokenize_names` never misses an anchor.
    The `None` branch only fires for callers passing an arbitrary `anchor`.
    Searching for the sanitized string instead would drift to a later
    occurrence whenever the words are separated by more than one space.
    """

    raw = "".join(group).strip()
    found = text.find(raw, anchor)
    if found != anchor:
        return None
    return TextSpan(found, found + len(raw))


def _report_anchor_miss(
    text: str,
    group: Sequence[re.Match],
    anchor: int,
    handler: Optional[AnchorMissHandler],
) -> None:
    raw = "".join(match.group() for match in group).strip()
    diagnostic = TokenAnchorNotFoundError(
        error_code="TOKEN_ANCHOR_NOT_FOUND",
        message="Word group could not be located at its anchor.",
        details={"group": raw, "anchor": anchor, "text_length": len(text)},
    )
    anchor_misses_total.inc()
    logger.warning("%s", diagnostic)
    if handler is not None:
        handler(diagnostic)
