"""Text snippet, span and semantic context models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from personhints.core.exceptions import MalformedContextError


@dataclass(frozen=True)
class TextSpan:
    """Character offsets `[start, end)` relative to some origin string."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"span start {self.start} exceeds end {self.end}")

    @classmethod
    def of(cls, value: "TextSpan | Sequence[int] | Mapping[str, int]") -> "TextSpan":
        if isinstance(value, TextSpan):
            return value
        if isinstance(value, Mapping):
            return cls(int(value["start"]), int(value["end"]))
        start, end = value
        return cls(int(start), int(end))

    def shift(self, offset: int) -> "TextSpan":
        return TextSpan(self.start + offset, self.end + offset)

    def contains(self, other: "TextSpan") -> bool:
        """Inclusive containment: `other` lies within this span."""

        return self.start <= other.start and other.end <= self.end

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)

    def __len__(self) -> int:
        return self.end - self.start


class Triple(BaseModel):
    """One semantic statement describing the snippet's surroundings."""

    model_config = ConfigDict(frozen=True)

    subject: str = ""
    predicate: str = ""
    object: str = ""


class TextContext(BaseModel):
    """A snippet of editor text at a known absolute region."""

    model_config = ConfigDict(frozen=True)

    text: str
    region: TextSpan
    context: List[Triple] = Field(default_factory=list)

    @field_validator("region", mode="before")
    def _coerce_region(cls, value: Any) -> TextSpan:
        return TextSpan.of(value)

    @property
    def last_triple(self) -> Triple | None:
        return self.context[-1] if self.context else None

    @classmethod
    def parse(cls, value: "TextContext | Mapping[str, Any]") -> "TextContext":
        """Validate an incoming context, raising `MalformedContextError` on bad input."""

        if isinstance(value, cls):
            return value
        try:
            return cls.model_validate(value)
        except (ValidationError, ValueError, TypeError, KeyError) as exc:
            raise MalformedContextError(
                error_code="MALFORMED_CONTEXT",
                message="Context is missing a usable text or region.",
                details={"reason": str(exc)},
            ) from exc
