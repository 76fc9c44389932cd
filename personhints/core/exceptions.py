"""Custom exception hierarchy for the person hints engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class PersonHintsError(Exception):
    """Base class for engine errors with structured payloads."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        base = f"[{self.error_code}] {self.message}"
        if self.details:
            return f"{base} :: {self.details}"
        return base


class MalformedContextError(PersonHintsError):
    """Raised when a text context lacks a usable text or region."""


class DirectoryLoadError(PersonHintsError):
    """Raised when the person loader cannot provide a snapshot for a scope."""


class TokenAnchorNotFoundError(PersonHintsError):
    """Diagnostic for a word group that could not be located at its anchor.

    The tokenizer never raises this; it is handed to diagnostics hooks.
    """


class RunSuperseded(Exception):
    """Signals that a pipeline run was cancelled by a newer run."""
