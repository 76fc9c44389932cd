"""Hint pipeline turning text contexts into person hints."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from opentelemetry import trace

from personhints.core.config import Settings, settings as default_settings
from personhints.core.exceptions import MalformedContextError, RunSuperseded
from personhints.knowledge.directory import DirectoryIndex, DirectorySnapshot, match_prefix
from personhints.knowledge.loader import PersonLoader
from personhints.knowledge.overlap import resolve_overlaps
from personhints.knowledge.properties import PropertyResolver
from personhints.knowledge.tokenizer import tokenize_names
from personhints.models.hint import Hint, Token
from personhints.models.person import PersonRef
from personhints.models.text import TextContext
from personhints.orchestration.cache import MemoCache, memoize
from personhints.orchestration.registry import HintSink
from personhints.utils.monitoring import observe_run

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

ContextInput = Union[TextContext, Mapping[str, Any]]


class CancellationToken:
    """Cooperative cancellation flag checked at every suspension point."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RunSuperseded()


class HintPipeline:
    """Tokenize, match, resolve and emit person hints for batches of contexts.

    The token is checked after the snapshot load, after the debounce delay,
    after every memoized tokenizer and property lookup, and after every
    directory prefix query.
    """

    def __init__(
        self,
        *,
        property_resolver: PropertyResolver,
        sink: HintSink,
        directory: Optional[DirectoryIndex] = None,
        cache: Optional[MemoCache] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.config = config or default_settings
        self.directory = directory if directory is not None else DirectoryIndex()
        self.property_resolver = property_resolver
        self.sink = sink
        self.cache = cache if cache is not None else MemoCache()
        self.owner_tag = self.config.OWNER_TAG

        self._tokenize = memoize(self._tokenize_text, cache=self.cache)
        self._find_properties = memoize(self._lookup_properties, cache=self.cache)
        self._match_persons = memoize(
            self._match_in_snapshot,
            cache=self.cache,
            key=lambda snapshot, prefix: (snapshot.version, prefix.lower()),
        )

    async def execute(
        self,
        request_id: str,
        contexts: Sequence[ContextInput],
        scope_key: Optional[str],
        person_loader: PersonLoader,
        cancellation_token: Optional[CancellationToken] = None,
        extra_info: Iterable[Any] = (),
    ) -> List[Hint]:
        """Run one restartable pass and hand any hints to the sink.

        Returns the emitted hints; a superseded run returns an empty list
        without touching the sink any further. `DirectoryLoadError` and any
        collaborator failure propagate.
        """

        token = cancellation_token or CancellationToken()
        if not contexts:
            return []
        if self.is_self_echo(extra_info):
            logger.debug("Ignoring event %s triggered by %s", request_id, self.owner_tag)
            observe_run("skipped", 0.0)
            return []

        started = time.perf_counter()
        with tracer.start_as_current_span("person_hints.execute") as span:
            span.set_attribute("person_hints.request_id", request_id)
            span.set_attribute("person_hints.contexts", len(contexts))
            try:
                hints = await self._run(request_id, contexts, scope_key, person_loader, token)
            except RunSuperseded:
                logger.debug("Run %s superseded", request_id)
                observe_run("superseded", time.perf_counter() - started)
                return []
            except Exception as exc:
                span.record_exception(exc)
                observe_run("failed", time.perf_counter() - started)
                raise

            span.set_attribute("person_hints.hints", len(hints))

        observe_run("emitted" if hints else "empty", time.perf_counter() - started, len(hints))
        return hints

    def is_self_echo(self, extra_info: Iterable[Any]) -> bool:
        """Whether the event was caused by markup this engine inserted itself."""

        for entry in extra_info or ():
            if isinstance(entry, Mapping):
                owner = entry.get("owner_tag", entry.get("who"))
            else:
                owner = entry
            if owner == self.owner_tag:
                return True
        return False

    async def _run(
        self,
        request_id: str,
        contexts: Sequence[ContextInput],
        scope_key: Optional[str],
        person_loader: PersonLoader,
        token: CancellationToken,
    ) -> List[Hint]:
        await self.directory.ensure_loaded(scope_key, person_loader)
        token.raise_if_cancelled()

        await asyncio.sleep(self.config.DEBOUNCE_SECONDS)
        token.raise_if_cancelled()

        snapshot = self.directory.snapshot
        collected: List[Hint] = []

        for raw_context in contexts:
            try:
                context = TextContext.parse(raw_context)
            except MalformedContextError as exc:
                logger.warning("Skipping context in %s: %s", request_id, exc)
                continue

            properties = await self.detect_person_properties(context)
            token.raise_if_cancelled()
            if not properties:
                continue

            hints = await self.generate_hints_for_context(
                context, snapshot, token, request_id=request_id, properties=properties
            )
            if not hints:
                continue

            self.sink.on_clear_region(context.region, request_id, self.owner_tag)
            collected.extend(hints)

        if collected:
            self.sink.on_hints(request_id, self.owner_tag, collected)
            logger.info(
                "Emitted person hints",
                extra={"request_id": request_id, "hints": len(collected), "scope_key": snapshot.scope_key},
            )
        return collected

    async def detect_person_properties(self, context: TextContext) -> Tuple[str, ...]:
        """Properties of the context's asserted class whose range is a person."""

        last_triple = context.last_triple
        if last_triple is None:
            return ()
        if self.config.REQUIRE_CLASS_ASSERTION and last_triple.predicate not in self.config.CLASS_ASSERTION_PREDICATES:
            return ()

        class_type = last_triple.object.strip()
        if not class_type:
            return ()

        return await self._find_properties(class_type, self.config.PERSON_CLASS_URI)

    async def generate_hints_for_context(
        self,
        context: TextContext,
        snapshot: DirectorySnapshot,
        token: CancellationToken,
        *,
        request_id: str,
        properties: Sequence[str] = (),
    ) -> List[Hint]:
        candidates = await self._tokenize(context.text)
        token.raise_if_cancelled()

        matched: List[Token] = []
        for candidate in candidates:
            persons: Tuple[PersonRef, ...] = await self._match_persons(snapshot, candidate.sanitized_string)
            token.raise_if_cancelled()
            if not persons:
                continue
            matched.append(candidate.resolved(context.region.start, persons))

        metadata = {"request_id": request_id, "properties": tuple(properties)}
        return [
            Hint(
                normalized_location=survivor.normalized_location,
                person=person,
                location=survivor.location,
                metadata=dict(metadata),
            )
            for survivor in resolve_overlaps(matched)
            for person in survivor.matched_persons
        ]

    def _tokenize_text(self, text: str) -> Tuple[Token, ...]:
        return tokenize_names(text, self.config.MIN_TOKEN_LENGTH, self.config.MAX_GROUP_SIZE)

    async def _lookup_properties(self, class_type: str, range_uri: str) -> Tuple[str, ...]:
        return tuple(await self.property_resolver.find_properties_with_range(class_type, range_uri))

    def _match_in_snapshot(self, snapshot: DirectorySnapshot, prefix: str) -> Tuple[PersonRef, ...]:
        # Versions only count within self.directory, so matches are keyed per pipeline.
        return match_prefix(snapshot, prefix)
