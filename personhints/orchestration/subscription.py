"""Restartable hint subscription: one in-flight pipeline run at a time."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence

from personhints.core.exceptions import DirectoryLoadError
from personhints.knowledge.loader import PersonLoader
from personhints.models.hint import Hint
from personhints.orchestration.pipeline import CancellationToken, ContextInput, HintPipeline
from personhints.utils.monitoring import observe_run

logger = logging.getLogger(__name__)

ScopeResolver = Callable[[], Optional[str]]


class HintSubscription:
    """Owns the scope and the current run for one editor subscription.

    Starting a run cancels the previous run's token and task before the new
    task is created, so at most one run can still reach the sink.
    """

    def __init__(
        self,
        pipeline: HintPipeline,
        person_loader: PersonLoader,
        *,
        scope_resolver: Optional[ScopeResolver] = None,
    ) -> None:
        self.pipeline = pipeline
        self.person_loader = person_loader
        self.scope_resolver = scope_resolver
        self.last_error: Optional[BaseException] = None
        self._task: Optional[asyncio.Task] = None
        self._token: Optional[CancellationToken] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def restart(
        self,
        request_id: str,
        contexts: Sequence[ContextInput],
        *,
        scope_key: Optional[str] = None,
        extra_info: Iterable[Any] = (),
    ) -> asyncio.Task:
        """Supersede any in-flight run and start a new one."""

        self._abandon_current()

        if scope_key is None and self.scope_resolver is not None:
            scope_key = self.scope_resolver()

        token = CancellationToken()
        task = asyncio.create_task(self._run(request_id, list(contexts), scope_key, token, list(extra_info)))
        task.add_done_callback(self._observe)
        self._token = token
        self._task = task
        return task

    async def wait(self) -> List[Hint]:
        """Wait for the current run; a superseded or closed run yields no hints."""

        task = self._task
        if task is None:
            return []
        await asyncio.wait({task})
        if task.cancelled():
            return []
        return task.result()

    async def close(self) -> None:
        task = self._task
        self._abandon_current()
        if task is not None:
            await asyncio.wait({task})
        self._task = None
        self._token = None

    async def _run(
        self,
        request_id: str,
        contexts: List[ContextInput],
        scope_key: Optional[str],
        token: CancellationToken,
        extra_info: List[Any],
    ) -> List[Hint]:
        try:
            return await self.pipeline.execute(
                request_id,
                contexts,
                scope_key,
                self.person_loader,
                cancellation_token=token,
                extra_info=extra_info,
            )
        except asyncio.CancelledError:
            logger.debug("Run %s cancelled by a newer event", request_id)
            observe_run("superseded", 0.0)
            raise
        except DirectoryLoadError as exc:
            self.last_error = exc
            logger.warning("Run %s aborted: %s", request_id, exc)
            return []
        except Exception as exc:
            self.last_error = exc
            logger.exception("Run %s failed unexpectedly", request_id)
            raise

    def _abandon_current(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @staticmethod
    def _observe(task: asyncio.Task) -> None:
        if not task.cancelled():
            # Failures are already logged in _run; retrieve them so asyncio stays quiet.
            task.exception()
