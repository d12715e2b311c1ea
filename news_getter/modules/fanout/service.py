import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable

from news_getter.config.settings import settings
from news_getter.modules.extraction.schemas import Candidate
from news_getter.modules.fanout.schemas import BatchOutcome

logger = logging.getLogger(__name__)

# Resolves to True when the candidate's record was published.
ArticleUnit = Callable[[Candidate], Awaitable[bool]]


class FanOutExecutor:
    """Runs one task per candidate and waits for the group up to a deadline.

    Units still running when the deadline passes are cancelled and their
    results discarded. The executor gives the cancellations a short grace
    period to land, then returns whether or not every unit has stopped.
    """

    def __init__(self, cancel_grace: float | None = None) -> None:
        self._cancel_grace = cancel_grace if cancel_grace is not None else settings.cancel_grace

    @staticmethod
    async def _run_unit(unit: ArticleUnit, candidate: Candidate) -> bool:
        try:
            return await unit(candidate)
        except Exception:
            logger.exception("Article unit failed for %s", candidate.link)
            return False

    async def run_batch(
        self,
        candidates: Iterable[Candidate],
        unit: ArticleUnit,
        deadline: float | None = None,
    ) -> BatchOutcome:
        deadline = deadline if deadline is not None else settings.batch_deadline
        tasks = [
            asyncio.create_task(self._run_unit(unit, candidate), name=f"article:{candidate.link}")
            for candidate in candidates
        ]
        if not tasks:
            return BatchOutcome()

        started = time.monotonic()
        pending: set[asyncio.Task[bool]] = set(tasks)
        try:
            done, pending = await asyncio.wait(tasks, timeout=deadline)
        finally:
            for task in pending:
                task.cancel()

        if pending:
            logger.warning(
                "Batch deadline of %.1fs elapsed, abandoning %d of %d units",
                deadline, len(pending), len(tasks),
            )
            _, stragglers = await asyncio.wait(pending, timeout=self._cancel_grace)
            if stragglers:
                logger.warning(
                    "%d units did not stop within %.1fs of cancellation, leaving them",
                    len(stragglers), self._cancel_grace,
                )
        else:
            logger.info(
                "Batch settled: %d units in %.2fs", len(tasks), time.monotonic() - started
            )

        published = sum(1 for task in done if task.result())
        return BatchOutcome(
            spawned=len(tasks),
            published=published,
            failed=len(done) - published,
            abandoned=len(pending),
        )


fanout_executor = FanOutExecutor()
