from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

from starlette.concurrency import run_in_threadpool

from recipetrio.shared.config.settings import settings

log = logging.getLogger("persistence")

ErrorSink = Callable[["WriteJob", BaseException], None]


@dataclass(slots=True)
class WriteJob:
    label: str
    func: Callable[..., Any]
    args: Tuple[Any, ...] = field(default_factory=tuple)


class WriteQueue:
    """
    Fire-and-forget writes, decoupled from the request that produced them.
    Jobs run one at a time in the threadpool; failures go to the error sink
    and never reach the submitter.
    """

    def __init__(self, maxsize: Optional[int] = None, on_error: Optional[ErrorSink] = None) -> None:
        self._maxsize = maxsize if maxsize is not None else settings.PERSISTENCE_QUEUE_MAXSIZE
        self._on_error = on_error
        self._queue: Optional["asyncio.Queue[Optional[WriteJob]]"] = None
        self._worker: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def _ensure_started(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self._maxsize)
        self._worker = asyncio.get_running_loop().create_task(self._run(), name="persistence-writer")

    async def start(self) -> None:
        self._ensure_started()

    async def stop(self) -> None:
        if not self.running or self._queue is None:
            return
        await self._queue.put(None)
        try:
            await self._worker
        finally:
            self._worker = None
            self._queue = None

    async def join(self) -> None:
        if self._queue is not None:
            await self._queue.join()

    def submit(self, label: str, func: Callable[..., Any], *args: Any) -> bool:
        try:
            self._ensure_started()
            self._queue.put_nowait(WriteJob(label=label, func=func, args=args))
        except asyncio.QueueFull:
            log.error("persistence.queue_full dropped=%s", label)
            return False
        except RuntimeError as e:
            log.error("persistence.submit_failed label=%s error=%s", label, e)
            return False
        return True

    async def _run(self) -> None:
        queue = self._queue
        while True:
            job = await queue.get()
            if job is None:
                queue.task_done()
                break
            try:
                await run_in_threadpool(job.func, *job.args)
                log.info("persistence.write_done label=%s", job.label)
            except Exception as e:
                log.exception("persistence.write_failed label=%s", job.label)
                if self._on_error is not None:
                    self._on_error(job, e)
            finally:
                queue.task_done()


_WRITE_QUEUE: Optional[WriteQueue] = None


def get_write_queue() -> WriteQueue:
    global _WRITE_QUEUE
    if _WRITE_QUEUE is None:
        _WRITE_QUEUE = WriteQueue()
    return _WRITE_QUEUE


async def start_worker() -> None:
    await get_write_queue().start()


async def stop_worker() -> None:
    await get_write_queue().stop()
