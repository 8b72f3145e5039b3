"""
UpscaleQueue - single-line FIFO of upscale jobs.

At most one job runs at a time. A run is only ever started by ``enqueue``
on an idle queue or by ``advance`` after the previous run settled, so two
jobs never share the workspace.
"""
import asyncio
from collections import deque
from typing import Any, Deque, Optional
from dataclasses import dataclass, field
import logging

from .core.interfaces import UpscaleJob
from .core.errors import UpscaleBotError, DeliveryError
from .pipeline import UpscalePipeline
from .workspace import Workspace

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Sorry, there was an error processing your image."


@dataclass
class QueueState:
    """Jobs waiting or in flight, plus the channel the queue reports to."""
    channel: Any = None
    jobs: Deque[UpscaleJob] = field(default_factory=deque)

    @property
    def head(self) -> Optional[UpscaleJob]:
        return self.jobs[0] if self.jobs else None


class UpscaleQueue:
    """
    Owns the queue state and drives the pipeline job by job.

    Any failure is fatal for the whole line: the state is dropped with
    every pending job and only the failing job's requester is told.

    Example:
        queue = UpscaleQueue(pipeline, workspace)
        position = queue.enqueue(job)
        await queue.join()
    """

    def __init__(self, pipeline: UpscalePipeline, workspace: Workspace):
        self.pipeline = pipeline
        self.workspace = workspace
        self.state: Optional[QueueState] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_idle(self) -> bool:
        return self.state is None

    @property
    def pending(self) -> int:
        return len(self.state.jobs) if self.state else 0

    def position_of(self, job: UpscaleJob) -> Optional[int]:
        """1-based position of job, or None if it is not queued."""
        if self.state is None:
            return None
        for i, queued in enumerate(self.state.jobs, start=1):
            if queued is job:
                return i
        return None

    def enqueue(self, job: UpscaleJob, channel: Any = None) -> int:
        """
        Add job to the line and return its 1-based position.

        On an idle queue the job starts immediately (position 1); otherwise
        it waits. Never blocks on the pipeline.
        """
        if self.state is None:
            self.state = QueueState(channel=channel)
            self.state.jobs.append(job)
            self.workspace.clear()
            logger.info(f"Queue started with {job.image}")
            self._start(job)
            return 1

        self.state.jobs.append(job)
        position = len(self.state.jobs)
        logger.info(f"Queued {job.image} at position {position}")
        return position

    def advance(self) -> None:
        """Finish the head job and start the next one, or tear the queue down."""
        if self.state is None:
            logger.warning("advance() called on an idle queue")
            return

        self.workspace.clear()
        finished = self.state.jobs.popleft()
        logger.info(f"Finished {finished.image}, {len(self.state.jobs)} job(s) left")

        if self.state.jobs:
            self._start(self.state.head)
        else:
            self.state = None

    async def abort(self, error: Exception) -> None:
        """
        Drop the queue with all pending jobs and report error to the job
        that failed. Staged files stay until the next queue start.
        """
        if self.state is None:
            logger.warning(f"abort() called on an idle queue: {error}")
            return

        failed = self.state.head
        dropped = len(self.state.jobs)
        self.state = None
        logger.error(f"Queue aborted on {failed.image if failed else '?'}, dropped {dropped} job(s): {error}")

        if failed is None or failed.reply_target is None:
            return

        if isinstance(error, UpscaleBotError):
            message = error.user_message
        else:
            message = GENERIC_ERROR_MESSAGE

        try:
            await failed.reply_target.send_message(message)
        except DeliveryError as e:
            logger.error(f"Could not report failure for {failed.image}: {e}")
        except Exception:
            logger.exception(f"Unexpected error while reporting failure for {failed.image}")

    async def join(self) -> None:
        """Wait until the queue is idle."""
        while self._task is not None:
            task = self._task
            await task
            if self._task is task:
                break

    def _start(self, job: UpscaleJob) -> None:
        self._task = asyncio.create_task(self._process(job))

    async def _process(self, job: UpscaleJob) -> None:
        try:
            result = await self.pipeline.run(job)
        except Exception as e:
            logger.exception(f"Unexpected error while processing {job.image}")
            await self.abort(e)
            return

        if not result.success:
            await self.abort(result.error)
            return

        try:
            await self.pipeline.deliver(result)
            self.advance()
        except Exception as e:
            logger.exception(f"Unexpected error while finishing {job.image}")
            await self.abort(e)
