"""
Background job submission for the web process

Services receive a job queue explicitly (see NotificationService) and call
``submit``; submission never blocks the request and never raises.
"""

import asyncio
import logging

from fastapi import Request

logger = logging.getLogger(__name__)


class ArqJobQueue:
    """Fire-and-forget submission to the arq (Redis) worker"""

    def __init__(self, pool, loop: asyncio.AbstractEventLoop):
        self.pool = pool
        self.loop = loop

    def submit(self, function: str, *args) -> bool:
        """Schedule ``function(*args)`` on the worker. Returns False when it could not be queued."""
        try:
            future = asyncio.run_coroutine_threadsafe(self.pool.enqueue_job(function, *args), self.loop)
        except Exception as e:
            logger.error(f"❌ Failed to queue job {function}: {e}")
            return False

        def _log_outcome(fut):
            if fut.cancelled():
                logger.warning(f"⚠️ Job submission cancelled: {function}")
            elif fut.exception() is not None:
                logger.error(f"❌ Failed to queue job {function}: {fut.exception()}")
            else:
                logger.info(f"📋 Queued job {function}{args}")

        future.add_done_callback(_log_outcome)
        return True

    async def close(self):
        await self.pool.close()


class DisabledJobQueue:
    """Used when Redis is unavailable; jobs are dropped with a warning"""

    def submit(self, function: str, *args) -> bool:
        logger.warning(f"⚠️ Background jobs disabled, dropping {function}{args}")
        return False

    async def close(self):
        return None


def get_job_queue(request: Request):
    """Dependency returning the queue created at startup"""
    queue = getattr(request.app.state, "job_queue", None)
    return queue if queue is not None else DisabledJobQueue()
