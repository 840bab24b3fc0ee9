"""
Cooperative cancellation for long-running partition scans
"""

import asyncio
import threading
from typing import Any, Callable

import structlog
from fastapi import Request
from starlette.concurrency import run_in_threadpool

logger = structlog.get_logger(__name__)

DISCONNECT_POLL_SECONDS = 0.5


async def run_cancellable(request: Request, func: Callable[..., Any], *args: Any) -> Any:
    """
    Run a blocking scan in the threadpool, watching for client disconnect.

    func must accept a cancel_event keyword. When the client goes away the
    event is set; in-flight fetches finish and the scan stops before its
    next page with ScanCancelledError.
    """
    cancel_event = threading.Event()
    task = asyncio.ensure_future(run_in_threadpool(func, *args, cancel_event=cancel_event))

    while True:
        done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
        if done:
            break
        if await request.is_disconnected():
            logger.info("client_disconnected", path=request.url.path)
            cancel_event.set()
            break

    return await task
