"""Run one request through the handler lifecycle.

Stages:
    fetch:   a fetch handler (if any) gathers raw data into the document
    process: a processing handler decides between full processing and
             traversal, then builds the document, edges and follow-on work

Request-scoped temp storage is always released, whatever the outcome.
Only tool absence is turned into a skip; every other error is recorded as a
failure and re-raised for the scheduler to retry or drop.
"""

from __future__ import annotations

from typing import Optional

from .documents import ProcessOutcome
from .handlers.registry import HandlerRegistry
from .logging_config import get_logger
from .request import PROCESS_MODE, TRAVERSE_MODE, HarvestRequest

logger = get_logger(__name__)


async def _fetch_stage(fetchers: HandlerRegistry, request: HarvestRequest) -> None:
    handler = fetchers.select(request)
    if handler is None or not handler.should_fetch(request):
        return
    await handler.handle(request)


async def _process_stage(processors: HandlerRegistry, request: HarvestRequest) -> None:
    handler = processors.select(request)
    if handler is None:
        request.mark_skip(f"no handler for type {request.type!r}")
        return

    await handler.prepare(request)
    if request.is_skipped:
        return

    if handler.should_process(request):
        request.process_mode = PROCESS_MODE
    elif handler.should_traverse(request):
        request.process_mode = TRAVERSE_MODE
    else:
        request.mark_skip("policy excludes processing and traversal")
        return

    await handler.handle(request)
    if request.is_skipped:
        return
    outcome = ProcessOutcome.PROCESSED if request.process_mode == PROCESS_MODE else ProcessOutcome.TRAVERSED
    request.outcome = outcome
    request.document.metadata.outcome = outcome


async def _run(request: HarvestRequest, fetchers: Optional[HandlerRegistry], processors: HandlerRegistry) -> HarvestRequest:
    try:
        if fetchers is not None:
            await _fetch_stage(fetchers, request)
        if not request.is_skipped:
            await _process_stage(processors, request)
    except Exception:
        request.outcome = ProcessOutcome.FAILED
        request.document.metadata.outcome = ProcessOutcome.FAILED
        logger.exception("Handling failed for %s", request.url)
        raise
    finally:
        request.run_cleanups()
    logger.info("%s %s", request.outcome.value if request.outcome else "done", request.url)
    return request


async def dispatch(processors: HandlerRegistry, request: HarvestRequest) -> HarvestRequest:
    """Process an already fetched request."""
    return await _run(request, None, processors)


async def harvest(fetchers: HandlerRegistry, processors: HandlerRegistry, request: HarvestRequest) -> HarvestRequest:
    """Fetch then process one request."""
    return await _run(request, fetchers, processors)
