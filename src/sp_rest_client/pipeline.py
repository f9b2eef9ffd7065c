"""
Request processing pipeline.

A pipeline is a list of async steps, each taking a RequestContext and
returning a (possibly updated) RequestContext. Once a step produces a result
the remaining steps are skipped, except those marked ``always_run``.
"""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, List

from .context import RequestContext
from .runtime.config import get_config
from .runtime.errors import PipelineError


logger = logging.getLogger(__name__)

PipelineStep = Callable[[RequestContext], Awaitable[RequestContext]]


def pipeline_step(always_run: bool = False) -> Callable[[PipelineStep], PipelineStep]:
    """
    Mark a coroutine function as a pipeline step.

    Args:
        always_run: Run the step even when the context already has a result
    """
    def decorator(func: PipelineStep) -> PipelineStep:
        @functools.wraps(func)
        async def wrapper(context: RequestContext) -> RequestContext:
            if context.has_result and not always_run:
                logger.debug(f"[{context.request_id}] Skipping {func.__name__}, result already set")
                return context
            logger.debug(f"[{context.request_id}] Running {func.__name__}")
            return await func(context)
        return wrapper
    return decorator


async def pipe(context: RequestContext) -> RequestContext:
    """
    Run every step of ``context.pipeline`` in order.

    Raises:
        PipelineError: If the context has no pipeline steps
    """
    if not context.pipeline:
        raise PipelineError(
            "Request pipeline contains no methods!",
            details={"request_id": context.request_id},
        )
    for step in context.pipeline:
        context = await step(context)
    return context


@pipeline_step()
async def log_start(context: RequestContext) -> RequestContext:
    logger.debug(
        f"[{context.request_id}] Beginning {context.verb} request ({context.request_absolute_url})"
    )
    return context


@pipeline_step()
async def caching(context: RequestContext) -> RequestContext:
    """
    Serve cache eligible requests from the configured store.

    On a miss the parser is wrapped so the parsed value is stored.
    """
    config = get_config()
    store = config.default_caching_store
    if not context.is_cached or store is None or config.global_cache_disable:
        return context

    key = getattr(context.caching_options, "key", None) or context.request_absolute_url.lower()

    if key in store:
        logger.debug(f"[{context.request_id}] Value returned from cache ({key})")
        context.batch_dependency()
        return context.with_result(store[key])

    return context.model_copy(update={"parser": CachingParserWrapper(context.parser, store, key)})


@pipeline_step()
async def send(context: RequestContext) -> RequestContext:
    """Queue the request in its batch, or send it and parse the response."""
    if context.is_batched:
        future = context.batch.add(context)
        context.batch_dependency()
        logger.debug(f"[{context.request_id}] Batching request in batch {context.batch.batch_id}")
        return context.with_result(future)

    try:
        client = context.client_factory()
        options = dict(context.options)
        options["method"] = context.verb
        response = await client.fetch(context.request_absolute_url, options)
    finally:
        context.batch_dependency()

    logger.debug(f"[{context.request_id}] Received response with status {response.status}")
    return context.with_result(await context.parser.parse(response))


@pipeline_step(always_run=True)
async def log_end(context: RequestContext) -> RequestContext:
    if context.is_batched:
        logger.debug(f"[{context.request_id}] {context.verb} request will complete in batch {context.batch.batch_id}")
    else:
        logger.debug(f"[{context.request_id}] Completing {context.verb} request")
    return context


@pipeline_step(always_run=True)
async def return_result(context: RequestContext) -> RequestContext:
    """Await a pending batch result so the final context holds the parsed value."""
    if isinstance(context.result, asyncio.Future):
        return context.with_result(await context.result)
    return context


def get_default_pipeline() -> List[PipelineStep]:
    return [log_start, caching, send, log_end, return_result]


class CachingParserWrapper:
    """Delegates parsing and stores the parsed value under ``key``."""

    def __init__(self, parser: Any, store: Any, key: str):
        self.parser = parser
        self.store = store
        self.key = key

    async def parse(self, response: Any) -> Any:
        result = await self.parser.parse(response)
        self.store[self.key] = result
        return result
