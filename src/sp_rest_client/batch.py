"""
Batch dependency tracking.

A Batch collects requests that will be sent together and counts the
queryables still preparing a request for it. The batch must not be sent
while any dependency is outstanding; sending itself is left to the caller.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from .runtime.errors import BatchTimeout


logger = logging.getLogger(__name__)


@dataclass
class BatchRequest:
    """Individual request queued in a batch."""
    id: str
    url: str
    method: str
    options: Dict[str, Any]
    parser: Any
    future: asyncio.Future


class Batch:
    """
    Deferred request group with dependency counting.

    Every queryable building a request for this batch registers a dependency
    first and releases it once the request has been queued with add().
    """

    def __init__(self, batch_id: Optional[str] = None):
        """
        Initialize a batch.

        Args:
            batch_id: Identifier for the batch (generated when omitted)
        """
        self.batch_id = batch_id or str(uuid4())
        self._requests: List[BatchRequest] = []
        self._dependencies = 0
        self._idle = asyncio.Event()
        self._idle.set()

        logger.info(f"Created batch {self.batch_id}")

    @property
    def requests(self) -> List[BatchRequest]:
        return list(self._requests)

    @property
    def pending_dependencies(self) -> int:
        return self._dependencies

    def add_dependency(self) -> Callable[[], None]:
        """
        Register an outstanding dependency.

        Returns:
            Callable releasing the dependency; calling it more than once has no further effect
        """
        self._dependencies += 1
        self._idle.clear()
        released = False

        def release() -> None:
            nonlocal released
            if released:
                return
            released = True
            self._dependencies -= 1
            if self._dependencies == 0:
                self._idle.set()

        return release

    def add(self, context: Any) -> asyncio.Future:
        """
        Queue a request context.

        Args:
            context: RequestContext of the deferred request

        Returns:
            Future resolved with the parsed result once the batch is sent
        """
        future = asyncio.get_running_loop().create_future()
        request = BatchRequest(
            id=context.request_id,
            url=context.request_absolute_url,
            method=context.verb,
            options=dict(context.options),
            parser=context.parser,
            future=future,
        )
        self._requests.append(request)
        logger.debug(f"Queued {request.method} {request.url} in batch {self.batch_id}")
        return future

    async def wait_for_dependencies(self, timeout: Optional[float] = None) -> None:
        """
        Wait until every registered dependency has been released.

        Args:
            timeout: Seconds to wait before giving up

        Raises:
            BatchTimeout: If dependencies are still outstanding after ``timeout``
        """
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise BatchTimeout(
                details={"batch_id": self.batch_id, "pending": self._dependencies},
                cause=e,
            ) from e
