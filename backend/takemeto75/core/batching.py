import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from takemeto75.config import settings

logger = logging.getLogger(__name__)

async def gather_in_batches(
    factories: List[Callable[[], Awaitable]],
    batch_size: Optional[int] = None,
    return_exceptions: bool = False,
) -> list:
    """
    Run coroutine factories at most `batch_size` at a time, waiting for each
    batch before starting the next. Results line up with `factories` by index.
    """
    size = settings.FETCH_BATCH_SIZE if batch_size is None else batch_size
    if size < 1:
        raise ValueError("batch_size must be >= 1")

    results = []
    for i in range(0, len(factories), size):
        batch = factories[i:i + size]
        batch_results = await asyncio.gather(*(f() for f in batch), return_exceptions=return_exceptions)
        for offset, result in enumerate(batch_results):
            if isinstance(result, Exception):
                logger.warning(f"Batched task {i + offset} failed: {result}")
        results.extend(batch_results)
    return results
