"""Call-site retry policy for provider lookups.

The places client never retries. Callers that want to ride out a throttled or
flaky provider wrap the call with ``retry_transient``; the landmark aggregator
does so per place type, below its result cache.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from estate_locator.models import SearchResult, TRANSIENT_ERRORS

logger = logging.getLogger(__name__)


async def retry_transient(
    call: Callable[[], Awaitable[SearchResult]],
    max_retries: int = 2,
    base_delay: float = 0.5,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> SearchResult:
    """Run ``call`` and retry while it fails with a transient error.

    Only RATE_LIMITED and PROVIDER_UNAVAILABLE are retried, with exponential
    backoff (``base_delay``, ``2 * base_delay``, ...). Any other outcome is
    returned as soon as it is seen.
    """
    result = await call()
    for attempt in range(max_retries):
        if result.ok or result.error not in TRANSIENT_ERRORS:
            return result
        wait = base_delay * (2 ** attempt)
        logger.info(f"[RETRY] {result.error.value}, retry {attempt + 1}/{max_retries} in {wait:.1f}s")
        await sleep(wait)
        result = await call()
    return result
