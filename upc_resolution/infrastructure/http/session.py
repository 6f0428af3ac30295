"""
aiohttp session handling shared by the network sources.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp

from upc_resolution.domain.shared.errors import (
    ExternalServiceError,
    RateLimitError,
    ServiceUnavailableError,
)


@asynccontextmanager
async def session_scope(
    session: Optional[aiohttp.ClientSession],
    user_agent: str,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the injected session, or open one for the duration of a call."""
    if session is not None:
        yield session
        return

    async with aiohttp.ClientSession(headers={"User-Agent": user_agent}) as owned:
        yield owned


def raise_for_status(service: str, status: int) -> None:
    """Map an HTTP error status to the domain exception hierarchy.

    Raises:
        RateLimitError: 429
        ServiceUnavailableError: 5xx
        ExternalServiceError: any other status >= 400
    """
    if status == 429:
        raise RateLimitError(f"{service} API rate limit")
    if status >= 500:
        raise ServiceUnavailableError(f"{service} API error: {status}")
    if status >= 400:
        raise ExternalServiceError(f"{service} API error: {status}")
