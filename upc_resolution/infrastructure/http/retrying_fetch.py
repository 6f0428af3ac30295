"""
Retrying fetch executor.

Runs one source's lookups against an ordered list of endpoints:
up to `max_retries` full passes, each endpoint tried once per pass under
a per-attempt deadline, fixed backoff between passes. The first response
the acceptance predicate approves wins.

Failure classification:
- timeout / transport error / HTTP >= 400 / unparseable body: failed
  attempt, retry-worthy
- clean response rejected by the predicate: "not found", next endpoint
- a pass made only of clean "not found" answers ends the lookup
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional, Sequence

import aiohttp
import structlog
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from upc_resolution.domain.product.models import (
    AttemptOutcome,
    ResolutionRequest,
    SourceAttemptRecord,
)
from upc_resolution.domain.shared.errors import (
    ExternalServiceError,
    SourceExhaustedError,
)
from upc_resolution.domain.shared.errors import TimeoutError as ServiceTimeoutError

logger = structlog.get_logger(__name__)


class FetchResponse(BaseModel):
    """Decoded upstream response handed to the acceptance predicate."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: int = Field(..., description="HTTP status code")
    payload: Any = Field(None, description="Decoded JSON body")
    url: str = Field("", description="Requested URL")


class FetchSuccess(BaseModel):
    """Accepted response plus the attempt trail that led to it."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    response: FetchResponse
    endpoint_used: str
    endpoint_index: int = Field(..., ge=0)
    attempts: list[SourceAttemptRecord] = Field(default_factory=list)

    @property
    def regional_match(self) -> bool:
        """Hit came from the first (regionally preferred) endpoint."""
        return self.endpoint_index == 0


Fetch = Callable[[str], Awaitable[FetchResponse]]
Accept = Callable[[FetchResponse], bool]


class _RetryablePass(Exception):
    """A pass ended without success and with at least one failed attempt."""


class RetryingFetchExecutor:
    """Multi-endpoint fetch with per-attempt deadline and fixed backoff.

    Example:
        >>> executor = RetryingFetchExecutor(
        ...     "openfoodfacts",
        ...     max_retries=2,
        ...     per_attempt_timeout_seconds=1.5,
        ...     backoff_seconds=0.25,
        ... )
        >>> # success = await executor.attempt(endpoints, fetch, accept)
    """

    def __init__(
        self,
        source_name: str,
        max_retries: int = 2,
        per_attempt_timeout_seconds: float = 1.5,
        backoff_seconds: float = 0.25,
    ) -> None:
        """Initialize executor.

        Args:
            source_name: Source reported in attempt records
            max_retries: Full passes over the endpoint list (>= 1)
            per_attempt_timeout_seconds: Deadline per fetch
            backoff_seconds: Wait between passes
        """
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if per_attempt_timeout_seconds <= 0:
            raise ValueError("per_attempt_timeout_seconds must be > 0")

        self.source_name = str(getattr(source_name, "value", source_name))
        self.max_retries = max_retries
        self.per_attempt_timeout_seconds = per_attempt_timeout_seconds
        self.backoff_seconds = max(backoff_seconds, 0.0)

    @classmethod
    def for_request(cls, source_name: str, request: ResolutionRequest) -> "RetryingFetchExecutor":
        """Build an executor from the retry policy carried by a request."""
        return cls(
            source_name,
            max_retries=request.max_retries_per_source,
            per_attempt_timeout_seconds=request.per_attempt_timeout_seconds,
            backoff_seconds=request.backoff_seconds,
        )

    async def attempt(
        self,
        endpoints: Sequence[str],
        fetch: Fetch,
        accept: Accept,
    ) -> FetchSuccess:
        """Try endpoints until one returns an accepted response.

        Args:
            endpoints: Ordered endpoints (or URLs), preferred first
            fetch: Coroutine function performing one request
            accept: Predicate approving a response as a hit

        Returns:
            FetchSuccess for the first accepted response

        Raises:
            SourceExhaustedError: Every attempt failed or missed; carries
                all attempt records (definitive_miss=True when the last
                pass saw only clean "not found" answers)
            asyncio.CancelledError: Caller cancelled; never swallowed
        """
        attempts: list[SourceAttemptRecord] = []

        if not endpoints:
            raise SourceExhaustedError(self.source_name, attempts)

        try:
            async for retry_attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_fixed(self.backoff_seconds),
                retry=retry_if_exception_type(_RetryablePass),
                reraise=True,
            ):
                with retry_attempt:
                    pass_number = retry_attempt.retry_state.attempt_number
                    success = await self._run_pass(pass_number, endpoints, fetch, accept, attempts)
                    if success is not None:
                        return success

                    pass_records = [a for a in attempts if a.attempt_number == pass_number]
                    if all(a.outcome == AttemptOutcome.NO_MATCH for a in pass_records):
                        logger.info(
                            "Definitive miss, skipping further passes",
                            source=self.source_name,
                            pass_number=pass_number,
                        )
                        raise SourceExhaustedError(
                            self.source_name, attempts, definitive_miss=True
                        )

                    if pass_number < self.max_retries:
                        logger.warning(
                            "Pass failed, backing off",
                            source=self.source_name,
                            pass_number=pass_number,
                            backoff_seconds=self.backoff_seconds,
                        )
                    raise _RetryablePass()

        except _RetryablePass as e:
            raise SourceExhaustedError(self.source_name, attempts) from e

        # Unreachable: AsyncRetrying either returns or raises
        raise SourceExhaustedError(self.source_name, attempts)

    async def _run_pass(
        self,
        pass_number: int,
        endpoints: Sequence[str],
        fetch: Fetch,
        accept: Accept,
        attempts: list[SourceAttemptRecord],
    ) -> Optional[FetchSuccess]:
        """Try every endpoint once; record each attempt."""
        for index, endpoint in enumerate(endpoints):
            started = time.perf_counter()
            response: Optional[FetchResponse] = None

            try:
                response = await asyncio.wait_for(
                    fetch(endpoint), timeout=self.per_attempt_timeout_seconds
                )
                outcome = AttemptOutcome.SUCCESS if accept(response) else AttemptOutcome.NO_MATCH

            except (asyncio.TimeoutError, ServiceTimeoutError):
                outcome = AttemptOutcome.TIMEOUT
                logger.warning(
                    "Fetch timed out",
                    source=self.source_name,
                    endpoint=endpoint,
                    pass_number=pass_number,
                    timeout_seconds=self.per_attempt_timeout_seconds,
                )

            except (aiohttp.ClientError, ExternalServiceError, ValueError) as e:
                outcome = AttemptOutcome.HTTP_ERROR
                logger.warning(
                    "Fetch failed",
                    source=self.source_name,
                    endpoint=endpoint,
                    pass_number=pass_number,
                    error=str(e),
                )

            except Exception as e:
                # Malformed body or parser bug; CancelledError is not an Exception
                outcome = AttemptOutcome.HTTP_ERROR
                logger.exception(
                    "Unexpected fetch failure",
                    source=self.source_name,
                    endpoint=endpoint,
                    pass_number=pass_number,
                    error=str(e),
                )

            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
            attempts.append(
                SourceAttemptRecord(
                    source_name=self.source_name,
                    endpoint_used=endpoint,
                    attempt_number=pass_number,
                    outcome=outcome,
                    elapsed_ms=elapsed_ms,
                )
            )

            if outcome == AttemptOutcome.SUCCESS and response is not None:
                logger.debug(
                    "Fetch accepted",
                    source=self.source_name,
                    endpoint=endpoint,
                    pass_number=pass_number,
                    elapsed_ms=elapsed_ms,
                )
                return FetchSuccess(
                    response=response,
                    endpoint_used=endpoint,
                    endpoint_index=index,
                    attempts=list(attempts),
                )

            if outcome == AttemptOutcome.NO_MATCH:
                logger.info(
                    "Not found at endpoint",
                    source=self.source_name,
                    endpoint=endpoint,
                    pass_number=pass_number,
                )

        return None
