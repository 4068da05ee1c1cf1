"""
Retry and throttle handling around a single GraphQL call.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

import httpx

from ..errors import FatalError
from .client import ShopifyClientError, ShopifyTransientError
from .models import GraphQLResponse, ThrottleReading, format_user_errors

logger = logging.getLogger(__name__)


DEFAULT_THROTTLE_KEYWORDS: Tuple[str, ...] = ("throttl",)
DEFAULT_TRANSIENT_KEYWORDS: Tuple[str, ...] = (
    "429",
    "500",
    "502",
    "503",
    "econnreset",
    "etimedout",
    "fetch failed",
    "connection reset",
    "timed out",
)

Call = Callable[[], Awaitable[GraphQLResponse]]
Sleep = Callable[[float], Awaitable[Any]]


class ErrorClassifier:
    """Decides which failures are throttling and which are transient."""

    def __init__(
        self,
        throttle_keywords: Iterable[str] = DEFAULT_THROTTLE_KEYWORDS,
        transient_keywords: Iterable[str] = DEFAULT_TRANSIENT_KEYWORDS,
    ):
        self.throttle_keywords = tuple(k.lower() for k in throttle_keywords)
        self.transient_keywords = tuple(k.lower() for k in transient_keywords)

    def is_throttle_message(self, message: str) -> bool:
        text = message.lower()
        return any(k in text for k in self.throttle_keywords)

    def is_transient(self, error: BaseException) -> bool:
        """
        True for network errors, 429/5xx responses, and throttle-like messages.

        Typed client errors are classified by type only; their text carries the
        response body, which may contain anything.
        """
        if isinstance(error, (httpx.TransportError, ShopifyTransientError)):
            return True
        if isinstance(error, ShopifyClientError):
            return False
        text = str(error).lower()
        return self.is_throttle_message(text) or any(
            k in text for k in self.transient_keywords
        )


@dataclass
class Outcome:
    """Result of one executed call after all retries."""

    success: bool
    response: Optional[GraphQLResponse] = None
    error: Optional[str] = None
    throttle: Optional[ThrottleReading] = None
    throttled: bool = False
    attempts: int = 0

    @property
    def data(self) -> Dict[str, Any]:
        if self.response is None:
            return {}
        return self.response.data or {}


class RateLimitedExecutor:
    """
    Runs a call with retry-on-transient-error and backoff-on-throttle.

    Business errors (userErrors, non-throttle GraphQL errors) are returned
    immediately as failures. Fatal errors propagate to the caller.
    """

    BASE_RETRY_DELAY = 1.0  # seconds
    MAX_RETRY_DELAY = 30.0  # seconds
    MAX_JITTER = 0.5  # seconds
    LOW_BUDGET_THRESHOLD = 100  # points
    LOW_BUDGET_PAUSE = 1.0  # seconds

    def __init__(
        self,
        classifier: Optional[ErrorClassifier] = None,
        sleep: Sleep = asyncio.sleep,
        jitter: Optional[Callable[[], float]] = None,
    ):
        self.classifier = classifier or ErrorClassifier()
        self._sleep = sleep
        self._jitter = jitter or (lambda: random.uniform(0, self.MAX_JITTER))

    @classmethod
    def backoff_delay(cls, attempt: int) -> float:
        """Exponential delay for a zero-based attempt, without jitter."""
        return min(cls.BASE_RETRY_DELAY * (2 ** attempt), cls.MAX_RETRY_DELAY)

    async def _backoff(self, attempt: int, max_retries: int, reason: str, label: str) -> None:
        delay = self.backoff_delay(attempt) + self._jitter()
        logger.warning(
            f"{label} - {reason}, retrying in {delay:.1f}s "
            f"(attempt {attempt + 1}/{max_retries})"
        )
        await self._sleep(delay)

    async def execute(
        self,
        call: Call,
        max_retries: int,
        root_field: Optional[str] = None,
        label: str = "request",
        user_errors_key: str = "userErrors",
    ) -> Outcome:
        """
        Execute a call with retries.

        Args:
            call: Zero-argument coroutine factory performing the request
            max_retries: Number of retries after the first attempt (>= 0)
            root_field: Mutation payload field whose userErrors mark a business failure
            label: Prefix for log lines
            user_errors_key: Field of the payload listing business errors

        Returns:
            Outcome describing success or the final failure
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")

        throttled = False
        last_error = "Exhausted retries"

        for attempt in range(max_retries + 1):
            has_retry = attempt < max_retries
            try:
                response = await call()
            except FatalError:
                raise
            except Exception as e:
                last_error = str(e) or e.__class__.__name__
                if self.classifier.is_transient(e):
                    throttled = True
                    if has_retry:
                        await self._backoff(attempt, max_retries, "transient error", label)
                        continue
                else:
                    logger.error(f"{label} - unexpected error: {last_error}")
                return Outcome(
                    success=False, error=last_error, throttled=throttled,
                    attempts=attempt + 1,
                )

            throttle = response.throttle_reading

            if response.errors:
                messages = "; ".join(response.error_messages)
                if self.classifier.is_throttle_message(messages):
                    throttled = True
                    if has_retry:
                        await self._backoff(attempt, max_retries, "throttled", label)
                        continue
                return Outcome(
                    success=False,
                    response=response,
                    error=f"GraphQL errors: {messages}",
                    throttle=throttle,
                    throttled=throttled,
                    attempts=attempt + 1,
                )

            if root_field:
                user_errors = response.user_errors(root_field, user_errors_key)
                if user_errors:
                    return Outcome(
                        success=False,
                        response=response,
                        error=format_user_errors(user_errors),
                        throttle=throttle,
                        throttled=throttled,
                        attempts=attempt + 1,
                    )

            if throttle and throttle.currently_available < self.LOW_BUDGET_THRESHOLD:
                logger.info(
                    f"{label} - throttle budget low ({throttle.currently_available:g}), "
                    f"sleeping extra {self.LOW_BUDGET_PAUSE:g}s"
                )
                throttled = True
                await self._sleep(self.LOW_BUDGET_PAUSE)

            return Outcome(
                success=True,
                response=response,
                throttle=throttle,
                throttled=throttled,
                attempts=attempt + 1,
            )

        return Outcome(
            success=False, error=last_error, throttled=throttled,
            attempts=max_retries + 1,
        )
