# agents/retry.py
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from .error_classifier import ErrorVerdict, classify, error_message

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
BASE_DELAY_MS = 1000
JITTER_MS = 200

QUOTA_MESSAGE = (
    "Google Gemini quota was exceeded. Please check your plan, billing details, "
    "or provide a key with sufficient quota."
)


class QuotaExceededError(Exception):
    """Raised when the LLM quota is exhausted. Aborts the whole review run."""

    def __init__(self, message: str = QUOTA_MESSAGE):
        super().__init__(message)
        self.message = message


def _transient(exc: BaseException) -> bool:
    return classify(exc) is ErrorVerdict.TRANSIENT


async def _checked(call: Callable[[], Awaitable[T]]) -> T:
    try:
        return await call()
    except QuotaExceededError:
        raise
    except Exception as e:
        if classify(e) is ErrorVerdict.QUOTA_EXHAUSTED:
            raise QuotaExceededError() from e
        raise


class RetryPolicy:
    def __init__(
        self,
        max_retries: int = MAX_RETRIES,
        base_delay_ms: int = BASE_DELAY_MS,
        jitter_ms: int = JITTER_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.jitter_ms = jitter_ms
        self._sleep = sleep
        # base * 2^(attempt - 1) + uniform(0, jitter), in seconds; no upper cap
        self.wait = wait_exponential_jitter(
            initial=base_delay_ms / 1000,
            exp_base=2,
            jitter=jitter_ms / 1000,
            max=float("inf"),
        )

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_retries=settings.max_retries,
            base_delay_ms=settings.base_delay_ms,
            jitter_ms=settings.jitter_ms,
        )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "Gemini request failed (attempt %d/%d): %s. Retrying in %dms...",
            retry_state.attempt_number,
            self.total_attempts,
            error_message(retry_state.outcome.exception()),
            round(retry_state.next_action.sleep * 1000),
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception(_transient),
            stop=stop_after_attempt(self.total_attempts),
            wait=self.wait,
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

    async def invoke(self, call: Callable[[], Awaitable[T]]) -> Optional[T]:
        """
        Run ``call`` until it succeeds, retrying transient failures with backoff.

        Returns None when the error is permanent or the retry budget is spent.
        Raises QuotaExceededError straight away on quota exhaustion.
        """
        try:
            return await self._retrying()(_checked, call)
        except QuotaExceededError:
            raise
        except Exception as e:
            if _transient(e):
                logger.error(
                    "Gemini request failed after %d attempts: %s",
                    self.total_attempts,
                    error_message(e),
                )
            else:
                logger.error("Gemini request failed permanently: %s", error_message(e))
            return None
