# app/utils/retry.py
import logging
from dataclasses import dataclass

import redis
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from app.domain.errors import ConflictError
from app.utils.logging import get_logger
from app.utils.settings import (
    TX_BACKOFF_MAX,
    TX_BACKOFF_MIN,
    TX_BACKOFF_MULTIPLIER,
    TX_MAX_ATTEMPTS,
    TX_TIMEOUT_SECONDS,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Ile razy i jak dlugo powtarzamy transakcje przegrana przez konflikt wersji."""

    max_attempts: int = TX_MAX_ATTEMPTS
    backoff_multiplier: float = TX_BACKOFF_MULTIPLIER
    backoff_min: float = TX_BACKOFF_MIN
    backoff_max: float = TX_BACKOFF_MAX
    timeout: float = TX_TIMEOUT_SECONDS


DEFAULT_RETRY_POLICY = RetryPolicy()


def transaction_retry(policy: RetryPolicy = DEFAULT_RETRY_POLICY):
    #po wyczerpaniu prob reraise oddaje ostatni ConflictError
    return retry(
        reraise=True,
        stop=stop_after_attempt(policy.max_attempts) | stop_after_delay(policy.timeout),
        wait=wait_exponential(
            multiplier=policy.backoff_multiplier,
            min=policy.backoff_min,
            max=policy.backoff_max,
        ),
        retry=retry_if_exception_type(ConflictError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )
