"""Opt-in retry policy for embedding and generation calls."""

from typing import Callable

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)


def upstream_retrying(
    max_attempts: int,
    is_transient: Callable[[BaseException], bool],
) -> AsyncRetrying:
    """Build the retry controller for one provider call.

    With ``max_attempts`` of 1 (the default setting) the call is attempted
    exactly once and its exception propagates unchanged.

    Args:
        max_attempts: Total attempts, including the first
        is_transient: Predicate selecting exceptions worth retrying
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=2, min=4, max=60),
        retry=retry_if_exception(is_transient),
        reraise=True,
    )
