# docs_mirror/crawler/fetcher.py
"""
Fetcher module: one logical GET per call, with retry/backoff for temporary
transport errors and HTTP 403 rate limiting.

The retry discipline is an explicit state machine (:class:`RetryState`) so the
attempt ceiling and the status-code table can be tested without any network.
"""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from aiohttp import (
    ClientConnectionError,
    ClientError,
    ClientSession,
    ClientSSLError,
)

from docs_mirror.config import DEFAULT_USER_AGENTS, MirrorConfig
from docs_mirror.crawler.models import FailureKind, FetchFailure, FetchResult, FetchSuccess
from docs_mirror.logger import LOGGER_NAME

__all__ = ("Action", "RetryPolicy", "RetryState", "Fetcher", "is_temporary")

SleepFn = Callable[[float], Awaitable[None]]

HTTP_OK = 200
HTTP_RATE_LIMITED = 403


class Action(str, Enum):
    SUCCEED = "succeed"
    RETRY = "retry"
    ABORT = "abort"


class LastError(str, Enum):
    TEMPORARY = "temporary"
    RATE_LIMITED = "rate_limited"


def is_temporary(exc: BaseException) -> bool:
    """Connection-level failures and timeouts are worth another attempt; TLS errors are not."""
    if isinstance(exc, ClientSSLError):
        return False
    return isinstance(exc, (ClientConnectionError, asyncio.TimeoutError))


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 5
    backoff: float = 3.0
    backoff_factor: float = 1.0

    def delay_for(self, attempt: int) -> float:
        """Pause after failed attempt number ``attempt`` (1-based)."""
        return self.backoff * self.backoff_factor ** (attempt - 1)

    @classmethod
    def from_config(cls, config: MirrorConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            backoff=config.backoff,
            backoff_factor=config.backoff_factor,
        )


@dataclass(slots=True)
class RetryState:
    """Attempt counter plus last error classification.

    Transitions:
      * status 200                      -> SUCCEED
      * status 403                      -> RETRY (rate limited)
      * any other status                -> ABORT
      * temporary transport error       -> RETRY
      * permanent transport error       -> ABORT
    A RETRY with no attempts left means the retries are exhausted.
    """

    policy: RetryPolicy
    attempt: int = 0
    last_error: Optional[LastError] = None
    last_reason: str = ""

    @property
    def can_attempt(self) -> bool:
        return self.attempt < self.policy.max_attempts

    @property
    def exhausted(self) -> bool:
        return not self.can_attempt and self.last_error is not None

    def begin_attempt(self) -> int:
        if not self.can_attempt:
            raise RuntimeError("no attempts left")
        self.attempt += 1
        return self.attempt

    def on_status(self, status: int) -> Action:
        if status == HTTP_OK:
            return Action.SUCCEED
        if status == HTTP_RATE_LIMITED:
            self.last_error = LastError.RATE_LIMITED
            self.last_reason = "HTTP 403"
            return Action.RETRY
        return Action.ABORT

    def on_transport_error(self, exc: BaseException) -> Action:
        if is_temporary(exc):
            self.last_error = LastError.TEMPORARY
            self.last_reason = repr(exc)
            return Action.RETRY
        return Action.ABORT

    def next_delay(self) -> float:
        return self.policy.delay_for(self.attempt)


class Fetcher:
    """Handles HTTP fetching with rotating User-Agent and retry/backoff."""

    def __init__(
        self,
        session: ClientSession,
        policy: RetryPolicy | None = None,
        user_agents: Sequence[str] = DEFAULT_USER_AGENTS,
        sleep: SleepFn = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        if not user_agents:
            raise ValueError("user_agents must not be empty")
        self.session = session
        self.policy = policy or RetryPolicy()
        self.user_agents = tuple(user_agents)
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.logger = logging.getLogger(LOGGER_NAME)

    @classmethod
    def from_config(cls, session: ClientSession, config: MirrorConfig, sleep: SleepFn = asyncio.sleep) -> Fetcher:
        return cls(session, RetryPolicy.from_config(config), config.user_agents, sleep=sleep)

    async def fetch(self, url: str) -> FetchResult:
        """
        GET ``url`` until it answers 200, a non-retryable condition occurs or
        the attempts run out. Never raises for network or HTTP conditions.
        """
        state = RetryState(self.policy)
        while state.can_attempt:
            attempt = state.begin_attempt()
            headers = {"User-Agent": self._rng.choice(self.user_agents)}
            try:
                async with self.session.get(url, headers=headers, allow_redirects=True) as resp:
                    status = resp.status
                    action = state.on_status(status)
                    if action is Action.SUCCEED:
                        body = await resp.read()
                        return FetchSuccess(url, status, body, attempt)
            except (ClientError, asyncio.TimeoutError) as exc:
                action = state.on_transport_error(exc)
                if action is Action.ABORT:
                    self.logger.warning("Error fetching URL %s: %r", url, exc)
                    return FetchFailure(url, FailureKind.TRANSPORT, attempts=attempt, reason=repr(exc))
            else:
                if action is Action.ABORT:
                    self.logger.warning("Unexpected status code: %d for URL %s", status, url)
                    return FetchFailure(
                        url, FailureKind.HTTP_STATUS, status=status, attempts=attempt, reason=f"HTTP {status}"
                    )

            if state.exhausted:
                break
            delay = state.next_delay()
            if state.last_error is LastError.RATE_LIMITED:
                self.logger.info(
                    "Received 403 Forbidden (rate limit) for %s, pausing %.1fs before retry %d/%d",
                    url, delay, attempt + 1, self.policy.max_attempts,
                )
            else:
                self.logger.info(
                    "Temporary error fetching %s: %s, retrying in %.1fs (%d/%d)",
                    url, state.last_reason, delay, attempt + 1, self.policy.max_attempts,
                )
            await self._sleep(delay)

        self.logger.warning("Max retries exceeded for URL %s", url)
        return FetchFailure(
            url,
            FailureKind.RETRIES_EXHAUSTED,
            status=HTTP_RATE_LIMITED if state.last_error is LastError.RATE_LIMITED else None,
            attempts=state.attempt,
            reason=state.last_reason,
        )
