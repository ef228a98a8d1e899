"""
Confirmation polling for submitted transactions.

The poller is a bounded, attempt-counted loop over one transaction hash:

    SUBMITTED -> PENDING* -> CONFIRMED | FAILED | TIMED_OUT | POLL_ERROR

Every tick waits ``interval`` seconds and then queries the receipt once, so
the total timeout is exactly ``budget * interval``. A query failure ends
polling with POLL_ERROR; the transaction itself is untouched and can be
looked up again later by hash.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .chain import ChainClient
from .constants import DEFAULT_POLL_BUDGET, DEFAULT_POLL_INTERVAL_SECONDS
from .errors import ArbTransferError, ConfigurationError, PollError
from .logging import get_logger
from .models import PollResult, PollState

__all__ = ["PollPolicy", "ConfirmationPoller"]

_logger = get_logger(__name__)

TickCallback = Callable[[PollResult], None]


@dataclass
class PollPolicy:
    """
    Configuration for confirmation polling.

    Example:
        ```python
        policy = PollPolicy(interval=2.0, budget=30)  # give up after 60s
        ```
    """

    interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    """Seconds to wait before each receipt query."""

    budget: int = DEFAULT_POLL_BUDGET
    """Maximum number of receipt queries before TIMED_OUT."""

    def __post_init__(self) -> None:
        if self.budget < 1:
            raise ConfigurationError("poll budget must be at least 1", details={"budget": self.budget})
        if self.interval < 0:
            raise ConfigurationError("poll interval must be non-negative", details={"interval": self.interval})

    @property
    def total_timeout(self) -> float:
        return self.budget * self.interval


class ConfirmationPoller:
    """
    Watches one transaction hash until it reaches a terminal state.

    Exactly one poller should consume a given hash's terminal state.
    ``sleep`` is injectable so tests can run the loop without real waiting.

    Example:
        >>> poller = ConfirmationPoller(chain, PollPolicy(interval=5, budget=12))
        >>> result = poller.wait("0xabc...")
        >>> result.state
        <PollState.CONFIRMED: 'confirmed'>
    """

    def __init__(
        self,
        chain: ChainClient,
        policy: Optional[PollPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.chain = chain
        self.policy = policy or PollPolicy()
        self._sleep = sleep

    def watch(self, tx_hash: str) -> Iterator[PollResult]:
        """
        Yield one PollResult per tick; the last one is terminal.

        Stop iterating at any point to abandon the wait. Nothing is
        cancelled on chain.
        """
        budget = self.policy.budget
        _logger.debug(
            "Waiting for confirmation",
            extra={"tx_hash": tx_hash, "interval": self.policy.interval, "budget": budget},
        )

        for attempt in range(1, budget + 1):
            self._sleep(self.policy.interval)

            try:
                receipt = self.chain.get_transaction_receipt(tx_hash)
            except Exception as e:
                error = self._as_poll_error(tx_hash, e, attempt)
                _logger.warning(
                    "Receipt query failed",
                    extra={"tx_hash": tx_hash, "attempt": attempt, "error": error.reason},
                )
                yield PollResult(tx_hash, PollState.POLL_ERROR, attempt, error=error)
                return

            if receipt is None:
                if attempt >= budget:
                    _logger.info(
                        "Transaction not confirmed within budget",
                        extra={"tx_hash": tx_hash, "attempts": attempt, "timeout": self.policy.total_timeout},
                    )
                    yield PollResult(tx_hash, PollState.TIMED_OUT, attempt)
                    return
                yield PollResult(tx_hash, PollState.PENDING, attempt)
                continue

            state = PollState.CONFIRMED if receipt.status else PollState.FAILED
            _logger.info(
                "Transaction included",
                extra={
                    "tx_hash": tx_hash,
                    "state": state.value,
                    "block": receipt.block_number,
                    "gas_used": receipt.gas_used,
                    "attempts": attempt,
                },
            )
            yield PollResult(tx_hash, state, attempt, receipt=receipt)
            return

    def wait(self, tx_hash: str, on_tick: Optional[TickCallback] = None) -> PollResult:
        """Drive ``watch`` to its terminal state, calling ``on_tick`` after every tick."""
        result = PollResult(tx_hash, PollState.SUBMITTED, 0)
        for result in self.watch(tx_hash):
            if on_tick is not None:
                on_tick(result)
        return result

    @staticmethod
    def _as_poll_error(tx_hash: str, error: Exception, attempt: int) -> PollError:
        if isinstance(error, PollError):
            return error
        reason = error.message if isinstance(error, ArbTransferError) else (str(error) or error.__class__.__name__)
        poll_error = PollError(tx_hash, reason, attempt=attempt)
        poll_error.__cause__ = error
        return poll_error
