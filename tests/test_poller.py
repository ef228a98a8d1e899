"""
Tests for the bounded confirmation poller.
"""

import pytest

from arbtransfer import ConfigurationError, ConfirmationPoller, PollError, PollPolicy, PollState, RpcError
from arbtransfer.models import Receipt

TX_HASH = "0x" + "ab" * 32


def make_receipt(status=True, block_number=1_234, gas_used=21_000):
    return Receipt(tx_hash="", block_number=block_number, gas_used=gas_used, status=status)


@pytest.fixture()
def policy():
    return PollPolicy(interval=5.0, budget=12)


# =============================================================================
# PollPolicy
# =============================================================================


class TestPollPolicy:
    def test_defaults(self) -> None:
        policy = PollPolicy()
        assert policy.interval == 5.0
        assert policy.budget == 12
        assert policy.total_timeout == 60.0

    def test_budget_must_be_positive(self) -> None:
        with pytest.raises(ConfigurationError):
            PollPolicy(budget=0)

    def test_interval_must_be_non_negative(self) -> None:
        with pytest.raises(ConfigurationError):
            PollPolicy(interval=-1)


# =============================================================================
# Terminal states
# =============================================================================


class TestWait:
    def test_confirmed_after_pending_ticks(self, chain, sleep, policy) -> None:
        chain.receipts = [None, None, make_receipt(status=True, block_number=77, gas_used=21_000)]
        ticks = []

        result = ConfirmationPoller(chain, policy, sleep=sleep).wait(TX_HASH, on_tick=ticks.append)

        assert result.state == PollState.CONFIRMED
        assert result.attempts == 3
        assert result.block_number == 77
        assert result.gas_used == 21_000
        assert result.receipt.tx_hash == TX_HASH
        assert [t.state for t in ticks] == [PollState.PENDING, PollState.PENDING, PollState.CONFIRMED]
        assert chain.count("get_transaction_receipt") == 3

    def test_failed_receipt(self, chain, sleep, policy) -> None:
        chain.receipts = [make_receipt(status=False)]

        result = ConfirmationPoller(chain, policy, sleep=sleep).wait(TX_HASH)

        assert result.state == PollState.FAILED
        assert result.attempts == 1
        assert result.receipt.status is False

    def test_times_out_after_budget(self, chain, sleep, policy) -> None:
        result = ConfirmationPoller(chain, policy, sleep=sleep).wait(TX_HASH)

        assert result.state == PollState.TIMED_OUT
        assert result.attempts == 12
        assert result.receipt is None
        assert chain.count("get_transaction_receipt") == 12
        assert sleep.calls == [5.0] * 12

    @pytest.mark.parametrize("budget", [1, 2, 5])
    def test_never_exceeds_budget(self, chain, sleep, budget) -> None:
        poller = ConfirmationPoller(chain, PollPolicy(interval=0.5, budget=budget), sleep=sleep)

        result = poller.wait(TX_HASH)

        assert result.state == PollState.TIMED_OUT
        assert chain.count("get_transaction_receipt") == budget
        assert sum(sleep.calls) == pytest.approx(budget * 0.5)

    def test_receipt_on_last_tick_is_confirmed(self, chain, sleep) -> None:
        chain.receipts = [None, make_receipt()]

        result = ConfirmationPoller(chain, PollPolicy(interval=1, budget=2), sleep=sleep).wait(TX_HASH)

        assert result.state == PollState.CONFIRMED
        assert result.attempts == 2

    def test_query_failure_is_poll_error(self, chain, sleep, policy) -> None:
        chain.receipts = [None, RpcError("eth_getTransactionReceipt failed: 502 Bad Gateway")]

        result = ConfirmationPoller(chain, policy, sleep=sleep).wait(TX_HASH)

        assert result.state == PollState.POLL_ERROR
        assert result.attempts == 2
        assert isinstance(result.error, PollError)
        assert result.error.tx_hash == TX_HASH
        assert "502 Bad Gateway" in result.error.reason
        assert result.error.attempt == 2
        assert chain.count("get_transaction_receipt") == 2

    def test_arbitrary_exception_is_poll_error(self, chain, sleep, policy) -> None:
        chain.receipts = [ConnectionError("connection refused")]

        result = ConfirmationPoller(chain, policy, sleep=sleep).wait(TX_HASH)

        assert result.state == PollState.POLL_ERROR
        assert result.error.reason == "connection refused"
        assert isinstance(result.error.__cause__, ConnectionError)

    def test_terminal_states(self) -> None:
        assert not PollState.SUBMITTED.is_terminal
        assert not PollState.PENDING.is_terminal
        for state in (PollState.CONFIRMED, PollState.FAILED, PollState.TIMED_OUT, PollState.POLL_ERROR):
            assert state.is_terminal


class TestWatch:
    def test_sleeps_before_each_query(self, chain) -> None:
        events = []
        chain_query = chain.get_transaction_receipt

        def recording_sleep(seconds):
            events.append("sleep")

        def recording_query(tx_hash):
            events.append("query")
            return chain_query(tx_hash)

        chain.get_transaction_receipt = recording_query
        poller = ConfirmationPoller(chain, PollPolicy(interval=1, budget=3), sleep=recording_sleep)

        list(poller.watch(TX_HASH))

        assert events == ["sleep", "query"] * 3

    def test_abandoning_stops_queries(self, chain, sleep, policy) -> None:
        watch = ConfirmationPoller(chain, policy, sleep=sleep).watch(TX_HASH)

        first = next(watch)
        watch.close()

        assert first.state == PollState.PENDING
        assert chain.count("get_transaction_receipt") == 1

    def test_last_result_is_terminal(self, chain, sleep, policy) -> None:
        chain.receipts = [None, None, None, make_receipt()]

        results = list(ConfirmationPoller(chain, policy, sleep=sleep).watch(TX_HASH))

        assert [r.attempts for r in results] == [1, 2, 3, 4]
        assert all(not r.state.is_terminal for r in results[:-1])
        assert results[-1].state.is_terminal
