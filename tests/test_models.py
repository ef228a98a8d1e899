"""
Tests for value types, the outcome type and structured errors.
"""

import io
import logging

import pytest

from arbtransfer import (
    AccountId,
    OutcomeKind,
    SubmitError,
    TransactionDraft,
    TransferOutcome,
    WrongNetworkError,
    validate_address,
)
from arbtransfer.logging import configure_logging, get_logger

SENDER = "0xd78677EFed3b87f8f421E68dA3F984ad8Ef76439"
RECEIVER = "0x7292dD72151DaCFBbE76305db1C8Ab1928E922E4"


class TestAccountId:
    def test_requires_twenty_bytes(self) -> None:
        with pytest.raises(ValueError):
            AccountId(b"\x00" * 19)

    def test_hashable_and_comparable(self) -> None:
        assert {validate_address(SENDER), validate_address(SENDER.lower())} == {validate_address(SENDER)}


class TestTransactionDraft:
    def test_tx_params(self) -> None:
        draft = TransactionDraft(
            sender=validate_address(SENDER),
            to=validate_address(RECEIVER.lower()),
            value=100,
            gas_limit=100_000,
            gas_price=10_000_120,
            nonce=4,
            chain_id=421614,
        )

        assert draft.to_tx_params() == {
            "from": SENDER,
            "to": RECEIVER,
            "value": 100,
            "gas": 100_000,
            "gasPrice": 10_000_120,
            "nonce": 4,
            "chainId": 421614,
        }


class TestTransferOutcome:
    def test_submitted_only_with_hash(self) -> None:
        assert TransferOutcome(OutcomeKind.TIMED_OUT, "poll", tx_hash="0xabc").submitted
        assert not TransferOutcome(OutcomeKind.SUBMIT_ERROR, "submit").submitted
        assert not TransferOutcome(OutcomeKind.SUBMIT_ERROR, "submit", tx_hash="0xabc").submitted

    def test_ok_only_when_confirmed(self) -> None:
        assert TransferOutcome(OutcomeKind.CONFIRMED, "poll", tx_hash="0xabc").ok
        assert not TransferOutcome(OutcomeKind.FAILED, "poll", tx_hash="0xabc").ok


class TestErrors:
    def test_str_includes_code_and_hash(self) -> None:
        error = SubmitError("nonce too low", tx_hash="0x1234567890abcdef")

        assert str(error) == "[SUBMIT_ERROR] Transaction rejected: nonce too low (tx: 0x12345678...)"

    def test_to_dict(self) -> None:
        error = WrongNetworkError(421614, 1, "arbitrum-sepolia")

        assert error.to_dict() == {
            "error": "WrongNetworkError",
            "code": "WRONG_NETWORK",
            "stage": "build",
            "message": "Not connected to arbitrum-sepolia (expected chain id 421614, got 1)",
            "tx_hash": None,
            "details": {"expected": 421614, "actual": 1, "network": "arbitrum-sepolia"},
        }


class TestLogging:
    def test_extra_fields_are_appended(self) -> None:
        stream = io.StringIO()
        logger = configure_logging(logging.INFO, stream=stream, fmt="%(levelname)s %(message)s")
        try:
            get_logger("tests").info("Transaction submitted", extra={"tx_hash": "0xabc", "chain_id": 421614})
        finally:
            for handler in list(logger.handlers):
                if not isinstance(handler, logging.NullHandler):
                    logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

        assert stream.getvalue() == "INFO Transaction submitted | chain_id=421614 tx_hash=0xabc\n"

    def test_loggers_share_namespace(self) -> None:
        assert get_logger("arbtransfer.poller").name == "arbtransfer.poller"
        assert get_logger("poller").name == "arbtransfer.poller"
