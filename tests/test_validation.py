"""
Tests for address validation and decimal amount conversion.
"""

import pytest

from arbtransfer import AccountId, AmountParseError, InvalidAddressError
from arbtransfer.validation import format_units, is_valid_address, parse_amount, validate_address

VALID = "0xd78677EFed3b87f8f421E68dA3F984ad8Ef76439"


class TestValidateAddress:
    @pytest.mark.parametrize(
        "text",
        [
            "0xd78677EFed3b87f8f421E68dA3F984ad8Ef76439",
            "0x7292dD72151DaCFBbE76305db1C8Ab1928E922E4",
            "d78677EFed3b87f8f421E68dA3F984ad8Ef76439",
        ],
    )
    def test_accepts_valid_addresses(self, text: str) -> None:
        assert isinstance(validate_address(text), AccountId)

    def test_marker_and_case_do_not_change_value(self) -> None:
        body = VALID[2:]
        forms = [VALID, body, body.lower(), body.upper(), "0x" + body.lower(), "0X" + body.upper()]

        values = {validate_address(f) for f in forms}

        assert len(values) == 1
        assert validate_address(VALID).raw == bytes.fromhex(body)

    def test_renders_checksum_and_hex(self) -> None:
        account = validate_address(VALID.lower())

        assert account.checksum == VALID
        assert account.hex == VALID.lower()
        assert str(account) == VALID

    @pytest.mark.parametrize(
        "text",
        [
            "0x123",
            "",
            "0x",
            "0x" + "a" * 39,
            "0x" + "a" * 41,
            "a" * 42,
            "not_an_address",
        ],
    )
    def test_rejects_wrong_length(self, text: str) -> None:
        with pytest.raises(InvalidAddressError) as exc_info:
            validate_address(text)
        assert exc_info.value.address == text
        assert "hex characters" in exc_info.value.reason

    @pytest.mark.parametrize(
        "text",
        [
            "0xGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGGG",
            "0x" + "a" * 39 + "z",
            "0x" + " " * 40,
            "0x" + "a" * 39 + "\n",
        ],
    )
    def test_rejects_non_hex(self, text: str) -> None:
        with pytest.raises(InvalidAddressError) as exc_info:
            validate_address(text)
        assert exc_info.value.reason == "contains non-hex characters"
        assert exc_info.value.details["address"] == text

    def test_error_names_field(self) -> None:
        with pytest.raises(InvalidAddressError, match="receiver"):
            validate_address("0x123", "receiver")

    def test_rejects_non_string(self) -> None:
        with pytest.raises(InvalidAddressError):
            validate_address(1234)  # type: ignore[arg-type]

    def test_is_valid_address(self) -> None:
        assert is_valid_address(VALID)
        assert not is_valid_address("0x123")


class TestParseAmount:
    def test_one_ether(self) -> None:
        assert parse_amount("1.0") == 10**18

    def test_transfer_amount(self) -> None:
        assert parse_amount("0.0001") == 100_000_000_000_000

    def test_ratio_is_exact(self) -> None:
        assert parse_amount("1.0") == 1000 * parse_amount("0.001")
        assert parse_amount("1.0", decimals=3) == 1000 * parse_amount("0.001", decimals=3)

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("0", 0),
            ("12", 12 * 10**18),
            (".5", 5 * 10**17),
            ("5.", 5 * 10**18),
            ("0.000000000000000001", 1),
            ("1.100000000000000000000", 11 * 10**17),
            (" 2.5 ", 25 * 10**17),
        ],
    )
    def test_valid_forms(self, text: str, expected: int) -> None:
        assert parse_amount(text) == expected

    def test_over_precise_fails_instead_of_rounding(self) -> None:
        with pytest.raises(AmountParseError, match="more than 18 fractional digits"):
            parse_amount("0.0000000000000000001")

    def test_precision_follows_unit(self) -> None:
        assert parse_amount("1.234", decimals=3) == 1234
        with pytest.raises(AmountParseError):
            parse_amount("1.2345", decimals=3)

    @pytest.mark.parametrize(
        "text",
        ["", ".", "abc", "1.2.3", "-1", "1e18", "0x10", "1,5", "NaN", "\u0661.\u0665", "\uff11"],
    )
    def test_malformed(self, text: str) -> None:
        with pytest.raises(AmountParseError) as exc_info:
            parse_amount(text)
        assert exc_info.value.amount == text

    def test_non_string(self) -> None:
        with pytest.raises(AmountParseError):
            parse_amount(1.5)  # type: ignore[arg-type]


class TestFormatUnits:
    @pytest.mark.parametrize(
        "value,decimals,expected",
        [
            (0, 18, "0"),
            (10**18, 18, "1"),
            (2_100_000_000_000_000, 18, "0.0021"),
            (120, 9, "0.00000012"),
            (10_000_000, 9, "0.01"),
            (-5 * 10**17, 18, "-0.5"),
            (42, 0, "42"),
        ],
    )
    def test_format(self, value: int, decimals: int, expected: str) -> None:
        assert format_units(value, decimals) == expected

    def test_inverse_of_parse(self) -> None:
        assert format_units(parse_amount("0.0001")) == "0.0001"
