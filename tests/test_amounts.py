import math
from fractions import Fraction

import pytest

from utils.amounts import normalize, format_units, RejectReason, RowRejected, RowSkipped, NormalizedEntry

ADDR = "0x" + "ab" * 20


def test_grouped_balance_scenario():
    entry = normalize(ADDR, "1,234.5")
    assert entry == NormalizedEntry(address=ADDR, amount=1234500000000000000000)


@pytest.mark.parametrize("balance", ["0", "0.000000000000000000", "0.0000000000000000001", "0,000"])
def test_zero_amount_is_skipped_not_rejected(balance):
    with pytest.raises(RowSkipped) as exc:
        normalize(ADDR, balance, row_index=4)
    assert exc.value.row_index == 4
    assert not isinstance(exc.value, RowRejected)


def test_invalid_hex_address_rejected_with_row_index():
    bad = "0x" + "Z" * 40
    with pytest.raises(RowRejected) as exc:
        normalize(bad, "10", row_index=7)
    assert exc.value.reason is RejectReason.INVALID_ADDRESS
    assert exc.value.reason.value == "invalid address format"
    assert exc.value.row_index == 7
    assert exc.value.address == bad
    assert "row 7" in str(exc.value)


@pytest.mark.parametrize("address", ["0x1234", "ab" * 20, "0x" + "ab" * 20 + "00", "0X" + "ab" * 20])
def test_address_pattern_is_strict(address):
    with pytest.raises(RowRejected) as exc:
        normalize(address, "1")
    assert exc.value.reason is RejectReason.INVALID_ADDRESS


def test_address_is_case_insensitive_and_trimmed():
    mixed = "0x" + "aB" * 20
    assert normalize(f"  {mixed} ", "1").address == mixed


@pytest.mark.parametrize("address,balance", [(None, "1"), ("", "1"), (ADDR, None), (ADDR, ""), (ADDR, ",,"), ("   ", "1")])
def test_missing_fields(address, balance):
    with pytest.raises(RowRejected) as exc:
        normalize(address, balance, row_index=2)
    assert exc.value.reason is RejectReason.MISSING_FIELD


@pytest.mark.parametrize("balance", [".", "1.2.3", "-1", "1e5", "abc", "1 000", "+5", "٣", " 5", "5 ", "   ", " 1,234.5 "])
def test_malformed_balance(balance):
    with pytest.raises(RowRejected) as exc:
        normalize(ADDR, balance)
    assert exc.value.reason is RejectReason.INVALID_BALANCE
    assert exc.value.balance == balance


def test_padded_balance_is_not_trimmed():
    with pytest.raises(RowRejected) as exc:
        normalize(ADDR, " 1,234.5 ", row_index=1)
    assert exc.value.reason is RejectReason.INVALID_BALANCE
    assert exc.value.row_index == 1


def test_excess_fraction_digits_are_truncated_not_rounded():
    # 19th digit is a 9; rounding would bump the last unit
    assert normalize(ADDR, "1.1234567890123456789").amount == 1123456789012345678
    assert normalize(ADDR, "0.9999999999999999999").amount == 999999999999999999


def test_partial_forms():
    assert normalize(ADDR, ".5").amount == 5 * 10 ** 17
    assert normalize(ADDR, "5.").amount == 5 * 10 ** 18
    assert normalize(ADDR, "007").amount == 7 * 10 ** 18


def test_amounts_match_exact_decimal_value():
    samples = ["1", "0.1", "3.14159", "1,000,000.000000000000000001", "123456789012345678901234567890.123456789"]
    for s in samples:
        expected = math.floor(Fraction(s.replace(",", "")) * 10 ** 18)
        assert normalize(ADDR, s).amount == expected


def test_large_supply_has_no_float_drift():
    amount = normalize(ADDR, "99999999999999999999999.999999999999999999").amount
    assert amount == 99999999999999999999999999999999999999999


def test_normalize_is_pure():
    assert normalize(ADDR, "42.42") == normalize(ADDR, "42.42")


def test_custom_decimals():
    assert normalize(ADDR, "1.2345678", decimals=6).amount == 1234567


def test_format_units():
    assert format_units(1234500000000000000000) == "1234.5"
    assert format_units(10 ** 18) == "1"
    assert format_units(1) == "0.000000000000000001"
    assert format_units(0) == "0"
