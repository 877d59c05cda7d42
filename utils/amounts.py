import re
from enum import Enum
from dataclasses import dataclass
from typing import Optional

import config


ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
BALANCE_RE = re.compile(r"^[0-9]*\.?[0-9]*$")


class RejectReason(Enum):
    MISSING_FIELD = "missing address or balance"
    INVALID_ADDRESS = "invalid address format"
    INVALID_BALANCE = "invalid balance format"
    CONVERSION_ERROR = "balance conversion failed"


class RowRejected(ValueError):
    """
    A snapshot row that cannot become a ledger entry.
    Carries the 1-based row index and the raw values for diagnostics.
    """

    def __init__(self, reason: RejectReason, row_index: Optional[int], address, balance, detail: str = ""):
        self.reason = reason
        self.row_index = row_index
        self.address = address
        self.balance = balance
        self.detail = detail
        msg = f"row {row_index}: {reason.value} (Address: {address}, Balance: {balance})"
        if detail:
            msg += f" - {detail}"
        super().__init__(msg)


class RowSkipped(Exception):
    """A well-formed row whose amount is zero. Not an error, the row is just left out."""

    def __init__(self, row_index: Optional[int], address: str):
        self.row_index = row_index
        self.address = address
        super().__init__(f"row {row_index}: zero balance for address {address}")


@dataclass(frozen=True)
class NormalizedEntry:
    address: str
    amount: int


def is_address(value) -> bool:
    return isinstance(value, str) and bool(ADDRESS_RE.fullmatch(value))


def normalize(address, balance_text, row_index: Optional[int] = None, decimals: int = config.TOKEN_DECIMALS) -> NormalizedEntry:
    """
    Turn a human readable balance ("1,234.5") into an integer amount of token units.

    Fractional digits beyond `decimals` are truncated, never rounded. Everything
    is done on ints/strings, no float ever touches the value.
    Raises RowRejected for bad input and RowSkipped for a zero amount.
    """
    addr = address.strip() if isinstance(address, str) else ""
    balance = balance_text.replace(",", "") if isinstance(balance_text, str) else ""

    if not addr or not balance:
        raise RowRejected(RejectReason.MISSING_FIELD, row_index, address, balance_text)
    if not ADDRESS_RE.fullmatch(addr):
        raise RowRejected(RejectReason.INVALID_ADDRESS, row_index, address, balance_text)
    # digits, at most one dot, and not just the dot
    if not BALANCE_RE.fullmatch(balance) or balance == ".":
        raise RowRejected(RejectReason.INVALID_BALANCE, row_index, address, balance_text)

    integer_part, _, fraction_part = balance.partition(".")
    padded = fraction_part.ljust(decimals, "0")[:decimals]
    try:
        amount = int(integer_part or "0") * (10 ** decimals) + int(padded or "0")
    except ValueError as e:
        raise RowRejected(RejectReason.CONVERSION_ERROR, row_index, address, balance_text, str(e)) from e

    if amount == 0:
        raise RowSkipped(row_index, addr)
    return NormalizedEntry(address=addr, amount=amount)


def format_units(amount: int, decimals: int = config.TOKEN_DECIMALS) -> str:
    # exact inverse of normalize for display; 1234500000000000000000 -> "1234.5"
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(int(amount)), 10 ** decimals)
    if not frac:
        return f"{sign}{whole}"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{frac_str}"
