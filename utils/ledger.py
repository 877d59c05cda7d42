import os
import re
import csv
import json
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import config
from utils.amounts import normalize, is_address, RowRejected, RowSkipped


logger = logging.getLogger(__name__)

INT_RE = re.compile(r"^[0-9]+$")


class LedgerError(ValueError):
    """Run-level input problem. Always fatal, raised before anything is sent."""


class EmptyLedgerError(LedgerError):
    pass


class LedgerAlignmentError(LedgerError):
    pass


class LedgerValidationError(LedgerError):
    pass


@dataclass(frozen=True)
class RawRecord:
    address: Optional[str]
    balance: Optional[str]
    row_index: int

    @classmethod
    def from_row(cls, row: dict, row_index: int,
                 address_column: str = config.CSV_ADDRESS_COLUMN,
                 balance_column: str = config.CSV_BALANCE_COLUMN) -> "RawRecord":
        return cls(address=row.get(address_column), balance=row.get(balance_column), row_index=row_index)


@dataclass(frozen=True)
class RecipientLedger:
    """
    Parallel recipient/amount sequences ready for airdropMint.
    Index i of `addresses` always belongs to index i of `amounts`.
    """
    addresses: Tuple[str, ...]
    amounts: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "addresses", tuple(self.addresses))
        object.__setattr__(self, "amounts", tuple(self.amounts))
        if len(self.addresses) != len(self.amounts):
            raise LedgerAlignmentError(
                f"Array length mismatch: recipients ({len(self.addresses)}) and amounts ({len(self.amounts)}) must be equal"
            )

    def __len__(self) -> int:
        return len(self.addresses)

    def slice(self, start: int, stop: int) -> "RecipientLedger":
        return RecipientLedger(self.addresses[start:stop], self.amounts[start:stop])

    @property
    def total_amount(self) -> int:
        return sum(self.amounts)

    def to_json(self) -> dict:
        return {
            "recipients": list(self.addresses),
            "amounts": [str(a) for a in self.amounts],
        }

    @classmethod
    def from_json(cls, data) -> "RecipientLedger":
        """
        Validate an airdrop.json document. Amounts are integer strings in token units.
        """
        if not isinstance(data, dict):
            raise LedgerValidationError("Airdrop data must be an object with 'recipients' and 'amounts'")
        recipients = data.get("recipients")
        amounts_raw = data.get("amounts")
        if not isinstance(recipients, list) or not isinstance(amounts_raw, list):
            raise LedgerValidationError("'recipients' and 'amounts' must both be lists")
        if len(recipients) != len(amounts_raw):
            raise LedgerAlignmentError("Recipients and amounts length mismatch")
        if not recipients:
            raise EmptyLedgerError("Empty airdrop list")

        amounts: List[int] = []
        for i, (addr, raw) in enumerate(zip(recipients, amounts_raw)):
            if not is_address(addr):
                raise LedgerValidationError(f"Invalid address at index {i}: {addr}")
            # plain digit strings only; bool is an int subclass and floats lose precision
            if isinstance(raw, str) and INT_RE.fullmatch(raw):
                value = int(raw)
            elif isinstance(raw, int) and not isinstance(raw, bool):
                value = raw
            else:
                raise LedgerValidationError(f"Invalid amount at index {i}: {raw!r}")
            if value <= 0:
                raise LedgerValidationError(f"Non-positive amount at index {i}: {raw!r}")
            amounts.append(value)
        return cls(tuple(recipients), tuple(amounts))


class LedgerBuilder:
    """
    Builds a RecipientLedger from snapshot rows.
    Bad rows are logged and collected, never raised; only an empty result is fatal.
    """

    def __init__(self, decimals: int = config.TOKEN_DECIMALS):
        self.decimals = decimals
        self.rejected: List[RowRejected] = []
        self.skipped: List[RowSkipped] = []

    def build(self, records: Iterable[RawRecord]) -> RecipientLedger:
        self.rejected = []
        self.skipped = []
        addresses: List[str] = []
        amounts: List[int] = []

        for rec in records:
            try:
                entry = normalize(rec.address, rec.balance, row_index=rec.row_index, decimals=self.decimals)
            except RowRejected as e:
                logger.warning("Skipping row %s: %s (Address: %s, Balance: %s)",
                               e.row_index, e.reason.value, e.address, e.balance)
                self.rejected.append(e)
                continue
            except RowSkipped as e:
                logger.warning("Skipping row %s: zero balance for address %s", e.row_index, e.address)
                self.skipped.append(e)
                continue
            addresses.append(entry.address)
            amounts.append(entry.amount)

        if not addresses:
            raise EmptyLedgerError("No valid recipients left after filtering the snapshot")
        return RecipientLedger(tuple(addresses), tuple(amounts))


@dataclass(frozen=True)
class Batch:
    index: int
    addresses: Tuple[str, ...]
    amounts: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.addresses)


def partition(ledger: RecipientLedger, size: int = config.BATCH_SIZE) -> List[Batch]:
    """Contiguous, order-preserving chunks of `size`; only the last one may be shorter."""
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ValueError(f"Batch size must be a positive integer, got {size!r}")
    batches: List[Batch] = []
    for number, start in enumerate(range(0, len(ledger), size), start=1):
        chunk = ledger.slice(start, start + size)
        batches.append(Batch(index=number, addresses=chunk.addresses, amounts=chunk.amounts))
    return batches


# ---------- Files ----------

def read_csv_records(csv_file: str,
                     address_column: str = config.CSV_ADDRESS_COLUMN,
                     balance_column: str = config.CSV_BALANCE_COLUMN) -> List[RawRecord]:
    records: List[RawRecord] = []
    with open(csv_file, "r", newline="", encoding="utf-8-sig") as f:
        # DictReader already drops blank lines, so indexes count data rows only
        for index, row in enumerate(csv.DictReader(f), start=1):
            records.append(RawRecord.from_row(row, index, address_column, balance_column))
    return records


def load_ledger(json_file: str) -> RecipientLedger:
    with open(json_file, "r", encoding="utf-8") as f:
        data = json.load(f)
    return RecipientLedger.from_json(data)


def save_ledger(ledger: RecipientLedger, json_file: str) -> str:
    folder = os.path.dirname(os.path.abspath(json_file))
    if not os.path.exists(folder):
        os.makedirs(folder)
    with open(json_file, "w", encoding="utf-8") as f:
        json.dump(ledger.to_json(), f, indent=2)
    return json_file


