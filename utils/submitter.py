import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from utils.ledger import Batch


logger = logging.getLogger(__name__)


class SubmissionState(Enum):
    PENDING = "pending"
    SENT = "sent"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class InvalidTransition(RuntimeError):
    pass


# Pending -> Sent -> Confirmed | Failed; Pending -> Failed when the send itself throws
_ALLOWED = {
    SubmissionState.PENDING: {SubmissionState.SENT, SubmissionState.FAILED},
    SubmissionState.SENT: {SubmissionState.CONFIRMED, SubmissionState.FAILED},
    SubmissionState.CONFIRMED: set(),
    SubmissionState.FAILED: set(),
}


@dataclass(frozen=True)
class Receipt:
    success: bool
    confirmed_address: Optional[str] = None
    block_number: Optional[int] = None


@dataclass
class SubmissionRecord:
    batch_index: int
    size: int
    state: SubmissionState = SubmissionState.PENDING
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    block_number: Optional[int] = None

    def _move(self, new_state: SubmissionState) -> None:
        if new_state not in _ALLOWED[self.state]:
            raise InvalidTransition(f"Batch {self.batch_index}: {self.state.value} -> {new_state.value} is not allowed")
        self.state = new_state

    def mark_sent(self, tx_hash: str) -> None:
        self._move(SubmissionState.SENT)
        self.tx_hash = tx_hash

    def mark_confirmed(self, block_number: Optional[int] = None) -> None:
        self._move(SubmissionState.CONFIRMED)
        self.block_number = block_number

    def mark_failed(self, error: str, block_number: Optional[int] = None) -> None:
        self._move(SubmissionState.FAILED)
        self.error = error
        self.block_number = block_number

    @property
    def done(self) -> bool:
        return self.state in (SubmissionState.CONFIRMED, SubmissionState.FAILED)


@dataclass
class RunSummary:
    total_batches: int
    records: List[SubmissionRecord] = field(default_factory=list)

    @property
    def confirmed(self) -> int:
        return sum(1 for r in self.records if r.state is SubmissionState.CONFIRMED)

    @property
    def failed_at(self) -> Optional[int]:
        for r in self.records:
            if r.state is SubmissionState.FAILED:
                return r.batch_index
        return None

    @property
    def last_confirmed(self) -> int:
        """Index of the last confirmed batch (0 if none): where a manual re-run has to pick up."""
        confirmed = [r.batch_index for r in self.records if r.state is SubmissionState.CONFIRMED]
        return confirmed[-1] if confirmed else 0

    @property
    def ok(self) -> bool:
        return self.failed_at is None and self.confirmed == self.total_batches

    def as_dict(self) -> dict:
        return {
            "totalBatches": self.total_batches,
            "confirmed": self.confirmed,
            "failedAt": self.failed_at,
        }


SubmitOne = Callable[[Sequence[str], Sequence[int]], str]
WaitOne = Callable[[str], Receipt]
OnRecord = Callable[[SubmissionRecord], None]


def submit_batch(batch: Batch, submit_one: SubmitOne, wait_one: WaitOne,
                 on_record: Optional[OnRecord] = None) -> SubmissionRecord:
    """
    Push one batch through Pending -> Sent -> Confirmed/Failed.

    Errors from either collaborator end up on the record instead of propagating;
    the caller decides what a failed batch means for the run.
    """
    record = SubmissionRecord(batch_index=batch.index, size=len(batch))

    try:
        tx_hash = submit_one(list(batch.addresses), list(batch.amounts))
    except Exception as e:
        logger.error("Batch %s: submission failed: %s", batch.index, e)
        record.mark_failed(f"submission failed: {e}")
        _notify(on_record, record)
        return record

    record.mark_sent(tx_hash)
    _notify(on_record, record)

    try:
        receipt = wait_one(tx_hash)
    except Exception as e:
        logger.error("Batch %s: waiting for %s failed: %s", batch.index, tx_hash, e)
        record.mark_failed(f"confirmation failed: {e}")
        _notify(on_record, record)
        return record

    if receipt.success:
        record.mark_confirmed(receipt.block_number)
    else:
        record.mark_failed("transaction reverted", receipt.block_number)
    _notify(on_record, record)
    return record


def submit_all(batches: Sequence[Batch], submit_one: SubmitOne, wait_one: WaitOne,
               on_record: Optional[OnRecord] = None) -> RunSummary:
    """Strictly sequential, fail-fast: nothing after the first failed batch is sent."""
    run = RunSummary(total_batches=len(batches))
    for batch in batches:
        record = submit_batch(batch, submit_one, wait_one, on_record)
        run.records.append(record)
        if record.state is SubmissionState.FAILED:
            logger.error("Stopping after failed batch %s/%s; %s batch(es) confirmed before it",
                         batch.index, len(batches), run.confirmed)
            break
    return run


def _notify(on_record: Optional[OnRecord], record: SubmissionRecord) -> None:
    if on_record is not None:
        on_record(record)
