import io

from rich.console import Console

from utils.ledger import RecipientLedger, partition
from utils.report import RunReporter
from utils.submitter import RunSummary, SubmissionRecord


def make_reporter():
    return RunReporter(Console(file=io.StringIO(), width=200))


def output(reporter):
    return reporter.console.file.getvalue()


def test_overview_shows_exact_totals():
    ledger = RecipientLedger(tuple(f"0x{i:040x}" for i in range(1, 4)), (10 ** 18, 5 * 10 ** 17, 1))
    reporter = make_reporter()
    reporter.ledger_overview(ledger, partition(ledger, 2), sender="0xabc", native_balance=2 * 10 ** 18, native_symbol="tBNB")
    text = output(reporter)
    assert "Total recipients: 3" in text
    assert "Total amount: 1.500000000000000001" in text
    assert "Batches: 2 (2, 1)" in text
    assert "tBNB Balance: 2" in text
    assert reporter.total_batches == 2


def test_batch_lines():
    reporter = make_reporter()
    reporter.total_batches = 2
    record = SubmissionRecord(batch_index=1, size=500)
    record.mark_sent("0xaa")
    reporter.batch_update(record)
    record.mark_confirmed(77)
    reporter.batch_update(record)
    failed = SubmissionRecord(batch_index=2, size=10)
    failed.mark_failed("submission failed: nonce too low")
    reporter.batch_update(failed)

    text = output(reporter)
    assert "Batch 1/2 (500 recipients) transaction sent: 0xaa" in text
    assert "Batch 1/2 transaction confirmed in block 77: 0xaa" in text
    assert "Batch 2/2 failed: submission failed: nonce too low" in text


def test_summary_on_partial_failure():
    ok = SubmissionRecord(batch_index=1, size=1)
    ok.mark_sent("0x1")
    ok.mark_confirmed()
    bad = SubmissionRecord(batch_index=2, size=1)
    bad.mark_sent("0x2")
    bad.mark_failed("transaction reverted")
    reporter = make_reporter()
    reporter.summary(RunSummary(total_batches=3, records=[ok, bad]))

    text = output(reporter)
    assert "Confirmed: 1" in text
    assert "Failed at batch: 2" in text
    assert "Last confirmed batch: 1" in text
    assert "Airdrop complete" not in text
