from typing import Optional, Sequence

from rich.console import Console
from rich.progress import Progress, BarColumn, TimeElapsedColumn, TimeRemainingColumn

from utils.amounts import format_units
from utils.ledger import Batch, RecipientLedger
from utils.submitter import RunSummary, SubmissionRecord, SubmissionState


class RunReporter:
    """
    Console output for an airdrop run: plan preview, one line per batch
    state change and the final pass/fail summary.
    """

    def __init__(self, console: Optional[Console] = None, total_batches: int = 0):
        self.console = console or Console()
        self.total_batches = total_batches

    def ledger_overview(self, ledger: RecipientLedger, batches: Sequence[Batch],
                        sender: Optional[str] = None, native_balance: Optional[int] = None,
                        native_symbol: str = "") -> None:
        self.total_batches = len(batches)
        self.console.rule("[bold]Airdrop Plan[/bold]")
        if sender:
            self.console.print(f"[bold]Using account:[/bold] {sender}")
        if native_balance is not None:
            self.console.print(f"[bold]{native_symbol or 'Native'} Balance:[/bold] {format_units(native_balance)}")
        self.console.print(f"[bold]Total recipients:[/bold] {len(ledger)}")
        self.console.print(f"[bold]Total amount:[/bold] {format_units(ledger.total_amount)}")
        sizes = ", ".join(str(len(b)) for b in batches[:10])
        if len(batches) > 10:
            sizes += ", ..."
        self.console.print(f"[bold]Batches:[/bold] {len(batches)} ({sizes})")

    def progress(self) -> Progress:
        return Progress(
            "[progress.description]{task.description}",
            BarColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            TimeElapsedColumn(),
            "•",
            TimeRemainingColumn(),
            console=self.console,
        )

    def batch_update(self, record: SubmissionRecord) -> None:
        label = f"Batch {record.batch_index}/{self.total_batches}"
        if record.state is SubmissionState.SENT:
            self.console.log(f"{label} ({record.size} recipients) transaction sent: {record.tx_hash}")
        elif record.state is SubmissionState.CONFIRMED:
            block = f" in block {record.block_number}" if record.block_number is not None else ""
            self.console.log(f"[green]{label} transaction confirmed{block}: {record.tx_hash}[/green]")
        elif record.state is SubmissionState.FAILED:
            tx = f" (tx {record.tx_hash})" if record.tx_hash else ""
            self.console.log(f"[red]{label} failed{tx}: {record.error}[/red]")

    def summary(self, run: RunSummary) -> None:
        self.console.rule("[bold]Done[/bold]")
        stats = run.as_dict()
        self.console.print(f"[bold]Total batches:[/bold] {stats['totalBatches']}")
        self.console.print(f"[bold green]Confirmed:[/bold green] {stats['confirmed']}")
        if run.ok:
            self.console.print("[bold green]Airdrop complete for all batches![/bold green]")
            return
        if run.failed_at is not None:
            self.console.print(f"[bold red]Failed at batch:[/bold red] {run.failed_at}")
        self.console.print(f"[yellow]Last confirmed batch: {run.last_confirmed}. "
                           f"Batches after it were not sent.[/yellow]")
        self.console.print("[yellow]Re-running with the same input resends already confirmed batches; "
                           "remove them from the input first.[/yellow]")
