import sys, logging, argparse
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from utils.amounts import format_units
from utils.helper import FileHelper
from utils.ledger import LedgerBuilder, RecipientLedger, read_csv_records, save_ledger

import config  # your config.py

console = Console()


class CsvLedgerConverter:
    """
    Turns a holder snapshot export (HolderAddress,Balance) into airdrop.json:
    parallel recipient / amount lists, amounts in 18-decimal token units.
    """

    def __init__(self, csv_file: str = config.ACCOUNTS_CSV_FILE, json_file: str = config.AIRDROP_JSON_FILE,
                 address_column: str = config.CSV_ADDRESS_COLUMN, balance_column: str = config.CSV_BALANCE_COLUMN,
                 console: Console = console):
        self.console = console
        self.csv_file = csv_file
        self.json_file = json_file
        self.address_column = address_column
        self.balance_column = balance_column

        logging.basicConfig(level=logging.INFO, handlers=[RichHandler(console=self.console)])
        self.logger = logging.getLogger(__name__)

        self.builder = LedgerBuilder()

    def convert(self) -> RecipientLedger:
        records = read_csv_records(self.csv_file, self.address_column, self.balance_column)
        self.console.log(f"Read {len(records)} rows from {self.csv_file}")
        ledger = self.builder.build(records)
        save_ledger(ledger, self.json_file)
        return ledger

    def run(self) -> Optional[RecipientLedger]:
        if FileHelper.ensure_placeholder(self.csv_file, 'accounts'):
            self.console.log(f"[yellow]Created placeholder {self.csv_file}; fill it with the snapshot export and run again.[/yellow]")
            return None

        self.console.rule("[bold cyan]Converting snapshot[/bold cyan]")
        ledger = self.convert()

        self.console.rule("[bold]Result[/bold]")
        self.console.print(f"[bold]Rejected rows:[/bold] {len(self.builder.rejected)}")
        self.console.print(f"[bold]Zero-balance rows:[/bold] {len(self.builder.skipped)}")
        self.console.print(f"[bold]Total amount:[/bold] {format_units(ledger.total_amount)}")
        self.console.print(f"[bold green]Generated {self.json_file} with {len(ledger)} entries[/bold green]")
        return ledger


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Convert a holder CSV snapshot into airdrop.json")
    parser.add_argument("csv_file", nargs="?", default=config.ACCOUNTS_CSV_FILE)
    parser.add_argument("json_file", nargs="?", default=config.AIRDROP_JSON_FILE)
    parser.add_argument("--address-column", default=config.CSV_ADDRESS_COLUMN)
    parser.add_argument("--balance-column", default=config.CSV_BALANCE_COLUMN)
    args = parser.parse_args(argv)

    app = CsvLedgerConverter(args.csv_file, args.json_file, args.address_column, args.balance_column)
    try:
        app.run()
    except (ValueError, OSError) as e:  # LedgerError is a ValueError
        console.log(f"[bold red]Conversion failed: {e}[/bold red]")
        sys.exit(1)
    return 0


if __name__ == "__main__":
    main()
