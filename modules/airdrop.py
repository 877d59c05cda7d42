import sys, logging, argparse
from typing import List, Optional, Sequence

import questionary
from rich.console import Console
from rich.logging import RichHandler

from web3 import Web3

from utils.helper import Web3Helper
from utils.ledger import RecipientLedger, load_ledger, partition
from utils.report import RunReporter
from utils.submitter import Receipt, RunSummary, SubmissionRecord, submit_all

import config  # your config.py

console = Console()


class AirdropManager:
    """
    Sends airdrop.json to the airdrop contract in fixed-size batches,
    one transaction at a time, stopping at the first failed batch.
    """

    def __init__(self, chain_config, web3h: Optional[Web3Helper] = None, console: Console = console,
                 contract_address: str = config.AIRDROP_CONTRACT_ADDRESS,
                 function_name: str = config.AIRDROP_FUNCTION,
                 batch_size: int = config.BATCH_SIZE,
                 airdrop_file: str = config.AIRDROP_JSON_FILE,
                 receipt_timeout: float = config.RECEIPT_TIMEOUT):
        self.console = console
        self.chain_config = chain_config
        self.chain_id = int(chain_config.CHAIN_ID)
        self.chain_name = chain_config.CHAIN_NAME
        self.native_symbol = getattr(chain_config, "NATIVE_SYMBOL", "")

        # --- logging
        logging.basicConfig(level=logging.INFO, handlers=[RichHandler(console=self.console)])
        self.logger = logging.getLogger(__name__)

        # --- helper-backed web3 wiring
        self.web3h = web3h or Web3Helper(chain_config, console=self.console)
        self.w3 = self.web3h.w3

        if not Web3.is_address(contract_address or ""):
            raise RuntimeError(f"Invalid airdrop contract address: {contract_address}")
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.contract = self.web3h.airdrop_contract(self.contract_address)
        self.function_name = function_name
        self.batch_size = batch_size
        self.airdrop_file = airdrop_file
        self.receipt_timeout = receipt_timeout

        self.private_key: Optional[str] = None
        self.sender: Optional[str] = None
        self.reporter = RunReporter(console=self.console)

    # ---- signer
    def load_signer(self, env_key: Optional[str] = config.PRIVATE_KEY) -> str:
        self.private_key, self.sender = self.web3h.load_signer(env_key)
        return self.sender

    # ---- chain collaborators
    def submit_one(self, recipients: Sequence[str], amounts: Sequence[int]) -> str:
        """One airdropMint call; gas and fees are left to the client's defaults."""
        if not self.private_key:
            raise RuntimeError("No signer loaded")
        fn = getattr(self.contract.functions, self.function_name)
        tx = fn([Web3.to_checksum_address(a) for a in recipients], [int(a) for a in amounts]).build_transaction({
            "chainId": self.chain_id,
            "from": self.sender,
            "nonce": self.w3.eth.get_transaction_count(self.sender, "pending"),
        })
        signed = self.w3.eth.account.sign_transaction(tx, private_key=self.private_key)
        return Web3.to_hex(self.w3.eth.send_raw_transaction(signed.raw_transaction))

    def wait_one(self, tx_hash: str) -> Receipt:
        rcpt = self.web3h.wait_for_receipt(tx_hash, timeout=self.receipt_timeout)
        return Receipt(
            success=rcpt.get("status", 0) == 1,
            confirmed_address=rcpt.get("to"),
            block_number=rcpt.get("blockNumber"),
        )

    # ------------- Main flow
    def load_ledger(self) -> RecipientLedger:
        ledger = load_ledger(self.airdrop_file)
        self.logger.info("Loaded %s recipients from %s", len(ledger), self.airdrop_file)
        return ledger

    def run(self, confirm: bool = True) -> Optional[RunSummary]:
        self.console.rule(f"[bold cyan]Running {self.function_name} on network: {self.chain_name}[/bold cyan]")
        ledger = self.load_ledger()
        batches = partition(ledger, self.batch_size)

        self.load_signer()
        balance = self.web3h.get_native_balance(self.sender)
        self.reporter.ledger_overview(ledger, batches, self.sender, balance, self.native_symbol)
        self.console.print(f"[bold]Contract:[/bold] {self.contract_address}")

        if confirm and not questionary.confirm(f"Send {len(batches)} batch transaction(s)?").ask():
            self.console.log("[yellow]Cancelled by user[/yellow]")
            return None

        with self.reporter.progress() as progress:
            task = progress.add_task("[cyan]Airdropping...", total=len(batches))

            def on_record(record: SubmissionRecord) -> None:
                self.reporter.batch_update(record)
                if record.done:
                    progress.advance(task, 1)

            run = submit_all(batches, self.submit_one, self.wait_one, on_record=on_record)

        self.reporter.summary(run)
        return run


def select_chain(network: Optional[str]):
    if network is None:
        network = questionary.select("Select network:", choices=list(config.NETWORKS)).ask()
    chain_config = config.NETWORKS.get((network or "").lower())
    if chain_config is None:
        raise RuntimeError(f"Unknown network '{network}'. Choose one of: {', '.join(config.NETWORKS)}")
    return chain_config


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Batch airdropMint from airdrop.json")
    parser.add_argument("network", nargs="?", choices=list(config.NETWORKS), help="network to send on")
    parser.add_argument("--file", default=config.AIRDROP_JSON_FILE, help="prepared airdrop JSON")
    parser.add_argument("--batch-size", type=int, default=config.BATCH_SIZE)
    parser.add_argument("--yes", action="store_true", help="skip the confirmation prompt")
    args = parser.parse_args(argv)

    try:
        app = AirdropManager(select_chain(args.network), airdrop_file=args.file, batch_size=args.batch_size)
        run = app.run(confirm=not args.yes)
    except (RuntimeError, ValueError, OSError) as e:  # LedgerError is a ValueError
        console.log(f"[bold red]Airdrop failed: {e}[/bold red]")
        sys.exit(1)

    if run is not None and not run.ok:
        sys.exit(1)
    return 0


if __name__ == "__main__":
    main()
