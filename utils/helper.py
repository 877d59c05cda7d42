import os
import re
import json
import logging
import time
from typing import List, Optional, Tuple

from web3 import Web3
from web3.exceptions import TimeExhausted
from eth_account import Account

from .rpc_provider import RotatingHTTPProvider
import config


logger = logging.getLogger(__name__)

_PRIV_RE = re.compile(r"^(?:0x)?([0-9a-fA-F]{64})$")


class Web3Helper:
    """
    Web3 wiring for the airdrop tasks: rotating provider, signing key,
    airdrop contract handle, balances and receipt waiting.
    """

    def __init__(self, chain_config, console=None):
        self.console = console
        self.cfg = chain_config

        self.rpc_urls: List[str] = self._build_rpc_urls(chain_config)
        self.provider = RotatingHTTPProvider(self.rpc_urls)
        self.w3 = Web3(self.provider)

        self.airdrop_abi = json.loads(getattr(chain_config, "AIRDROP_ABI", config.AIRDROP_ABI))
        self.erc20_abi = json.loads(getattr(chain_config, "TOKEN_ABI", config.TOKEN_ABI))

        self.private_keys: list[str] = []
        self.pk_addresses: list[str] = []

    # ---------- RPC ----------
    def _build_rpc_urls(self, chain_config) -> List[str]:
        urls: List[str] = []
        base = getattr(chain_config, "RPC_URL", None)
        if base:
            urls.append(str(base))

        extras_raw = os.getenv("EXTRA_RPC_URLS", config.EXTRA_RPC_URLS) or ""
        urls.extend([u.strip() for u in extras_raw.split(",") if u.strip()])

        dedup = list(dict.fromkeys(urls))
        if not dedup:
            name = getattr(chain_config, "CHAIN_NAME", "?")
            raise RuntimeError(f"No RPC URL configured for {name}. Set the network's RPC URL or EXTRA_RPC_URLS in .env")
        return dedup

    # ---------- Keys ----------
    def _parse_privatekeys_blob(self, blob: str) -> list[str]:
        """
        Private keys: hex with/without 0x, 64 hex chars. Returns normalized '0x' + lowercase, unique.
        """
        if not blob:
            return []
        out, seen = [], set()
        for raw in blob.replace(",", "\n").splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            for tok in re.split(r"[\s,;]+", line):
                if not tok:
                    continue
                m = _PRIV_RE.match(tok)
                if not m:
                    masked = f"{tok[:6]}...{tok[-4:]}" if len(tok) > 12 else "****"
                    logger.warning("private key: invalid, skipped: %s", masked)
                    continue
                key = "0x" + m.group(1).lower()
                if key not in seen:
                    seen.add(key); out.append(key)
        return out

    def _derive_addresses_from_private_keys(self, keys: list[str]) -> tuple[list[str], list[str]]:
        """
        Derive checksum addresses locally (no RPC). Invalid keys are skipped;
        returns (filtered_keys, derived_addresses) in the same order.
        """
        filtered_keys: list[str] = []
        derived: list[str] = []
        for k in keys:
            try:
                addr = Account.from_key(k).address
            except Exception as e:
                masked = f"{k[:6]}...{k[-4:]}" if len(k) > 12 else "****"
                logger.warning("Skipping invalid private key: %s (%s)", masked, e)
                continue
            filtered_keys.append(k)
            derived.append(Web3.to_checksum_address(addr))
        return filtered_keys, derived

    def load_privatekeys_file(self, key_file: str) -> tuple[list[str], list[str]]:
        try:
            with open(key_file, "r", encoding="utf-8-sig") as f:
                blob = f.read()
        except OSError as e:
            logger.error("Failed to read private keys file %s: %s", key_file, e)
            self.private_keys, self.pk_addresses = [], []
            return ([], [])

        keys, addrs = self._derive_addresses_from_private_keys(self._parse_privatekeys_blob(blob))
        self.private_keys, self.pk_addresses = keys, addrs
        return (keys, addrs)

    def load_signer(self, env_key: Optional[str] = None, key_file: str = config.WALLET_FILE) -> Tuple[str, str]:
        """
        The single signing key for the run: PRIVATE_KEY from the environment,
        else the first valid key in the wallet file.
        """
        if env_key:
            keys, addrs = self._derive_addresses_from_private_keys(self._parse_privatekeys_blob(env_key))
            if not keys:
                raise RuntimeError("PRIVATE_KEY in .env is not a valid private key")
        else:
            FileHelper.ensure_placeholder(key_file, 'wallets')
            keys, addrs = self.load_privatekeys_file(key_file)
            if not keys:
                raise RuntimeError(f"Missing PRIVATE_KEY in .env and no valid key in {key_file}")
        if len(keys) > 1:
            logger.warning("%s keys loaded, signing with the first one (%s)", len(keys), addrs[0])
        return keys[0], addrs[0]

    # ---------- Contracts / balances ----------
    def airdrop_contract(self, address: str):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=self.airdrop_abi)

    def get_native_balance(self, address: str) -> Optional[int]:
        try:
            return int(self.w3.eth.get_balance(Web3.to_checksum_address(address)))
        except Exception as e:
            logger.warning("Balance lookup for %s failed: %s", address, e)
            return None

    # ---------- Tx lifecycle ----------
    def wait_for_receipt(self, tx_hash, timeout: float = config.RECEIPT_TIMEOUT, start_delay: float = 2, max_delay: float = 8):
        """Poll with a growing latency until the receipt shows up; TimeExhausted after `timeout` seconds."""
        delay = start_delay
        start = time.time()
        while True:
            try:
                return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=delay, poll_latency=delay)
            except TimeExhausted:
                if time.time() - start > timeout:
                    raise
                delay = min(max_delay, delay * 1.5)


class FileHelper:
    """
    Placeholders for the input files so a first run shows where things go.
    """

    TEMPLATES = {
        'wallets': "# Enter the airdrop signer private key here. Supports 0x-prefixed or raw hex.\n",
        'accounts': f"{config.CSV_ADDRESS_COLUMN},{config.CSV_BALANCE_COLUMN}\n",
    }

    @staticmethod
    def ensure_placeholder(file_path: str, kind: str) -> bool:
        """Create the file from its template if missing. Returns True when a placeholder was written."""
        if os.path.exists(file_path):
            return False
        folder = os.path.dirname(os.path.abspath(file_path))
        if not os.path.exists(folder):
            os.makedirs(folder)
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(FileHelper.TEMPLATES.get(kind, ''))
        return True
