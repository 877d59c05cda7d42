# config.py
import os
from dotenv import load_dotenv
from pathlib import Path

load_dotenv()

BASE_PATH = Path(__file__).resolve().parent / "resources"

# Airdrop contract (RockyCatV2 style: airdropMint(address[], uint256[]))
AIRDROP_CONTRACT_ADDRESS = os.getenv("AIRDROP_CONTRACT_ADDRESS", "0x6eb1e5d89130a97a6f644463f0045d2da6105da3")
AIRDROP_FUNCTION = os.getenv("AIRDROP_FUNCTION", "airdropMint")
BATCH_SIZE = int(os.getenv("AIRDROP_BATCH_SIZE", "500"))
TOKEN_DECIMALS = 18
RECEIPT_TIMEOUT = int(os.getenv("RECEIPT_TIMEOUT", "300"))

PRIVATE_KEY = os.getenv("PRIVATE_KEY")
EXTRA_RPC_URLS = os.getenv("EXTRA_RPC_URLS", "")

# Snapshot export columns
CSV_ADDRESS_COLUMN = "HolderAddress"
CSV_BALANCE_COLUMN = "Balance"

ACCOUNTS_CSV_FILE = os.path.join(BASE_PATH, "accounts.csv")
AIRDROP_JSON_FILE = os.path.join(BASE_PATH, "airdrop.json")
WALLET_FILE = os.path.join(BASE_PATH, "wallet.txt")  # private keys

AIRDROP_ABI = '''[
  {
    "type": "function",
    "name": "airdropMint",
    "stateMutability": "nonpayable",
    "inputs": [
      {"name": "recipients", "type": "address[]"},
      {"name": "amounts", "type": "uint256[]"}
    ],
    "outputs": []
  }
]'''

TOKEN_ABI = '''[
  {
    "type": "function",
    "name": "balanceOf",
    "stateMutability": "view",
    "inputs": [{"name": "_owner", "type": "address"}],
    "outputs": [{"name": "balance", "type": "uint256"}]
  },
  {
    "type": "function",
    "name": "decimals",
    "stateMutability": "view",
    "inputs": [],
    "outputs": [{"name": "", "type": "uint8"}]
  },
  {
    "type":"function",
    "name":"symbol",
    "stateMutability":"view",
    "inputs":[],
    "outputs":[{"name":"","type":"string"}]
  }
]'''


class LOCAL :
    # Hardhat / anvil node
    RPC_URL = os.getenv("LOCAL_RPC_URL", "http://127.0.0.1:8545")

    CHAIN_ID = 31337
    CHAIN_NAME = "local"
    NATIVE_SYMBOL = "ETH"

    AIRDROP_ABI = AIRDROP_ABI
    TOKEN_ABI = TOKEN_ABI


class BSC_TESTNET :
    RPC_URL = os.getenv("BSC_TESTNET_RPC_URL")

    CHAIN_ID = 97
    CHAIN_NAME = "bsc-testnet"
    NATIVE_SYMBOL = "tBNB"

    AIRDROP_ABI = AIRDROP_ABI
    TOKEN_ABI = TOKEN_ABI


class BSC :
    RPC_URL = os.getenv("BSC_MAINNET_RPC_URL")

    CHAIN_ID = 56
    CHAIN_NAME = "bsc"
    NATIVE_SYMBOL = "BNB"

    AIRDROP_ABI = AIRDROP_ABI
    TOKEN_ABI = TOKEN_ABI


# CLI network names -> chain config
NETWORKS = {
    "local": LOCAL,
    "testnet": BSC_TESTNET,
    "mainnet": BSC,
}

MODULE_PATH = Path(__file__).resolve().parent / "modules"
