import io
import json

import pytest
from rich.console import Console

import modules.csv_to_json as csv_to_json
from modules.csv_to_json import CsvLedgerConverter
from utils.ledger import EmptyLedgerError


def addr(i: int) -> str:
    return f"0x{i:040x}"


def quiet_console():
    return Console(file=io.StringIO(), width=200)


def test_convert_snapshot(tmp_path):
    csv_path = tmp_path / "accounts.csv"
    json_path = tmp_path / "airdrop.json"
    csv_path.write_text(
        "HolderAddress,Balance\n"
        f"{addr(1)},\"1,234.5\"\n"
        f"{addr(2)},0\n"
        "0xZZZ,5\n"
        f"{addr(3)},0.0000000000000000019\n"
    )

    app = CsvLedgerConverter(str(csv_path), str(json_path), console=quiet_console())
    ledger = app.run()

    assert len(ledger) == 2
    assert json.loads(json_path.read_text()) == {
        "recipients": [addr(1), addr(3)],
        "amounts": ["1234500000000000000000", "1"],
    }
    assert [r.row_index for r in app.builder.rejected] == [3]
    assert [s.row_index for s in app.builder.skipped] == [2]
    assert "Generated" in app.console.file.getvalue()


def test_missing_snapshot_creates_placeholder(tmp_path):
    csv_path = tmp_path / "data" / "accounts.csv"
    json_path = tmp_path / "airdrop.json"
    app = CsvLedgerConverter(str(csv_path), str(json_path), console=quiet_console())

    assert app.run() is None
    assert csv_path.read_text() == "HolderAddress,Balance\n"
    assert not json_path.exists()


def test_snapshot_without_valid_rows(tmp_path):
    csv_path = tmp_path / "accounts.csv"
    csv_path.write_text("HolderAddress,Balance\nnot-an-address,10\n")
    app = CsvLedgerConverter(str(csv_path), str(tmp_path / "airdrop.json"), console=quiet_console())
    with pytest.raises(EmptyLedgerError):
        app.run()
    assert not (tmp_path / "airdrop.json").exists()


def test_main_exits_non_zero_on_empty_result(tmp_path):
    csv_path = tmp_path / "accounts.csv"
    csv_path.write_text("HolderAddress,Balance\n")
    with pytest.raises(SystemExit) as exc:
        csv_to_json.main([str(csv_path), str(tmp_path / "airdrop.json")])
    assert exc.value.code == 1


def test_main_with_custom_columns(tmp_path):
    csv_path = tmp_path / "holders.csv"
    json_path = tmp_path / "airdrop.json"
    csv_path.write_text(f"wallet,amount\n{addr(5)},2\n")
    assert csv_to_json.main([str(csv_path), str(json_path), "--address-column", "wallet", "--balance-column", "amount"]) == 0
    assert json.loads(json_path.read_text())["amounts"] == [str(2 * 10 ** 18)]
