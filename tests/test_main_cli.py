import json

import pytest

from src.paperledger.main import main

_ENV = ("PAPER_TRADES_FILE", "PAPER_TRADES_JOURNAL", "CLOB_HTTP_URL", "PROMETHEUS_PORT")


@pytest.fixture
def cfg(tmp_path, monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(f"ledger:\n  path: {tmp_path / 'paper_trades.json'}\n", encoding="utf-8")
    return str(path)


def _record(cfg, side, tokens, usdc):
    return main([
        "--config", cfg, "record", "--side", side, "--asset", "7123", "--condition-id", "0xcond",
        "--market", "Will it snow?", "--outcome", "Yes", "--tokens", str(tokens), "--usdc", str(usdc),
    ])


def test_record_report_export_reset(cfg, tmp_path, capsys):
    assert _record(cfg, "BUY", 100, 40) == 0
    assert _record(cfg, "sell", 50, 30) == 0
    doc = json.loads((tmp_path / "paper_trades.json").read_text(encoding="utf-8"))
    assert doc["realizedPnL"] == pytest.approx(10.0)
    assert doc["trades"][0]["price"] == pytest.approx(0.4)

    assert main(["--config", cfg, "report", "--offline"]) == 0
    out = capsys.readouterr().out
    assert "PAPER TRADING REPORT" in out
    assert "Will it snow? (Yes)" in out

    out_dir = tmp_path / "export"
    assert main(["--config", cfg, "export", "--out", str(out_dir)]) == 0
    assert (out_dir / "trades.csv").read_text(encoding="utf-8").count("\n") == 3
    assert (out_dir / "positions.csv").exists()

    assert main(["--config", cfg, "rebuild"]) == 0
    assert main(["--config", cfg, "reset"]) == 0
    doc = json.loads((tmp_path / "paper_trades.json").read_text(encoding="utf-8"))
    assert doc["trades"] == [] and doc["positions"] == {} and doc["totalInvested"] == 0.0


def test_invalid_side_exits_2(cfg, tmp_path):
    assert _record(cfg, "HOLD", 1, 1) == 2
    assert not (tmp_path / "paper_trades.json").exists()
