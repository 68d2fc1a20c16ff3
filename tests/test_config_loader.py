import pytest

from src.paperledger.config.loader import load_settings

_ENV = ("PAPER_TRADES_FILE", "PAPER_TRADES_JOURNAL", "CLOB_HTTP_URL", "PROMETHEUS_PORT")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_missing_file_gives_defaults(tmp_path):
    s = load_settings(str(tmp_path / "absent.yaml"))
    assert s.ledger.path == "paper_trades.json"
    assert s.ledger.dust_tokens == 0.01
    assert s.ledger.journal_path == ""
    assert s.market_data.clob_http_url == "https://clob.polymarket.com"
    assert s.metrics.port == 0


def test_yaml_values_and_env_overrides(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "ledger:\n"
        "  path: state/ledger.json\n"
        "  residual_warn_usd: 0.5\n"
        "market_data:\n"
        "  timeout_s: 2.5\n"
        "metrics:\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("CLOB_HTTP_URL", "http://localhost:8080")
    monkeypatch.setenv("PROMETHEUS_PORT", "9108")
    s = load_settings(str(cfg))
    assert s.ledger.path == "state/ledger.json"
    assert s.ledger.residual_warn_usd == 0.5
    assert s.market_data.timeout_s == 2.5
    assert s.market_data.clob_http_url == "http://localhost:8080"
    assert s.metrics.port == 9108

    monkeypatch.setenv("PAPER_TRADES_FILE", "/tmp/other.json")
    assert load_settings(str(cfg)).ledger.path == "/tmp/other.json"


def test_invalid_values_rejected(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("ledger:\n  dust_tokens: -1\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(str(cfg))
    cfg.write_text("market_data:\n  timeout_s: 0\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(str(cfg))
