from __future__ import annotations

from typing import Optional
import os
from prometheus_client import Counter, Gauge, REGISTRY

_trades_recorded: Optional[Counter] = None
_store_errors: Optional[Counter] = None
_quote_fallbacks: Optional[Counter] = None
_residual_discarded: Optional[Counter] = None
_realized_pnl_usd: Optional[Gauge] = None
_open_positions: Optional[Gauge] = None


class _NoOp:
    def labels(self, *args, **kwargs):
        return self
    def inc(self, *args, **kwargs):
        return None
    def set(self, *args, **kwargs):
        return None


def _disabled() -> bool:
    return os.getenv("DISABLE_PROMETHEUS", "0") == "1"


def _existing(name: str, kind):
    try:
        coll = getattr(REGISTRY, "_names_to_collectors", {}).get(name)
        if isinstance(coll, kind):
            return coll
        for coll in list(getattr(REGISTRY, "_collector_to_names", {}).keys()):  # type: ignore[attr-defined]
            if isinstance(coll, kind) and getattr(coll, "_name", None) == name:
                return coll
    except Exception:
        pass
    return None


def _safe_counter(name: str, doc: str, labelnames=()):
    if _disabled():
        return _NoOp()
    try:
        return Counter(name, doc, labelnames)
    except ValueError:
        # already registered (module reloaded or imported under two names)
        return _existing(name, Counter) or _NoOp()


def _safe_gauge_labels(name: str, doc: str, labelnames=()):
    if _disabled():
        return _NoOp()
    try:
        return Gauge(name, doc, labelnames)
    except ValueError:
        return _existing(name, Gauge) or _NoOp()


def get_trades_recorded_total():
    global _trades_recorded
    if _trades_recorded is None:
        _trades_recorded = _safe_counter(
            "ledger_trades_recorded_total", "Paper trades recorded", ["side"]
        )
    return _trades_recorded


def get_store_errors_total():
    """Counter: ledger store failures, labeled by op (load|save)."""
    global _store_errors
    if _store_errors is None:
        _store_errors = _safe_counter(
            "ledger_store_errors_total", "Ledger store read/write failures", ["op"]
        )
    return _store_errors


def get_quote_fallbacks_total():
    global _quote_fallbacks
    if _quote_fallbacks is None:
        _quote_fallbacks = _safe_counter(
            "ledger_quote_fallbacks_total", "Positions marked at entry price for lack of a quote"
        )
    return _quote_fallbacks


def get_residual_discarded_total():
    global _residual_discarded
    if _residual_discarded is None:
        _residual_discarded = _safe_counter(
            "ledger_residual_discarded_total", "Positions closed with non-trivial residual cost basis"
        )
    return _residual_discarded


def get_realized_pnl_usd():
    global _realized_pnl_usd
    if _realized_pnl_usd is None:
        _realized_pnl_usd = _safe_gauge_labels(
            "ledger_realized_pnl_usd", "Lifetime realized PnL in USD"
        )
    return _realized_pnl_usd


def get_open_positions():
    global _open_positions
    if _open_positions is None:
        _open_positions = _safe_gauge_labels(
            "ledger_open_positions", "Open paper positions"
        )
    return _open_positions


def set_ledger_gauges(realized_pnl: float, open_positions: int) -> None:
    """Publish the ledger's current realized PnL and open position count."""
    try:
        get_realized_pnl_usd().set(float(realized_pnl))
        get_open_positions().set(int(open_positions))
    except Exception:
        # metrics are optional in constrained environments
        pass


def inc_store_error(op: str) -> None:
    try:
        get_store_errors_total().labels(op).inc()
    except Exception:
        pass
