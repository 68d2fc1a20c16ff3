from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
import logging
import math

from .model import LedgerState, Position
from ..market.quotes import QuoteSource
from ..metrics.ledger import get_quote_fallbacks_total

_MS_PER_MINUTE = 60_000
_MS_PER_HOUR = 60 * _MS_PER_MINUTE


@dataclass(frozen=True)
class LedgerStats:
    total_trades: int
    buy_trades: int
    sell_trades: int
    total_invested: float
    current_value: float
    realized_pnl: float
    unrealized_pnl: float
    total_pnl: float
    roi: float
    open_positions: int
    running_time: str
    quote_fallbacks: int = 0


def format_running_time(elapsed_ms: int) -> str:
    elapsed_ms = max(0, int(elapsed_ms))
    hours = elapsed_ms // _MS_PER_HOUR
    minutes = (elapsed_ms % _MS_PER_HOUR) // _MS_PER_MINUTE
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def mark_price(quotes: Optional[QuoteSource], pos: Position) -> Tuple[float, bool]:
    """Return (price, fell_back) for an open position.

    Any failure to get a bid (no source, lookup error, empty book) marks the
    position at its own average entry price.
    """
    if quotes is None:
        get_quote_fallbacks_total().inc()
        return pos.avg_entry_price, True
    try:
        bid = quotes.best_bid(pos.asset)
        px = None if bid is None else float(bid)
    except Exception as e:
        logging.warning(f"Quote unavailable for {pos.asset} ({pos.market}); using entry price: {e}")
        px = None
    if px is None or not math.isfinite(px):
        get_quote_fallbacks_total().inc()
        return pos.avg_entry_price, True
    return px, False


def compute_stats(state: LedgerState, quotes: Optional[QuoteSource], now_ms: int) -> LedgerStats:
    """Point-in-time statistics; never mutates `state`."""
    current_value = 0.0
    unrealized = 0.0
    fallbacks = 0
    for pos in state.positions.values():
        px, fell_back = mark_price(quotes, pos)
        fallbacks += int(fell_back)
        value = pos.token_amount * px
        current_value += value
        unrealized += value - pos.total_invested

    total_pnl = state.realized_pnl + unrealized
    roi = (total_pnl / state.total_invested) * 100 if state.total_invested > 0 else 0.0
    buys = sum(1 for t in state.trades if t.side == "BUY")
    sells = sum(1 for t in state.trades if t.side == "SELL")

    return LedgerStats(
        total_trades=len(state.trades),
        buy_trades=buys,
        sell_trades=sells,
        total_invested=state.total_invested,
        current_value=current_value,
        realized_pnl=state.realized_pnl,
        unrealized_pnl=unrealized,
        total_pnl=total_pnl,
        roi=roi,
        open_positions=len(state.positions),
        running_time=format_running_time(now_ms - state.start_time),
        quote_fallbacks=fallbacks,
    )
