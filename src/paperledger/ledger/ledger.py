from __future__ import annotations

from typing import Callable, Iterable, Optional
import logging
import threading

from .model import LedgerState, Position, Trade, now_ms
from .report import LedgerReport, format_report
from .stats import LedgerStats, compute_stats
from .store import LedgerStore
from ..config.loader import LedgerConfig
from ..logs.trade_log import append_jsonl, log_ledger_event
from ..market.quotes import QuoteSource
from ..metrics.ledger import get_residual_discarded_total, get_trades_recorded_total, set_ledger_gauges

DUST_TOKENS = 0.01
RESIDUAL_WARN_USD = 0.01


def apply_trade(
    state: LedgerState,
    trade: Trade,
    dust_tokens: float = DUST_TOKENS,
    residual_warn_usd: float = RESIDUAL_WARN_USD,
) -> LedgerState:
    """Return a copy of `state` with `trade` applied (weighted-average cost).

    BUY averages into the position and adds to lifetime invested. SELL books
    `usdc - avg_entry * qty` as realized PnL and leaves avg entry untouched;
    a SELL with no open position only lands in the history.
    """
    data = state.model_copy(deep=True)
    data.trades.append(trade)
    key = trade.key
    pos = data.positions.get(key)

    if trade.side == "BUY":
        if pos is not None:
            total_tokens = pos.token_amount + trade.token_amount
            total_cost = pos.total_invested + trade.usdc_amount
            pos.token_amount = total_tokens
            pos.total_invested = total_cost
            if total_tokens > 0:
                pos.avg_entry_price = total_cost / total_tokens
        else:
            data.positions[key] = Position(
                market=trade.market,
                outcome=trade.outcome,
                condition_id=trade.condition_id,
                asset=trade.asset,
                token_amount=trade.token_amount,
                avg_entry_price=trade.price,
                total_invested=trade.usdc_amount,
            )
        data.total_invested += trade.usdc_amount
    elif pos is not None:
        cost_basis = pos.avg_entry_price * trade.token_amount
        data.realized_pnl += trade.usdc_amount - cost_basis
        pos.token_amount -= trade.token_amount
        pos.total_invested -= cost_basis
        if pos.token_amount <= dust_tokens:
            residual = pos.total_invested
            del data.positions[key]
            if abs(residual) > residual_warn_usd:
                logging.warning(
                    f"Closed {key} with {pos.token_amount:.6f} tokens left; discarding ${residual:.6f} cost basis"
                )
                get_residual_discarded_total().inc()
    return data


def replay_trades(
    trades: Iterable[Trade],
    start_time: Optional[int] = None,
    dust_tokens: float = DUST_TOKENS,
    residual_warn_usd: float = RESIDUAL_WARN_USD,
) -> LedgerState:
    """Rebuild a ledger by folding `apply_trade` over a trade history."""
    state = LedgerState.fresh(start_time)
    for t in trades:
        state = apply_trade(state, t, dust_tokens, residual_warn_usd)
    return state


class PaperLedger:
    """Paper-trading ledger engine.

    Each operation loads the whole ledger from `store`, works on it in memory
    and (for mutations) saves it back once. One lock serializes the
    load/mutate/save cycles of this instance; separate processes sharing a
    file are not coordinated.
    """

    def __init__(
        self,
        store: LedgerStore,
        quotes: Optional[QuoteSource] = None,
        settings: Optional[LedgerConfig] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.store = store
        self.quotes = quotes
        self.settings = settings or LedgerConfig()
        self.clock = clock or now_ms
        self._lock = threading.Lock()
        self._recorded = get_trades_recorded_total()

    def _apply(self, state: LedgerState, trade: Trade) -> LedgerState:
        return apply_trade(state, trade, self.settings.dust_tokens, self.settings.residual_warn_usd)

    def _publish(self, state: LedgerState) -> None:
        set_ledger_gauges(state.realized_pnl, len(state.positions))

    def record_trade(self, trade: Trade) -> LedgerState:
        with self._lock:
            state = self._apply(self.store.load(), trade)
            self.store.save(state)
        self._after_record(trade)
        self._publish(state)
        return state

    def record_trades(self, trades: Iterable[Trade]) -> LedgerState:
        state: Optional[LedgerState] = None
        for t in trades:
            state = self.record_trade(t)
        if state is None:
            with self._lock:
                state = self.store.load()
        return state

    def _after_record(self, trade: Trade) -> None:
        self._recorded.labels(trade.side).inc()
        if self.settings.journal_path:
            append_jsonl(self.settings.journal_path, trade.model_dump(by_alias=True, mode="json"))
        log_ledger_event(
            "trade_recorded",
            side=trade.side,
            key=trade.key,
            qty=trade.token_amount,
            usd=trade.usdc_amount,
            ts=trade.timestamp,
        )

    def load(self) -> LedgerState:
        with self._lock:
            return self.store.load()

    def stats(self) -> LedgerStats:
        return compute_stats(self.load(), self.quotes, self.clock())

    def report(self) -> LedgerReport:
        state = self.load()
        stats = compute_stats(state, self.quotes, self.clock())
        return LedgerReport(stats=stats, text=format_report(stats, state))

    def reset(self) -> LedgerState:
        state = LedgerState.fresh(self.clock())
        with self._lock:
            self.store.save(state)
        log_ledger_event("ledger_reset", ts=state.start_time)
        self._publish(state)
        return state

    def rebuild(self, trades: Optional[Iterable[Trade]] = None) -> LedgerState:
        """Recompute positions and PnL from the stored trade history.

        `trades` replaces the stored history (e.g. a journal read back with
        `read_journal`); `startTime` is kept either way.
        """
        with self._lock:
            old = self.store.load()
            history = old.trades if trades is None else list(trades)
            state = replay_trades(
                history, old.start_time, self.settings.dust_tokens, self.settings.residual_warn_usd
            )
            self.store.save(state)
        if abs(state.realized_pnl - old.realized_pnl) > 1e-6 or set(state.positions) != set(old.positions):
            logging.warning(
                f"Rebuild changed ledger: realized {old.realized_pnl:.4f} -> {state.realized_pnl:.4f}, "
                f"positions {len(old.positions)} -> {len(state.positions)}"
            )
        self._publish(state)
        return state
