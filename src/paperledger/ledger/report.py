from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .model import LedgerState
from .stats import LedgerStats

WIDTH = 62


@dataclass(frozen=True)
class LedgerReport:
    stats: LedgerStats
    text: str


def _border(left: str, right: str) -> str:
    return left + "═" * WIDTH + right


def _row(text: str) -> str:
    return "║" + text.ljust(WIDTH) + "║"


def _money(label: str, value: float) -> str:
    return _row(f"  {label:<18}${value:.2f}")


def format_report(stats: LedgerStats, state: LedgerState) -> str:
    lines: List[str] = [
        _border("╔", "╗"),
        _row("PAPER TRADING REPORT".center(WIDTH)),
        _border("╠", "╣"),
        _row(f"  Running Time: {stats.running_time}"),
        _row(f"  Total Trades: {stats.total_trades}"),
        _row(f"    - Buys:     {stats.buy_trades}"),
        _row(f"    - Sells:    {stats.sell_trades}"),
        _border("╠", "╣"),
        _money("Total Invested:", stats.total_invested),
        _money("Current Value:", stats.current_value),
        _money("Realized P&L:", stats.realized_pnl),
        _money("Unrealized P&L:", stats.unrealized_pnl),
        _money("Total P&L:", stats.total_pnl),
        _row(f"  {'ROI:':<18}{stats.roi:.2f}%"),
        _border("╠", "╣"),
        _row(f"  Open Positions: {stats.open_positions}"),
        _border("╚", "╝"),
    ]
    report = "\n".join(lines) + "\n"

    if state.positions:
        report += "\nOpen Positions:\n"
        for pos in state.positions.values():
            report += f"  • {pos.market} ({pos.outcome})\n"
            report += f"    Tokens: {pos.token_amount:.2f} @ ${pos.avg_entry_price:.4f} avg\n"
            report += f"    Invested: ${pos.total_invested:.2f}\n\n"
    return report
