"""Ledger package.

Public API:
- PaperLedger: record paper trades, report realized/unrealized PnL, reset.
- apply_trade / replay_trades: the ledger as an explicit state transform.
- JsonFileStore / MemoryStore: whole-document persistence.
"""

from .model import LedgerState, Position, Trade, position_key  # re-export
from .ledger import PaperLedger, apply_trade, replay_trades
from .stats import LedgerStats, compute_stats
from .report import LedgerReport, format_report
from .store import JsonFileStore, MemoryStore
