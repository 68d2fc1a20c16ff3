"""
Main entrypoint for paperledger.

What it does:
- Loads runtime settings from `config/config.yaml` and environment variables
  (e.g. `PAPER_TRADES_FILE`, `CLOB_HTTP_URL`).
- Builds a `PaperLedger` over a JSON file store, marking open positions
  against the CLOB order book (or at entry price with `--offline`).
- Runs one command: report, record, reset, rebuild or export.

Usage:
  PYTHONPATH=src python -m paperledger.main report
  PYTHONPATH=src python -m paperledger.main record --side BUY --asset 123 \
      --condition-id 0xabc --market "Will it rain?" --outcome Yes --tokens 100 --usdc 40
"""
import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from .config.loader import load_settings, Settings
from .ledger import JsonFileStore, PaperLedger, Trade
from .ledger.export import write_csv
from .ledger.model import now_ms
from .logs.trade_log import read_journal
from .market.quotes import ClobQuoteSource
from .metrics.core import start_server_safe


def build_ledger(settings: Settings, offline: bool = False) -> PaperLedger:
    quotes = None
    if not offline:
        quotes = ClobQuoteSource(settings.market_data.clob_http_url, settings.market_data.timeout_s)
    return PaperLedger(JsonFileStore(settings.ledger.path), quotes=quotes, settings=settings.ledger)


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="paperledger", description="Paper-trading ledger")
    p.add_argument("--config", default="config/config.yaml")
    sub = p.add_subparsers(dest="command", required=True)

    rep = sub.add_parser("report", help="print stats and open positions")
    rep.add_argument("--offline", action="store_true", help="mark positions at entry price")

    rec = sub.add_parser("record", help="record one paper trade")
    rec.add_argument("--side", required=True)
    rec.add_argument("--asset", required=True)
    rec.add_argument("--condition-id", required=True)
    rec.add_argument("--market", required=True)
    rec.add_argument("--outcome", required=True)
    rec.add_argument("--tokens", type=float, required=True)
    rec.add_argument("--usdc", type=float, required=True)
    rec.add_argument("--price", type=float, default=None)
    rec.add_argument("--trader", default="")

    sub.add_parser("reset", help="discard all trades and positions")
    reb = sub.add_parser("rebuild", help="recompute positions from trade history")
    reb.add_argument("--journal", default=None, help="replay this JSONL journal instead")

    exp = sub.add_parser("export", help="write trades/positions CSV")
    exp.add_argument("--out", default="data")
    return p


def _trade_from_args(args: argparse.Namespace) -> Trade:
    price = args.price
    if price is None:
        if args.tokens <= 0:
            raise ValueError("--price is required when --tokens is not positive")
        price = args.usdc / args.tokens
    return Trade(
        timestamp=now_ms(),
        side=args.side,
        market=args.market,
        outcome=args.outcome,
        usdc_amount=args.usdc,
        token_amount=args.tokens,
        price=price,
        trader_address=args.trader,
        condition_id=args.condition_id,
        asset=args.asset,
    )


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = _parser().parse_args(argv)
    settings = load_settings(args.config)
    logging.info(f"Ledger file: {settings.ledger.path}")
    start_server_safe(settings.metrics.port)

    ledger = build_ledger(settings, offline=getattr(args, "offline", False))

    if args.command == "report":
        print(ledger.report().text)
    elif args.command == "record":
        try:
            trade = _trade_from_args(args)
        except (ValueError, ValidationError) as e:
            print(f"invalid trade: {e}", file=sys.stderr)
            return 2
        state = ledger.record_trade(trade)
        logging.info(f"Recorded {trade.side} {trade.token_amount} of {trade.key}; open positions: {len(state.positions)}")
    elif args.command == "reset":
        ledger.reset()
        logging.info("Paper trading ledger reset")
    elif args.command == "rebuild":
        trades = read_journal(args.journal) if args.journal else None
        state = ledger.rebuild(trades)
        logging.info(f"Rebuilt ledger from {len(state.trades)} trades")
    elif args.command == "export":
        paths = write_csv(ledger.load(), args.out)
        for name, path in paths.items():
            print(f"{name}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
