from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional
import logging
import time

from pydantic import ValidationError

from ..metrics.ledger import _safe_counter

if TYPE_CHECKING:
    from ..ledger.model import Trade


def _get_append_counters():
    app = _safe_counter("trade_journal_appends_total", "Trade journal records appended", ["side"])
    err = _safe_counter("trade_journal_errors_total", "Trade journal errors", ["reason"])
    return app, err


REQUIRED_KEYS = {
    "timestamp", "side", "market", "outcome", "usdcAmount", "tokenAmount",
    "price", "conditionId", "asset",
}


def validate_record(rec: Dict[str, Any]) -> List[str]:
    return sorted(k for k in REQUIRED_KEYS if k not in rec)


def append_jsonl(path: str, rec: Dict[str, Any]) -> bool:
    """Append one trade record to the journal. Returns False if it was dropped."""
    app, err = _get_append_counters()
    if validate_record(rec):
        err.labels("missing_fields").inc()
        return False
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
        app.labels(str(rec.get("side", "unknown"))).inc()
        return True
    except OSError as e:
        logging.error(f"Trade journal write failed ({path}): {e}")
        err.labels("io_error").inc()
        return False


def read_journal(path: str) -> Iterator["Trade"]:
    """Yield trades from a JSONL journal in file order, skipping bad lines."""
    from ..ledger.model import Trade

    if not os.path.exists(path):
        return
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield Trade.model_validate(json.loads(line))
            except (ValueError, ValidationError) as e:
                logging.warning(f"Skipping journal line {lineno} in {path}: {e}")


def log_ledger_event(
    event_type: str,
    side: Optional[str] = None,
    key: Optional[str] = None,
    qty: Optional[float] = None,
    usd: Optional[float] = None,
    ts: Optional[int] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Emit a structured JSON log line for ledger activity.

    Keys: event, side, key, qty, usd, ts, severity, component, schema_version
    """
    try:
        logger = logging.getLogger("paperledger.ledger")
        payload: Dict[str, Any] = {
            "event": str(event_type),
            "side": str(side) if side is not None else None,
            "key": str(key) if key is not None else None,
            "qty": float(qty) if qty is not None else None,
            "usd": float(usd) if usd is not None else None,
            "ts": int(ts if ts is not None else int(time.time() * 1000)),
            "severity": "INFO",
            "component": "ledger",
            "schema_version": "v1",
        }
        if extra:
            payload["extra"] = extra
        logger.info(json.dumps(payload, separators=(",", ":")))
    except Exception:
        # Logging must never throw
        pass
