from __future__ import annotations

from typing import Dict
import os
import pandas as pd

from .model import LedgerState


def trades_frame(state: LedgerState) -> pd.DataFrame:
    return pd.DataFrame([t.model_dump(by_alias=True) for t in state.trades])


def positions_frame(state: LedgerState) -> pd.DataFrame:
    rows = [dict(key=k, **p.model_dump(by_alias=True)) for k, p in state.positions.items()]
    return pd.DataFrame(rows)


def write_csv(state: LedgerState, base_dir: str = "data") -> Dict[str, str]:
    """Write trades.csv and positions.csv under `base_dir`; return their paths."""
    os.makedirs(base_dir, exist_ok=True)
    paths = {
        "trades": os.path.join(base_dir, "trades.csv"),
        "positions": os.path.join(base_dir, "positions.csv"),
    }
    trades_frame(state).to_csv(paths["trades"], index=False)
    positions_frame(state).to_csv(paths["positions"], index=False)
    return paths
