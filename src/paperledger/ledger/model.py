from __future__ import annotations

from typing import Dict, List, Literal
import time

from pydantic import BaseModel, ConfigDict, Field, field_validator

Side = Literal["BUY", "SELL"]


def now_ms() -> int:
    return int(time.time() * 1000)


def position_key(condition_id: str, asset: str) -> str:
    return f"{condition_id}:{asset}"


class Trade(BaseModel):
    """One executed (simulated) fill. Stored verbatim in the trade history."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    timestamp: int
    side: Side
    market: str
    outcome: str
    usdc_amount: float = Field(alias="usdcAmount")
    token_amount: float = Field(alias="tokenAmount")
    price: float
    trader_address: str = Field(default="", alias="traderAddress")
    condition_id: str = Field(alias="conditionId")
    asset: str

    @field_validator("side", mode="before")
    @classmethod
    def upper_side(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def key(self) -> str:
        return position_key(self.condition_id, self.asset)


class Position(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    market: str
    outcome: str
    condition_id: str = Field(alias="conditionId")
    asset: str
    token_amount: float = Field(alias="tokenAmount")
    avg_entry_price: float = Field(alias="avgEntryPrice")
    # cost basis of the tokens still held
    total_invested: float = Field(alias="totalInvested")


class LedgerState(BaseModel):
    """Whole persisted ledger document.

    ``total_invested`` is a lifetime counter of BUY notional; it never
    decreases, so it is not the capital currently at risk.
    """

    model_config = ConfigDict(populate_by_name=True)

    start_time: int = Field(alias="startTime")
    trades: List[Trade] = Field(default_factory=list)
    positions: Dict[str, Position] = Field(default_factory=dict)
    realized_pnl: float = Field(default=0.0, alias="realizedPnL")
    total_invested: float = Field(default=0.0, alias="totalInvested")

    @classmethod
    def fresh(cls, start_time: int | None = None) -> "LedgerState":
        return cls(start_time=now_ms() if start_time is None else int(start_time))

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
