"""Persistence for the paper ledger.

A store holds the whole ledger as one document: ``load`` reads all of it,
``save`` overwrites all of it. Both are best-effort. A store that cannot be
read yields a fresh ledger (recording must never be blocked by a bad file)
and a failed write is logged and reported through the return value only.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Callable, Optional, Protocol

from pydantic import ValidationError

from .model import LedgerState, now_ms
from ..metrics.ledger import inc_store_error

logger = logging.getLogger(__name__)


class LedgerStore(Protocol):
    def load(self) -> LedgerState: ...

    def save(self, state: LedgerState) -> bool: ...


class JsonFileStore:
    """Pretty-printed JSON file, fully rewritten on every save."""

    def __init__(self, path: str = "paper_trades.json", clock: Optional[Callable[[], int]] = None):
        self.path = path
        self.clock = clock or now_ms

    def load(self) -> LedgerState:
        if not os.path.exists(self.path):
            return LedgerState.fresh(self.clock())
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                doc = json.load(f)
            return LedgerState.model_validate(doc)
        except (OSError, ValueError, ValidationError, RecursionError) as e:
            # corrupt and missing look the same from here on; back the file up externally
            logger.error(f"Error loading paper trading data from {self.path}: {e}")
            inc_store_error("load")
            return LedgerState.fresh(self.clock())

    def save(self, state: LedgerState) -> bool:
        try:
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(state.to_document(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving paper trading data to {self.path}: {e}")
            inc_store_error("save")
            return False


class MemoryStore:
    """In-process store with the same contract; keeps a serialized copy."""

    def __init__(self, state: Optional[LedgerState] = None, clock: Optional[Callable[[], int]] = None):
        self.clock = clock or now_ms
        self._doc: Optional[dict] = state.to_document() if state is not None else None

    def load(self) -> LedgerState:
        if self._doc is None:
            return LedgerState.fresh(self.clock())
        return LedgerState.model_validate(self._doc)

    def save(self, state: LedgerState) -> bool:
        self._doc = state.to_document()
        return True
