"""
Market quotes used to mark open paper positions.

What it does:
- Defines the `QuoteSource` interface: `best_bid(asset)` returns the highest
  standing bid for an outcome token, or None when the book has no bids.
- `ClobQuoteSource` reads the public CLOB order book over HTTP (requests).
- `StaticQuoteSource` serves fixed prices (offline runs, tests).

Failures surface as `QuoteUnavailable`; the stats path treats any failure as
"no quote" for that one position.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol

import requests

DEFAULT_CLOB_URL = "https://clob.polymarket.com"


class QuoteUnavailable(Exception):
    """Raised when a quote cannot be obtained for an asset."""


class QuoteSource(Protocol):
    def best_bid(self, asset: str) -> Optional[float]: ...


def best_bid_from_book(book: Any) -> Optional[float]:
    """Return the highest bid price in an order book payload.

    Accepts `{"bids": [{"price": "0.52", "size": "10"}, ...]}`. Ordering of
    levels is not assumed. Raises QuoteUnavailable on a malformed payload.
    """
    if not isinstance(book, dict):
        raise QuoteUnavailable(f"unexpected order book payload: {type(book).__name__}")
    bids = book.get("bids") or []
    try:
        prices = [float(level["price"]) for level in bids]
    except (KeyError, TypeError, ValueError) as e:
        raise QuoteUnavailable(f"malformed bid level: {e}") from e
    if not prices:
        return None
    return max(prices)


class ClobQuoteSource:
    """Top-of-book bids from the CLOB REST endpoint `/book?token_id=...`."""

    def __init__(self, base_url: str = DEFAULT_CLOB_URL, timeout_s: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = float(timeout_s)
        self.session = session or requests.Session()

    def fetch_book(self, asset: str) -> Dict[str, Any]:
        try:
            resp = self.session.get(
                f"{self.base_url}/book",
                params={"token_id": asset},
                timeout=self.timeout_s,
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            raise QuoteUnavailable(f"order book request failed for {asset}: {e}") from e

    def best_bid(self, asset: str) -> Optional[float]:
        bid = best_bid_from_book(self.fetch_book(asset))
        logging.debug(f"best bid {asset}: {bid}")
        return bid


class StaticQuoteSource:
    def __init__(self, prices: Optional[Mapping[str, float]] = None):
        self.prices: Dict[str, float] = dict(prices or {})

    def best_bid(self, asset: str) -> Optional[float]:
        px = self.prices.get(asset)
        return None if px is None else float(px)
