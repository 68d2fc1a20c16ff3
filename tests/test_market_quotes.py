import pytest
import requests

from src.paperledger.market.quotes import ClobQuoteSource, QuoteUnavailable, StaticQuoteSource, best_bid_from_book


class _Resp:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class _Session:
    def __init__(self, resp=None, exc=None):
        self.resp = resp
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.exc is not None:
            raise self.exc
        return self.resp


def test_best_bid_is_highest_level():
    book = {"bids": [{"price": "0.01", "size": "500"}, {"price": "0.47", "size": "20"}, {"price": "0.45", "size": "9"}]}
    sess = _Session(_Resp(book))
    src = ClobQuoteSource("https://clob.example.com/", timeout_s=3, session=sess)
    assert src.best_bid("7123") == pytest.approx(0.47)
    assert sess.calls == [("https://clob.example.com/book", {"token_id": "7123"}, 3.0)]


def test_empty_book_has_no_bid():
    assert best_bid_from_book({"bids": [], "asks": [{"price": "0.6", "size": "1"}]}) is None
    assert best_bid_from_book({"asks": []}) is None


@pytest.mark.parametrize(
    "session",
    [
        _Session(_Resp({"error": "not found"}, status=404)),
        _Session(exc=requests.ConnectionError("down")),
        _Session(_Resp(ValueError("bad json"))),
        _Session(_Resp({"bids": [{"size": "1"}]})),
        _Session(_Resp(["not", "a", "book"])),
    ],
)
def test_failures_raise_quote_unavailable(session):
    src = ClobQuoteSource(session=session)
    with pytest.raises(QuoteUnavailable):
        src.best_bid("7123")


def test_static_source():
    src = StaticQuoteSource({"a": 0.3})
    assert src.best_bid("a") == 0.3
    assert src.best_bid("b") is None
