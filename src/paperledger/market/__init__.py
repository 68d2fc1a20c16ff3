from .quotes import ClobQuoteSource, QuoteSource, QuoteUnavailable, StaticQuoteSource  # re-export
