"""Paper-trading ledger for prediction-market outcome tokens."""

__version__ = "0.1.0"
