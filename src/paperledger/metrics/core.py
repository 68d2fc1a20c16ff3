"""Prometheus exporter for the ledger metrics.

`metrics.port` in the config (or `PROMETHEUS_PORT`) selects the port; 0 keeps
the exporter off, which is the default for one-shot CLI commands. A port that
cannot be bound is logged and the command carries on without export.
"""

import logging
from typing import Optional

from prometheus_client import start_http_server


def start_server_safe(port: int) -> Optional[int]:
    """Expose `ledger_*` metrics on `port`; return the port, or None if off."""
    if port <= 0:
        logging.debug("Metrics export disabled (port 0)")
        return None
    try:
        start_http_server(port)
    except OSError as e:
        logging.warning(f"Metrics exporter not started, port {port} unavailable: {e}")
        return None
    logging.info(f"Ledger metrics exported on :{port}")
    return port
