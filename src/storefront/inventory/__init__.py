"""Stock ledger factory.

Provides get_ledger() / set_ledger() to swap implementations:
- InMemoryStockLedger (default) for development and testing
- SqlStockLedger when STOCK_LEDGER=sql, using STOCK_DATABASE_URI
"""

import os

from storefront.inventory.port import StockLedger

_current_ledger: StockLedger | None = None


def get_ledger() -> StockLedger:
    global _current_ledger
    if _current_ledger is None:
        if os.environ.get("STOCK_LEDGER", "memory") == "sql":
            from storefront.inventory.sql import SqlStockLedger

            _current_ledger = SqlStockLedger(os.environ.get("STOCK_DATABASE_URI", "sqlite:///stock.db"))
        else:
            from storefront.inventory.memory import InMemoryStockLedger

            _current_ledger = InMemoryStockLedger()
    return _current_ledger


def set_ledger(ledger: StockLedger) -> None:
    """Override the active ledger (useful for tests)."""
    global _current_ledger
    _current_ledger = ledger


def reset_ledger() -> None:
    global _current_ledger
    _current_ledger = None


def low_stock_threshold() -> int:
    return int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))
