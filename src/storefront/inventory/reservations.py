"""All-or-nothing reservation of several order lines."""

from dataclasses import dataclass

import structlog

from storefront.inventory.port import StockLedger

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Reservation:
    product_id: str
    quantity: int
    remaining: int


def reserve_all(ledger: StockLedger, lines: list[tuple[str, int]]) -> list[Reservation]:
    """Reserve every (product_id, quantity) line or none of them.

    Lines are reserved in order. When one fails, the lines already taken are
    released in reverse before the original error is re-raised.
    """
    taken: list[Reservation] = []
    try:
        for product_id, quantity in lines:
            remaining = ledger.reserve(product_id, quantity)
            taken.append(Reservation(product_id=str(product_id), quantity=quantity, remaining=remaining))
    except Exception:
        release_all(ledger, [(r.product_id, r.quantity) for r in taken])
        raise
    return taken


def release_all(ledger: StockLedger, lines: list[tuple[str, int]]) -> None:
    """Give reserved stock back, last line first.

    A failed release is logged and the remaining lines are still released.
    """
    for product_id, quantity in reversed(lines):
        try:
            ledger.release(product_id, quantity)
        except Exception as exc:
            logger.error(
                "Failed to release reserved stock",
                product_id=str(product_id),
                quantity=quantity,
                error=str(exc),
            )
