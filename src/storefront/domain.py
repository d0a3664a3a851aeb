"""Storefront bounded context: carts, orders, stock reservation and payment reconciliation.

A single Protean domain hosts the Cart and Order aggregates. Stock, catalogue,
payment gateway and notification collaborators are reached through ports under
their own packages and swapped through small factory functions.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
