"""Caller identity for API routes.

The identity collaborator authenticates the request upstream and forwards the
caller as ``X-Customer-Id`` and ``X-Customer-Role`` headers. This is the only
place those headers are read.
"""

from fastapi import Depends, Header

from storefront.errors import Forbidden, Unauthorized
from storefront.identity.principal import Principal, Role


def current_principal(
    x_customer_id: str | None = Header(default=None),
    x_customer_role: str = Header(default=Role.CUSTOMER.value),
) -> Principal:
    if not x_customer_id:
        raise Unauthorized("Authentication required")
    try:
        role = Role(x_customer_role.lower())
    except ValueError as exc:
        raise Unauthorized(f"Unknown role {x_customer_role}") from exc
    return Principal(customer_id=x_customer_id, role=role)


def admin_principal(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_admin:
        raise Forbidden("Administrator role required")
    return principal
