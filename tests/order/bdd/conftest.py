"""Shared BDD fixtures and step definitions for orders."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then
from storefront.errors import InsufficientStock, InvalidStatusTransition, VerificationFailed
from storefront.order.checkout import checkout
from storefront.order.order import Order

_ERROR_CLASSES = {
    "InsufficientStock": InsufficientStock,
    "InvalidStatusTransition": InvalidStatusTransition,
    "VerificationFailed": VerificationFailed,
}


@pytest.fixture()
def error():
    """Container for the error raised by a When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" priced {price:f} with {stock:d} in stock'))
def _(product, product_id, price, stock):
    product(product_id, price=price, stock=stock)


@given(parsers.cfparse('the customer ordered {quantity:d} of "{product_id}"'), target_fixture="order_id")
def _(customer, address, quantity, product_id):
    return checkout(customer, address, items=[{"product_id": product_id, "quantity": quantity}])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{product_id}" has {stock:d} in stock'))
def _(ledger, product_id, stock):
    assert ledger.available(product_id) == stock


@then(parsers.cfparse('the order status is "{status}"'))
def _(order_id, status):
    assert current_domain.repository_for(Order).find(order_id).status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def _(order_id, status):
    assert current_domain.repository_for(Order).find(order_id).payment_status == status


@then(parsers.cfparse("the action fails with {error_type}"))
def _(error, error_type):
    assert error["exc"] is not None, f"Expected {error_type} but nothing was raised"
    assert isinstance(error["exc"], _ERROR_CLASSES[error_type])
