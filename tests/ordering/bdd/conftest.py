"""Shared BDD fixtures and step definitions for orders."""

import pytest
from factories import add_book, get_book, get_order, place_order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

from bookstore.ordering.lifecycle import CancelOrder, TransitionOrder
from bookstore.ordering.refund import RefundOrder


@pytest.fixture()
def books():
    return {}


@pytest.fixture()
def error():
    """Container to capture rejections raised in When steps."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a book "{title}" priced at {price:f} with {quantity:d} copies in stock'))
def _(books, title, price, quantity):
    books[title] = add_book(title=title, price=price, quantity=quantity)


@given(
    parsers.cfparse('a customer has ordered {quantity:d} copies of "{title}"'),
    target_fixture="order_id",
)
def _(books, quantity, title):
    return place_order([(books[title], quantity)])


@given(parsers.cfparse('the admin moves the order to "{status}"'))
@when(parsers.cfparse('the admin moves the order to "{status}"'))
def _(order_id, status):
    current_domain.process(
        TransitionOrder(order_id=order_id, status=status, actor="admin-001"),
        asynchronous=False,
    )


@given(parsers.cfparse('the admin refunds {amount:f} because "{reason}"'))
@when(parsers.cfparse('the admin refunds {amount:f} because "{reason}"'))
def _(order_id, amount, reason):
    current_domain.process(
        RefundOrder(order_id=order_id, amount=amount, reason=reason, actor="admin-001"),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the admin tries to move the order to "{status}"'))
def _(order_id, status, error):
    try:
        current_domain.process(
            TransitionOrder(order_id=order_id, status=status, actor="admin-001"),
            asynchronous=False,
        )
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the customer cancels the order because "{reason}"'))
def _(order_id, reason):
    current_domain.process(
        CancelOrder(order_id=order_id, customer_id="cust-001", reason=reason),
        asynchronous=False,
    )


@when("the customer tries to cancel the order again")
def _(order_id, error):
    try:
        current_domain.process(
            CancelOrder(order_id=order_id, customer_id="cust-001", reason="Again"),
            asynchronous=False,
        )
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse("the admin tries to refund {amount:f}"))
def _(order_id, amount, error):
    try:
        current_domain.process(RefundOrder(order_id=order_id, amount=amount), asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order_id, status):
    assert get_order(order_id).status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def _(order_id, status):
    assert get_order(order_id).payment_status == status


@then(parsers.cfparse("the order history has {count:d} entries"))
def _(order_id, count):
    assert len(get_order(order_id).status_history) == count


@then(parsers.cfparse('the latest history note is "{note}"'))
def _(order_id, note):
    assert get_order(order_id).status_history[-1].note == note


@then(parsers.cfparse('the change is rejected with "{message}"'))
def _(error, message):
    assert error["exc"] is not None
    assert error["exc"].messages["status"] == [message]


@then("the refund is rejected")
def _(error):
    assert error["exc"] is not None


@then(parsers.cfparse('"{title}" has {on_hand:d} copies on hand and {reserved:d} reserved'))
def _(books, title, on_hand, reserved):
    book = get_book(books[title])
    assert book.stock.quantity == on_hand
    assert book.stock.reserved == reserved
