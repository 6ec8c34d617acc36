"""Swap Entities — tests for tagged types and the unordered participant pair.

Tests cover:
    - Participants compare and hash as a set, and reject a single user
    - offer_from / offered_product_id round the nullable column into Reciprocal | OneWay
    - lifecycle_from maps deleted_at into Active | Deleted
    - SwapTransactionView.product_ids lists one or two products
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from swapmarket.core.domain_types import (
    ProductId,
    SwapRequestId,
    SwapTransactionId,
    SwapTransactionStatus as TS,
    UserId,
)
from swapmarket.core.swap_entities import (
    ACTIVE,
    ONE_WAY,
    Deleted,
    Participants,
    ProductView,
    Reciprocal,
    SwapTransactionView,
    lifecycle_from,
    offer_from,
    offered_product_id,
)


# ─── Participants ────────────────────────────────────────────────

def test_participants_are_unordered():
    a, b = UserId(uuid4()), UserId(uuid4())
    assert Participants(a, b) == Participants(b, a)
    assert hash(Participants(a, b)) == hash(Participants(b, a))
    assert len({Participants(a, b), Participants(b, a)}) == 1


def test_participants_need_two_users():
    a = UserId(uuid4())
    with pytest.raises(ValueError):
        Participants(a, a)


def test_participants_membership_and_other():
    a, b = UserId(uuid4()), UserId(uuid4())
    pair = Participants(a, b)
    assert pair.contains(a) and pair.contains(b)
    assert not pair.contains(UserId(uuid4()))
    assert pair.other(a) == b
    assert pair.other(b) == a
    assert list(pair) == [a, b]


def test_other_rejects_outsider():
    pair = Participants(UserId(uuid4()), UserId(uuid4()))
    with pytest.raises(ValueError):
        pair.other(UserId(uuid4()))


def test_matches_ignores_order_but_not_identity():
    a, b = UserId(uuid4()), UserId(uuid4())
    pair = Participants(a, b)
    assert pair.matches(b, a)
    assert not pair.matches(a, a)
    assert not pair.matches(a, UserId(uuid4()))


# ─── Tagged types ────────────────────────────────────────────────

def test_offer_from_column_value():
    pid = ProductId(uuid4())
    assert offer_from(None) is ONE_WAY
    assert offer_from(pid) == Reciprocal(pid)
    assert offered_product_id(Reciprocal(pid)) == pid
    assert offered_product_id(ONE_WAY) is None


def test_lifecycle_from_deleted_at():
    now = datetime.now(timezone.utc)
    assert lifecycle_from(None) is ACTIVE
    assert lifecycle_from(now) == Deleted(at=now)


def test_deleted_product_is_not_offerable_even_if_available():
    product = ProductView(
        id=ProductId(uuid4()), owner_id=UserId(uuid4()),
        is_available=True, lifecycle=Deleted(at=datetime.now(timezone.utc)),
    )
    assert isinstance(product.lifecycle, Deleted)
    assert not product.is_offerable


# ─── SwapTransactionView ─────────────────────────────────────────

def _transaction(product2=ONE_WAY, status=TS.PENDING) -> SwapTransactionView:
    return SwapTransactionView(
        id=SwapTransactionId(uuid4()),
        request_id=SwapRequestId(uuid4()),
        participants=Participants(UserId(uuid4()), UserId(uuid4())),
        product1_id=ProductId(uuid4()),
        product2=product2,
        status=status,
    )


def test_one_way_transaction_has_one_product():
    txn = _transaction()
    assert txn.product_ids == (txn.product1_id,)


def test_reciprocal_transaction_has_two_products():
    second = ProductId(uuid4())
    txn = _transaction(Reciprocal(second))
    assert txn.product_ids == (txn.product1_id, second)
    assert txn.involves_product(second)


@pytest.mark.parametrize("status,active", [
    (TS.PENDING, True),
    (TS.ACCEPTED, True),
    (TS.COMPLETED, False),
    (TS.CANCELLED, False),
])
def test_transaction_activity(status, active):
    assert _transaction(status=status).is_active is active
