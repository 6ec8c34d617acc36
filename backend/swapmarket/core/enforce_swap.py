"""Swap Request Validation — structural checks before a swap request is created.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return the typed error on violation, None on success
    - validate_swap_request_creation chains all checks — first error wins

Design Decisions:
    - Return errors (not raise): the same predicates serve creation and the
      optimistic re-check inside accept (ADR: one rule, two call sites)
"""

from swapmarket.core.domain_types import UserId
from swapmarket.core.errors import (
    NotOwnerError,
    ProductUnavailableError,
    SelfSwapError,
    SwapMarketError,
)
from swapmarket.core.swap_entities import ProductView


def check_not_self_swap(
    requester_id: UserId, target: ProductView,
) -> SwapMarketError | None:
    """Rule 1: nobody requests their own product."""
    if requester_id == target.owner_id:
        return SelfSwapError()
    return None


def check_offerable(product: ProductView) -> SwapMarketError | None:
    """Rule 2: unavailable or soft-deleted products cannot enter a swap."""
    if not product.is_offerable:
        return ProductUnavailableError(str(product.id))
    return None


def check_offered_product_owner(
    requester_id: UserId, offered: ProductView | None,
) -> SwapMarketError | None:
    """Rule 3: the offered product belongs to the requester."""
    if offered is not None and offered.owner_id != requester_id:
        return NotOwnerError(str(offered.id))
    return None


def check_offered_product_offerable(
    offered: ProductView | None,
) -> SwapMarketError | None:
    """Rule 4: the offered product is itself offerable."""
    if offered is None:
        return None
    return check_offerable(offered)


def validate_swap_request_creation(
    requester_id: UserId,
    target: ProductView,
    offered: ProductView | None = None,
) -> SwapMarketError | None:
    """Chain all creation checks. Returns first error or None."""
    return (
        check_not_self_swap(requester_id, target)
        or check_offerable(target)
        or check_offered_product_owner(requester_id, offered)
        or check_offered_product_offerable(offered)
    )


def validate_products_still_free(
    products: list[ProductView], held_product_ids: set,
) -> SwapMarketError | None:
    """Optimistic re-check at accept time: offerable and not held by another swap."""
    for product in products:
        error = check_offerable(product)
        if error:
            return error
        if product.id in held_product_ids:
            return ProductUnavailableError(str(product.id))
    return None
