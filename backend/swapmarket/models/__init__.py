"""ORM Models — SQLAlchemy declarative models for all marketplace entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is never hard-deleted; Product is soft-deleted via deleted_at
    - Swap rows reference products, they never own them (no delete cascades)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from swapmarket.models.user import User  # noqa: F401
from swapmarket.models.category import Category  # noqa: F401
from swapmarket.models.product import Product  # noqa: F401
from swapmarket.models.product_image import ProductImage  # noqa: F401
from swapmarket.models.swap_request import SwapRequest  # noqa: F401
from swapmarket.models.swap_transaction import SwapTransaction  # noqa: F401
from swapmarket.models.product_hold import ProductHold  # noqa: F401
from swapmarket.models.review import Review  # noqa: F401
from swapmarket.models.notification import Notification  # noqa: F401
from swapmarket.models.message import Message  # noqa: F401
