"""Error Hierarchy — tests for codes, HTTP statuses and the response shape."""

import pytest

from swapmarket.core.errors import (
    AlreadyResolvedError,
    DuplicateReviewError,
    ErrorCategory,
    ErrorContext,
    IllegalTransitionError,
    NotEligibleError,
    NotOwnerError,
    ProductUnavailableError,
    ResourceNotFoundError,
    SelfSwapError,
    StorageError,
    SwapMarketError,
)


@pytest.mark.parametrize("error,code,status", [
    (SelfSwapError(), "SELF_SWAP", 400),
    (NotOwnerError("p1"), "NOT_OWNER", 400),
    (ProductUnavailableError("p1"), "PRODUCT_UNAVAILABLE", 400),
    (AlreadyResolvedError("SwapRequest", "r1"), "ALREADY_RESOLVED", 409),
    (DuplicateReviewError(), "DUPLICATE_REVIEW", 409),
    (IllegalTransitionError("SwapRequest", "PENDING", "COMPLETED"), "ILLEGAL_TRANSITION", 422),
    (NotEligibleError(), "NOT_ELIGIBLE", 422),
    (ResourceNotFoundError("Product", "p1"), "RESOURCE_NOT_FOUND", 404),
    (StorageError("Connection or lock timeout", "execute"), "STORAGE_ERROR", 503),
])
def test_error_codes_and_statuses(error, code, status):
    assert isinstance(error, SwapMarketError)
    assert error.code == code
    assert error.http_status == status


def test_conflict_and_storage_errors_are_retryable():
    assert AlreadyResolvedError("SwapRequest", "r1").retryable
    assert StorageError("boom", "commit").retryable
    assert not IllegalTransitionError("SwapRequest", "REJECTED", "ACCEPTED").retryable
    assert not SelfSwapError().retryable


def test_to_response_shape():
    error = AlreadyResolvedError(
        "SwapTransaction", "t1", ErrorContext(transaction_id="t1"),
    )
    body = error.to_response()["error"]
    assert body["code"] == "ALREADY_RESOLVED"
    assert body["category"] == ErrorCategory.CONFLICT.value
    assert body["retryable"] is True
    assert body["context"]["transaction_id"] == "t1"
    assert "timestamp" in body


def test_illegal_transition_reason_is_appended():
    error = IllegalTransitionError(
        "SwapRequest", "ACCEPTED", "COMPLETED", reason="Transaction missing.",
    )
    assert error.message.endswith("Transaction missing.")
