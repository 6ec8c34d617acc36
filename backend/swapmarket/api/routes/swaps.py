"""Swap Routes — create, list, respond, cancel, confirm and complete swaps.

Invariants:
    - Every handler is one SwapService call; status codes come from SwapMarketError
    - Responses are built from core views, never from ORM rows
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from swapmarket.api.dependencies import get_swap_service
from swapmarket.core.domain_types import (
    SwapDecision,
    SwapRequestRole,
    SwapRequestStatus,
)
from swapmarket.core.errors import ResourceNotFoundError
from swapmarket.core.swap_entities import SwapTransactionView
from swapmarket.schemas.swap import (
    RespondRequest,
    SwapRequestCreate,
    SwapRequestResponse,
    SwapTransactionResponse,
)
from swapmarket.services.swap_service import SwapService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["swaps"])


@router.post(
    "/swap-requests", response_model=SwapRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_swap_request(
    body: SwapRequestCreate, service: SwapService = Depends(get_swap_service),
):
    """Propose a swap for a product, optionally offering one of your own."""
    request = await service.create_swap_request(
        body.requester_id, body.product_id,
        body.offered_product_id, body.message,
    )
    logger.info(
        "Swap requested",
        extra={"request_id": request.id, "product_id": request.target_product_id},
    )
    return SwapRequestResponse.from_view(request)


@router.get("/swap-requests/{request_id}", response_model=SwapRequestResponse)
async def get_swap_request(
    request_id: UUID, service: SwapService = Depends(get_swap_service),
):
    request = await service.store.get_swap_request(request_id)
    if request is None:
        raise ResourceNotFoundError("SwapRequest", str(request_id))
    return SwapRequestResponse.from_view(request)


@router.get(
    "/users/{user_id}/swap-requests",
    response_model=list[SwapRequestResponse],
)
async def list_swap_requests(
    user_id: UUID,
    role: SwapRequestRole = Query(SwapRequestRole.INCOMING),
    request_status: SwapRequestStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: SwapService = Depends(get_swap_service),
):
    """Requests for the user's products (incoming) or sent by the user (outgoing)."""
    requests = await service.list_swap_requests(
        user_id, role, request_status, limit, offset,
    )
    return [SwapRequestResponse.from_view(r) for r in requests]


@router.post("/swap-requests/{request_id}/respond")
async def respond_to_swap_request(
    request_id: UUID,
    body: RespondRequest,
    service: SwapService = Depends(get_swap_service),
):
    """Accept (returns the new transaction) or reject (returns the request)."""
    result = await service.respond_to_swap_request(
        request_id, SwapDecision(body.decision),
    )
    logger.info(
        f"Swap request {body.decision}ed", extra={"request_id": request_id},
    )
    if isinstance(result, SwapTransactionView):
        return {
            "decision": body.decision,
            "transaction": SwapTransactionResponse.from_view(result),
        }
    return {
        "decision": body.decision,
        "request": SwapRequestResponse.from_view(result),
    }


@router.post("/swaps/{swap_id}/cancel")
async def cancel_swap(
    swap_id: UUID, service: SwapService = Depends(get_swap_service),
):
    """Cancel by request id or transaction id."""
    await service.cancel_swap(swap_id)
    return {"message": "Swap cancelled"}


@router.get(
    "/swap-transactions/{transaction_id}",
    response_model=SwapTransactionResponse,
)
async def get_swap_transaction(
    transaction_id: UUID, service: SwapService = Depends(get_swap_service),
):
    transaction = await service.store.get_swap_transaction(transaction_id)
    if transaction is None:
        raise ResourceNotFoundError("SwapTransaction", str(transaction_id))
    return SwapTransactionResponse.from_view(transaction)


@router.post(
    "/swap-transactions/{transaction_id}/confirm",
    response_model=SwapTransactionResponse,
)
async def confirm_swap(
    transaction_id: UUID, service: SwapService = Depends(get_swap_service),
):
    transaction = await service.confirm_swap(transaction_id)
    return SwapTransactionResponse.from_view(transaction)


@router.post(
    "/swap-transactions/{transaction_id}/complete",
    response_model=SwapTransactionResponse,
)
async def complete_swap(
    transaction_id: UUID, service: SwapService = Depends(get_swap_service),
):
    """Complete the swap: both products become unavailable."""
    transaction = await service.complete_swap(transaction_id)
    logger.info(
        "Swap completed", extra={"transaction_id": transaction_id},
    )
    return SwapTransactionResponse.from_view(transaction)
