"""Swap State Machines — legal status edges for requests and transactions.

Invariants:
    - SwapRequest: PENDING -> {ACCEPTED, REJECTED, CANCELLED}; ACCEPTED -> {COMPLETED, CANCELLED}
    - SwapTransaction: PENDING -> {ACCEPTED, COMPLETED, CANCELLED}; ACCEPTED -> {COMPLETED, CANCELLED}
    - REJECTED, COMPLETED, CANCELLED are terminal for both machines
    - ACCEPTED -> COMPLETED on a request requires its transaction to exist and be active
    - All functions are PURE and return IllegalTransitionError or None

Design Decisions:
    - Transition tables as dict[status, frozenset]: one place to read the whole graph
      (ADR: state machine must be auditable at a glance)
    - A transaction may complete straight from PENDING: the request's acceptance
      already is the owner's consent, ACCEPTED exists for explicit handoff confirmation
"""

from swapmarket.core.domain_types import (
    SwapRequestStatus as RS,
    SwapTransactionStatus as TS,
)
from swapmarket.core.errors import IllegalTransitionError, SwapMarketError
from swapmarket.core.swap_entities import SwapRequestView, SwapTransactionView


REQUEST_TRANSITIONS: dict[RS, frozenset[RS]] = {
    RS.PENDING: frozenset({RS.ACCEPTED, RS.REJECTED, RS.CANCELLED}),
    RS.ACCEPTED: frozenset({RS.COMPLETED, RS.CANCELLED}),
    RS.REJECTED: frozenset(),
    RS.COMPLETED: frozenset(),
    RS.CANCELLED: frozenset(),
}

TRANSACTION_TRANSITIONS: dict[TS, frozenset[TS]] = {
    TS.PENDING: frozenset({TS.ACCEPTED, TS.COMPLETED, TS.CANCELLED}),
    TS.ACCEPTED: frozenset({TS.COMPLETED, TS.CANCELLED}),
    TS.COMPLETED: frozenset(),
    TS.CANCELLED: frozenset(),
}


def is_terminal_request_status(status: RS) -> bool:
    return not REQUEST_TRANSITIONS[status]


def check_request_transition(
    request: SwapRequestView,
    new_status: RS,
    transaction: SwapTransactionView | None = None,
) -> SwapMarketError | None:
    """Validate a SwapRequest status change against the legal graph."""
    if new_status not in REQUEST_TRANSITIONS[request.status]:
        return IllegalTransitionError(
            "SwapRequest", request.status.value, new_status.value,
        )
    if new_status == RS.COMPLETED:
        if transaction is None or not transaction.is_active:
            return IllegalTransitionError(
                "SwapRequest", request.status.value, new_status.value,
                reason="Its swap transaction must exist and be active.",
            )
    return None


def check_transaction_transition(
    transaction: SwapTransactionView, new_status: TS,
) -> SwapMarketError | None:
    """Validate a SwapTransaction status change against the legal graph."""
    if new_status not in TRANSACTION_TRANSITIONS[transaction.status]:
        return IllegalTransitionError(
            "SwapTransaction", transaction.status.value, new_status.value,
        )
    return None
