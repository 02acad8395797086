from __future__ import annotations

"""
Disbursement validator: ordered precondition chain.

A disbursement is checked against the current ledger state by a fixed
sequence of independent predicates. The first predicate that fails decides
the error kind; later predicates are not evaluated. The order is part of the
observable contract (callers see exactly one error kind per rejection), so it
is kept in one table, `CHECKS`, and exported as `CHECK_ORDER`.

Validation never mutates anything and keeps no state between calls.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from disbursement.adapters.approvals import ThresholdAggregator
from disbursement.config import NATIVE_TOKEN_SENTINEL
from disbursement.dtypes import Amount, Currency, Height, Identity, RequestId
from disbursement.errors import ErrorKind
from disbursement.ledger.state import LedgerState


@dataclass(frozen=True)
class DisbursementRequest:
    """Candidate disbursement parameters as supplied by the caller."""
    borrower: Identity
    amount: Amount
    request_id: RequestId
    token_contract: Optional[str]
    repayment_schedule: int
    impact_data: str
    currency: str


@dataclass(frozen=True)
class CallContext:
    """Everything about the call that is not a request parameter."""
    caller: Identity
    height: Height
    approvals: ThresholdAggregator
    native_token_sentinel: str = NATIVE_TOKEN_SENTINEL


Predicate = Callable[[LedgerState, DisbursementRequest, CallContext], bool]


def _not_paused(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return not st.disbursement_paused


def _amount_in_bounds(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return st.min_disbursement_amount <= req.amount <= st.max_disbursement_amount


def _borrower_not_caller(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return req.borrower != ctx.caller


def _request_id_positive(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return req.request_id > 0


def _token_not_native_sentinel(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return not req.token_contract or req.token_contract != ctx.native_token_sentinel


def _schedule_positive(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return req.repayment_schedule > 0


def _clock_advanced(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return ctx.height > st.last_disbursement_time


def _currency_supported(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return Currency.parse(req.currency) is not None


def _impact_data_present(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return len(req.impact_data) > 0


def _treasury_covers(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return st.treasury_balance >= req.amount


def _endorsed(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return bool(ctx.approvals.is_approved(req.request_id))


def _not_yet_disbursed(st: LedgerState, req: DisbursementRequest, ctx: CallContext) -> bool:
    return req.request_id not in st.disbursed_loans


CHECKS: Tuple[Tuple[str, Predicate, ErrorKind], ...] = (
    ("not_paused", _not_paused, ErrorKind.DISBURSEMENT_PAUSED),
    ("amount_in_bounds", _amount_in_bounds, ErrorKind.INVALID_AMOUNT),
    ("borrower_not_caller", _borrower_not_caller, ErrorKind.INVALID_BORROWER),
    ("request_id_positive", _request_id_positive, ErrorKind.INVALID_REQUEST_ID),
    ("token_not_native_sentinel", _token_not_native_sentinel, ErrorKind.INVALID_TOKEN_CONTRACT),
    ("schedule_positive", _schedule_positive, ErrorKind.INVALID_REPAYMENT_SCHEDULE),
    ("clock_advanced", _clock_advanced, ErrorKind.INVALID_DISBURSEMENT_TIME),
    ("currency_supported", _currency_supported, ErrorKind.INVALID_CURRENCY),
    ("impact_data_present", _impact_data_present, ErrorKind.INVALID_IMPACT_DATA),
    ("treasury_covers", _treasury_covers, ErrorKind.INSUFFICIENT_TREASURY_BALANCE),
    ("endorsed", _endorsed, ErrorKind.INSUFFICIENT_ENDORSEMENTS),
    ("not_yet_disbursed", _not_yet_disbursed, ErrorKind.LOAN_ALREADY_DISBURSED),
)

CHECK_ORDER: Tuple[str, ...] = tuple(name for name, _, _ in CHECKS)


def validate(state: LedgerState, req: DisbursementRequest, ctx: CallContext) -> Optional[ErrorKind]:
    """Return the error kind of the first failing check, or None if all pass."""
    for _name, predicate, kind in CHECKS:
        if not predicate(state, req, ctx):
            return kind
    return None


def explain(
    state: LedgerState, req: DisbursementRequest, ctx: CallContext
) -> List[Tuple[str, bool, ErrorKind]]:
    """
    Evaluate every check without short-circuiting (diagnostics only).

    The verdict of a disbursement is still `validate()`; this lists all the
    reasons a request would be blocked, in chain order.
    """
    return [(name, bool(predicate(state, req, ctx)), kind) for name, predicate, kind in CHECKS]


__all__ = [
    "DisbursementRequest",
    "CallContext",
    "CHECKS",
    "CHECK_ORDER",
    "validate",
    "explain",
]
