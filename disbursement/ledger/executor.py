from __future__ import annotations

"""
Disbursement executor.

Applies a disbursement that already passed `validator.validate()`: routes the
transfer to the borrower and updates the ledger counters and loan map in one
step. The executor performs no checks of its own and cannot fail.
"""

import logging

from disbursement.adapters.transfers import TransferSink
from disbursement.dtypes import LoanRecord
from disbursement.ledger.state import LedgerState
from disbursement.ledger.validator import CallContext, DisbursementRequest

log = logging.getLogger(__name__)


def apply_disbursement(
    state: LedgerState,
    req: DisbursementRequest,
    ctx: CallContext,
    *,
    sink: TransferSink,
    ledger_identity: str,
) -> LoanRecord:
    record = LoanRecord(
        borrower=req.borrower,
        amount=req.amount,
        disbursement_time=ctx.height,
        token_contract=req.token_contract or None,
        repayment_schedule=req.repayment_schedule,
        impact_recorded=False,
    )

    # Native transfer when no token is named, otherwise a token transfer.
    sink.transfer(req.amount, ledger_identity, req.borrower, record.token_contract)

    state.treasury_balance -= req.amount
    state.total_disbursed += req.amount
    state.disbursement_count += 1
    state.last_disbursement_time = ctx.height
    state.disbursed_loans[req.request_id] = record

    state.emit(
        "LoanDisbursed",
        caller=ctx.caller,
        height=ctx.height,
        request_id=req.request_id,
        borrower=req.borrower,
        amount=req.amount,
        token=record.token_contract,
        currency=req.currency,
    )
    log.info(
        "ledger: disbursed request_id=%d borrower=%s amount=%d token=%s height=%d balance=%d",
        req.request_id, req.borrower, req.amount, record.token_contract or "native",
        ctx.height, state.treasury_balance,
    )
    return record


__all__ = ["apply_disbursement"]
