from __future__ import annotations

"""Impact recording: the one-way `impact_recorded` flip on a disbursed loan."""

import logging

from disbursement.errors import ErrorKind, Result
from disbursement.ledger.state import LedgerState

log = logging.getLogger(__name__)


def record_loan_impact(state: LedgerState, caller: str, request_id: int, impact_data: str) -> Result[bool]:
    loan = state.disbursed_loans.get(request_id)
    if loan is None:
        kind = ErrorKind.INVALID_REQUEST_ID
    elif loan.borrower != caller:
        kind = ErrorKind.UNAUTHORIZED
    elif loan.impact_recorded or len(impact_data) == 0:
        kind = ErrorKind.INVALID_IMPACT_DATA
    else:
        state.disbursed_loans[request_id] = loan.with_impact_recorded()
        state.emit("ImpactRecorded", caller=caller, request_id=request_id, impact_data=impact_data)
        log.info("ledger: impact recorded request_id=%d borrower=%s", request_id, caller)
        return Result.success(True)

    log.debug("ledger: impact rejected request_id=%d caller=%s error=%s", request_id, caller, kind.name)
    return Result.failure(kind)


__all__ = ["record_loan_impact"]
