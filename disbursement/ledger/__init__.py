from __future__ import annotations
"""
disbursement.ledger
===================

Ledger core: the owned state record, the governance gate, the ordered
disbursement validator, the executor and impact recording. Every function
takes the `LedgerState` it operates on explicitly; there is no hidden
module-level state.
"""

from .state import CONTRACT_FIELDS, LedgerState
from .validator import CHECK_ORDER, CallContext, DisbursementRequest, validate

__all__ = [
    "CONTRACT_FIELDS",
    "LedgerState",
    "CHECK_ORDER",
    "CallContext",
    "DisbursementRequest",
    "validate",
]
