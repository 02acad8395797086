from __future__ import annotations
"""
Disbursement ledger test suite package.

Shared identities and the canonical valid disbursement live here so test
modules and fixtures agree on who is who.
"""

from typing import Any, Dict

GOV = "ST2GOV"
BORROWER = "ST1SJ3DTE5DN7X54YDH5D64R3BCB6A2AG2ZQ8YPD5"
IMPACT_TRACKER = "ST5IMP"
THRESHOLD_AGGREGATOR = "ST3THR"
REPAYMENT_TRACKER = "ST4REP"
STRANGER = "ST3FAKE"
RECIPIENT = "ST9REC"
TOKEN = "ST8TOK"


def loan_args(**overrides: Any) -> Dict[str, Any]:
    """Keyword arguments of a disbursement that passes every check on a funded ledger."""
    args: Dict[str, Any] = dict(
        caller=GOV,
        borrower=BORROWER,
        amount=500,
        request_id=1,
        token_contract=None,
        repayment_schedule=30,
        impact_data="Impact data",
        currency="STX",
        height=10,
    )
    args.update(overrides)
    return args


__all__ = [
    "GOV",
    "BORROWER",
    "IMPACT_TRACKER",
    "THRESHOLD_AGGREGATOR",
    "REPAYMENT_TRACKER",
    "STRANGER",
    "RECIPIENT",
    "TOKEN",
    "loan_args",
]
