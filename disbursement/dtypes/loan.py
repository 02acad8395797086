from __future__ import annotations

"""
LoanRecord: the immutable entry stored per disbursed request id.

The only permitted change after insertion is `impact_recorded: False -> True`,
which is expressed by `with_impact_recorded()` returning a new record.
"""


from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

from . import Amount, Height, Identity


@dataclass(frozen=True)
class LoanRecord:
    borrower: Identity
    amount: Amount
    disbursement_time: Height
    token_contract: Optional[str]  # None = native currency
    repayment_schedule: int  # number of repayment periods
    impact_recorded: bool = False

    def with_impact_recorded(self) -> "LoanRecord":
        return replace(self, impact_recorded=True)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "LoanRecord":
        token = d.get("token_contract")
        return LoanRecord(
            borrower=Identity(str(d["borrower"])),
            amount=Amount(int(d["amount"])),
            disbursement_time=Height(int(d["disbursement_time"])),
            token_contract=str(token) if token is not None else None,
            repayment_schedule=int(d["repayment_schedule"]),
            impact_recorded=bool(d.get("impact_recorded", False)),
        )
