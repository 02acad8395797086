from __future__ import annotations

"""
Disbursement ledger: treasury counters, thresholds & disbursed loans
---------------------------------------------------------------------

`LedgerState` is the single owned record a ledger instance mutates. It holds:
  • the treasury balance and the pause flag
  • the inclusive per-disbursement bounds (min < max)
  • the registered collaborator identities (None = unset)
  • the disbursement counters and the logical time of the last disbursement
  • the map request_id → LoanRecord

It carries no behaviour beyond storage, read projections and explicit
serialization helpers. Mutations are performed by the governance gate, the
executor and impact recording (sibling modules); persistence is delegated to
callers that snapshot `LedgerState.dump()` and restore via `LedgerState.load()`.

Amounts are integer base units (no floats).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from disbursement.config import DisbursementLimits
from disbursement.dtypes import LedgerEvent, LoanRecord, RequestId
from disbursement.errors import StateError

# Collaborator identity slots, in registration order.
CONTRACT_FIELDS = (
    "governance_contract",
    "impact_tracker_contract",
    "threshold_aggregator_contract",
    "repayment_tracker_contract",
)


@dataclass
class LedgerState:
    treasury_balance: int = 0
    disbursement_paused: bool = False
    min_disbursement_amount: int = 100
    max_disbursement_amount: int = 1_000_000
    governance_contract: Optional[str] = None
    impact_tracker_contract: Optional[str] = None
    threshold_aggregator_contract: Optional[str] = None
    repayment_tracker_contract: Optional[str] = None
    total_disbursed: int = 0
    disbursement_count: int = 0
    last_disbursement_time: int = 0
    disbursed_loans: Dict[RequestId, LoanRecord] = field(default_factory=dict)
    journal: List[LedgerEvent] = field(default_factory=list, repr=False)

    @classmethod
    def fresh(cls, limits: Optional[DisbursementLimits] = None) -> "LedgerState":
        """A new ledger seeded with the configured bounds."""
        lim = limits or DisbursementLimits()
        lim.validate()
        return cls(
            min_disbursement_amount=lim.min_disbursement_amount,
            max_disbursement_amount=lim.max_disbursement_amount,
        )

    # --- read projections ---

    @property
    def governance_set(self) -> bool:
        return self.governance_contract is not None

    def get_treasury_balance(self) -> int:
        return self.treasury_balance

    def get_disbursement_paused(self) -> bool:
        return self.disbursement_paused

    def get_min_disbursement_amount(self) -> int:
        return self.min_disbursement_amount

    def get_max_disbursement_amount(self) -> int:
        return self.max_disbursement_amount

    def get_total_disbursed(self) -> int:
        return self.total_disbursed

    def get_disbursement_count(self) -> int:
        return self.disbursement_count

    def get_loan_details(self, request_id: RequestId) -> Optional[LoanRecord]:
        return self.disbursed_loans.get(request_id)

    def events(self) -> Tuple[LedgerEvent, ...]:
        """Journal entries in emission order (a copy)."""
        return tuple(self.journal)

    # --- journal ---

    def emit(
        self,
        name: str,
        *,
        caller: str,
        height: Optional[int] = None,
        **args: object,
    ) -> LedgerEvent:
        ev = LedgerEvent(
            seq=len(self.journal) + 1,
            name=name,  # type: ignore[arg-type]
            caller=caller,
            height=height,
            args=dict(args),
        )
        self.journal.append(ev)
        return ev

    # --- load/save ---

    def dump(self) -> Dict:
        return {
            "treasury_balance": self.treasury_balance,
            "disbursement_paused": self.disbursement_paused,
            "min_disbursement_amount": self.min_disbursement_amount,
            "max_disbursement_amount": self.max_disbursement_amount,
            "contracts": {name: getattr(self, name) for name in CONTRACT_FIELDS},
            "total_disbursed": self.total_disbursed,
            "disbursement_count": self.disbursement_count,
            "last_disbursement_time": self.last_disbursement_time,
            # JSON object keys are strings; keep them sorted numerically.
            "disbursed_loans": {
                str(k): v.to_dict() for k, v in sorted(self.disbursed_loans.items())
            },
        }

    @classmethod
    def load(cls, data: Dict) -> "LedgerState":
        try:
            contracts = data.get("contracts", {})
            st = cls(
                treasury_balance=int(data.get("treasury_balance", 0)),
                disbursement_paused=bool(data.get("disbursement_paused", False)),
                min_disbursement_amount=int(data.get("min_disbursement_amount", 100)),
                max_disbursement_amount=int(data.get("max_disbursement_amount", 1_000_000)),
                total_disbursed=int(data.get("total_disbursed", 0)),
                disbursement_count=int(data.get("disbursement_count", 0)),
                last_disbursement_time=int(data.get("last_disbursement_time", 0)),
            )
            for name in CONTRACT_FIELDS:
                value = contracts.get(name)
                setattr(st, name, str(value) if value is not None else None)
            for k, rec in data.get("disbursed_loans", {}).items():
                st.disbursed_loans[RequestId(int(k))] = LoanRecord.from_dict(rec)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StateError("malformed ledger snapshot", details={"error": str(e)}) from e
        st.assert_consistent()
        return st

    # --- utilities ---

    def assert_consistent(self) -> None:
        """Verify ledger invariants; raises StateError on the first violation."""
        for name in ("treasury_balance", "total_disbursed", "disbursement_count", "last_disbursement_time"):
            if getattr(self, name) < 0:
                raise StateError(f"{name} must be non-negative", details={name: getattr(self, name)})
        if not (0 < self.min_disbursement_amount < self.max_disbursement_amount):
            raise StateError(
                "disbursement bounds violate 0 < min < max",
                details={"min": self.min_disbursement_amount, "max": self.max_disbursement_amount},
            )
        if self.disbursement_count != len(self.disbursed_loans):
            raise StateError(
                "disbursement_count does not match stored loans",
                details={"count": self.disbursement_count, "loans": len(self.disbursed_loans)},
            )
        total = sum(rec.amount for rec in self.disbursed_loans.values())
        if total != self.total_disbursed:
            raise StateError(
                "total_disbursed does not match stored loans",
                details={"total_disbursed": self.total_disbursed, "sum_loans": total},
            )
        for request_id, rec in self.disbursed_loans.items():
            if request_id <= 0 or rec.amount <= 0 or rec.repayment_schedule <= 0:
                raise StateError("invalid loan record", details={"request_id": request_id})
            if rec.disbursement_time > self.last_disbursement_time:
                raise StateError(
                    "loan disbursed after last_disbursement_time",
                    details={"request_id": request_id},
                )
