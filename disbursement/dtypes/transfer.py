from __future__ import annotations

"""
Transfer log entries and ledger journal events.

- TransferRecord is what a transfer sink receives/records: amount, sender,
  recipient and an optional token identity (None = native currency).
- LedgerEvent is an append-only journal entry emitted for every successful
  ledger mutation (governance, funding, disbursement, impact, withdrawal).

This module is intentionally small and pure (no IO).
"""


from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from . import Amount, Height, Identity

EventName = Literal[
    "ContractRegistered",
    "LimitsUpdated",
    "PauseChanged",
    "TreasuryFunded",
    "LoanDisbursed",
    "ImpactRecorded",
    "TreasuryWithdrawn",
]


@dataclass(frozen=True)
class TransferRecord:
    amount: Amount
    sender: Identity
    recipient: Identity
    token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"amount": self.amount, "from": self.sender, "to": self.recipient}
        if self.token is not None:
            d["token"] = self.token
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TransferRecord":
        token = d.get("token")
        return TransferRecord(
            amount=Amount(int(d["amount"])),
            sender=Identity(str(d["from"])),
            recipient=Identity(str(d["to"])),
            token=str(token) if token is not None else None,
        )


@dataclass(frozen=True)
class LedgerEvent:
    seq: int
    name: EventName
    caller: Identity
    height: Optional[Height] = None
    args: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seq": self.seq,
            "name": self.name,
            "caller": self.caller,
            "height": self.height,
            "args": dict(self.args),
        }
