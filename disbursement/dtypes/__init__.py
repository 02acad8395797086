from __future__ import annotations

"""
Lightweight shared types for the loan disbursement ledger.

These are intentionally minimal so they can be imported from both runtime
code and type-checkers without importing heavier submodules.

Conventions
-----------
- Identities are opaque principal strings (e.g. "ST2GOV"), compared by value.
- Monetary values are integers in the smallest unit of the medium.
- Heights are the logical clock supplied by the caller (block height).
"""


from enum import Enum
from typing import NewType, Optional

# ────────────────────────────────────────────────────────────────────────────────
# Identifiers
# ────────────────────────────────────────────────────────────────────────────────

Identity = NewType("Identity", str)  # caller / borrower / contract principal
RequestId = NewType("RequestId", int)  # positive, unique per disbursement

# ────────────────────────────────────────────────────────────────────────────────
# Primitive numeric types
# ────────────────────────────────────────────────────────────────────────────────

Amount = NewType("Amount", int)  # smallest unit of the transfer medium
Height = NewType("Height", int)  # logical clock / block height


class Currency(str, Enum):
    """Supported transfer media."""
    NATIVE = "STX"  # native chain currency
    FUNGIBLE = "SIP010"  # fungible-token standard

    @classmethod
    def parse(cls, value: str) -> Optional["Currency"]:
        """Return the matching member or None for an unsupported code."""
        for member in cls:
            if member.value == value:
                return member
        return None


from .loan import LoanRecord  # noqa: E402
from .transfer import LedgerEvent, TransferRecord  # noqa: E402

__all__ = [
    "Identity",
    "RequestId",
    "Amount",
    "Height",
    "Currency",
    "LoanRecord",
    "TransferRecord",
    "LedgerEvent",
]
