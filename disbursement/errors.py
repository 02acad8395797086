from __future__ import annotations
# disbursement/errors.py
"""
Error kinds and the tagged result type for the loan disbursement ledger.

Ledger operations never raise for an expected rejection: they return a
`Result` carrying one `ErrorKind`. The numeric codes are stable and safe to
surface over logs/CLI output.

Exceptions are kept for callers that opt in (`Result.unwrap()`), for corrupt
snapshots and for unknown dispatcher actions.

Exports:
- ErrorKind (enum)
- Result (dataclass)
- DisbursementError (base)
- LedgerError
- StateError
- UnknownAction
"""


from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar
import json

T = TypeVar("T")


class ErrorKind(Enum):
    """Rejection reasons; the value is the wire/error code."""
    UNAUTHORIZED = 1000
    INSUFFICIENT_ENDORSEMENTS = 1001
    INVALID_AMOUNT = 1003
    LOAN_ALREADY_DISBURSED = 1004
    INVALID_REQUEST_ID = 1005
    INVALID_TOKEN_CONTRACT = 1006
    INVALID_REPAYMENT_SCHEDULE = 1008
    INSUFFICIENT_TREASURY_BALANCE = 1009
    INVALID_DISBURSEMENT_TIME = 1010
    INVALID_BORROWER = 1012
    DISBURSEMENT_PAUSED = 1013
    GOVERNANCE_NOT_SET = 1015
    INVALID_IMPACT_DATA = 1018
    INVALID_CURRENCY = 1020

    @property
    def code(self) -> int:
        return int(self.value)

    @property
    def label(self) -> str:
        """Lowercase name, used as a metrics label."""
        return self.name.lower()

    @classmethod
    def from_code(cls, code: int) -> "ErrorKind":
        return cls(int(code))


class DisbursementError(Exception):
    """Base class for disbursement ledger errors."""

    code: str = "DISB_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            # Keep this compact and stable for logs
            try:
                packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"))
            except (TypeError, ValueError):
                packed = str(self.details)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


class LedgerError(DisbursementError):
    """A ledger operation was rejected; raised only by `Result.unwrap()`."""
    code = "DISB_LEDGER_REJECTED"

    def __init__(
        self,
        kind: ErrorKind,
        *,
        operation: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.kind = kind
        d = dict(details or {})
        d.update({"kind": kind.name, "error_code": kind.code})
        if operation is not None:
            d.setdefault("operation", operation)
        super().__init__(message or kind.name.lower().replace("_", " "), details=d)


class StateError(DisbursementError):
    """A ledger snapshot is malformed or violates a ledger invariant."""
    code = "DISB_STATE_ERROR"


class UnknownAction(DisbursementError):
    """The action dispatcher was asked for an action it does not expose."""
    code = "DISB_UNKNOWN_ACTION"

    def __init__(self, action: str, *, details: Optional[Mapping[str, Any]] = None) -> None:
        d = dict(details or {})
        d.setdefault("action", action)
        super().__init__("unknown action", details=d)


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Tagged outcome of a ledger operation.

    Exactly one of `value` (on success) or `error` (on failure) is meaningful.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorKind] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorKind) -> "Result[T]":
        return cls(ok=False, error=error)

    @property
    def code(self) -> Optional[int]:
        return self.error.code if self.error is not None else None

    def unwrap(self, operation: Optional[str] = None) -> T:
        if not self.ok:
            assert self.error is not None
            raise LedgerError(self.error, operation=operation)
        return self.value  # type: ignore[return-value]

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            value = self.value
            if hasattr(value, "to_dict"):
                value = value.to_dict()  # type: ignore[union-attr]
            return {"ok": True, "value": value}
        assert self.error is not None
        return {"ok": False, "error": self.error.name, "code": self.error.code}


__all__ = [
    "ErrorKind",
    "Result",
    "DisbursementError",
    "LedgerError",
    "StateError",
    "UnknownAction",
]
