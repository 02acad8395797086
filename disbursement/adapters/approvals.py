from __future__ import annotations

"""
disbursement.adapters.approvals
===============================

Endorsement/approval lookups consumed by the disbursement validator.

The ledger only ever asks one question of this collaborator:
`is_approved(request_id) -> bool`. Two in-process implementations are
provided:

- StaticApprovals: an explicit approve/revoke map (devnet and tests).
- EndorsementThreshold: counts *distinct* endorsers per request and reports a
  request approved once the count reaches `threshold` (k-of-n, like multisig
  confirmations).
"""

import logging
from typing import Dict, Iterable, List, Optional, Protocol, Set, runtime_checkable

log = logging.getLogger(__name__)


@runtime_checkable
class ThresholdAggregator(Protocol):
    """Approval oracle injected into the ledger."""

    def is_approved(self, request_id: int) -> bool:
        """Return True iff the request has gathered enough endorsements."""


class StaticApprovals:
    """Explicit per-request approval flags."""

    def __init__(self, approved: Iterable[int] = ()) -> None:
        self._approved: Dict[int, bool] = {int(r): True for r in approved}

    def approve(self, request_id: int) -> None:
        self._approved[int(request_id)] = True

    def revoke(self, request_id: int) -> None:
        self._approved[int(request_id)] = False

    def is_approved(self, request_id: int) -> bool:
        return self._approved.get(int(request_id), False)

    def dump(self) -> Dict[str, bool]:
        return {str(k): v for k, v in sorted(self._approved.items())}

    @classmethod
    def load(cls, data: Dict[str, bool]) -> "StaticApprovals":
        inst = cls()
        for k, v in data.items():
            inst._approved[int(k)] = bool(v)
        return inst


class EndorsementThreshold:
    """
    Approve a request once `threshold` distinct endorsers have endorsed it.

    Endorsing twice with the same identity is idempotent.
    """

    def __init__(self, threshold: int = 1) -> None:
        if threshold <= 0:
            raise ValueError("threshold must be positive")
        self.threshold = threshold
        self._endorsers: Dict[int, Set[str]] = {}

    def endorse(self, request_id: int, endorser: str) -> int:
        """Record an endorsement; returns the distinct endorsement count."""
        bucket = self._endorsers.setdefault(int(request_id), set())
        bucket.add(endorser)
        log.debug(
            "approvals: endorse request_id=%d endorser=%s count=%d threshold=%d",
            request_id, endorser, len(bucket), self.threshold,
        )
        return len(bucket)

    def withdraw(self, request_id: int, endorser: str) -> int:
        bucket = self._endorsers.get(int(request_id))
        if bucket is None:
            return 0
        bucket.discard(endorser)
        return len(bucket)

    def endorsement_count(self, request_id: int) -> int:
        return len(self._endorsers.get(int(request_id), ()))

    def is_approved(self, request_id: int) -> bool:
        return self.endorsement_count(request_id) >= self.threshold

    def dump(self) -> Dict[str, List[str]]:
        return {str(k): sorted(v) for k, v in sorted(self._endorsers.items()) if v}

    @classmethod
    def load(cls, data: Dict[str, List[str]], threshold: int = 1) -> "EndorsementThreshold":
        inst = cls(threshold)
        for k, endorsers in data.items():
            inst._endorsers[int(k)] = {str(e) for e in endorsers}
        return inst


def approvals_for(mode: str, threshold: int = 1, data: Optional[Dict] = None):
    """Build the approval backend named by `mode`, optionally restoring a dump."""
    if mode == "static":
        return StaticApprovals.load(data or {})
    if mode == "endorsements":
        return EndorsementThreshold.load(data or {}, threshold)
    raise ValueError(f"unknown approval mode {mode!r}")


__all__ = ["ThresholdAggregator", "StaticApprovals", "EndorsementThreshold", "approvals_for"]
