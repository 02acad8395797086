from __future__ import annotations

"""
disbursement.adapters.transfers
===============================

Value transfer sinks. The ledger hands every movement of funds (treasury
funding, disbursement, withdrawal) to a sink and assumes it succeeds; moving
real funds on a chain is the sink's business, not the ledger's.

`RecordingTransferSink` keeps native and token transfers in separate logs so
devnet tooling and tests can inspect exactly what would have been sent.
"""

import logging
from typing import Dict, List, Optional, Protocol, runtime_checkable

from disbursement.dtypes import TransferRecord

log = logging.getLogger(__name__)


@runtime_checkable
class TransferSink(Protocol):
    """Minimal transfer surface used by the ledger."""

    def transfer(
        self,
        amount: int,
        sender: str,
        recipient: str,
        token: Optional[str] = None,
    ) -> TransferRecord:
        """Move `amount` from sender to recipient; `token=None` means native currency."""


class RecordingTransferSink:
    """In-memory sink that logs transfers instead of executing them."""

    def __init__(self) -> None:
        self.native_transfers: List[TransferRecord] = []
        self.token_transfers: List[TransferRecord] = []

    def transfer(
        self,
        amount: int,
        sender: str,
        recipient: str,
        token: Optional[str] = None,
    ) -> TransferRecord:
        rec = TransferRecord(amount=int(amount), sender=sender, recipient=recipient, token=token)
        if token is None:
            self.native_transfers.append(rec)
        else:
            self.token_transfers.append(rec)
        log.debug(
            "transfers: amount=%d from=%s to=%s token=%s",
            rec.amount, sender, recipient, token or "-",
        )
        return rec

    @property
    def all_transfers(self) -> List[TransferRecord]:
        return [*self.native_transfers, *self.token_transfers]

    def clear(self) -> None:
        self.native_transfers.clear()
        self.token_transfers.clear()

    def dump(self) -> Dict[str, List[Dict]]:
        return {
            "native": [t.to_dict() for t in self.native_transfers],
            "token": [t.to_dict() for t in self.token_transfers],
        }

    @classmethod
    def load(cls, data: Dict[str, List[Dict]]) -> "RecordingTransferSink":
        sink = cls()
        sink.native_transfers = [TransferRecord.from_dict(d) for d in data.get("native", [])]
        sink.token_transfers = [TransferRecord.from_dict(d) for d in data.get("token", [])]
        return sink


__all__ = ["TransferSink", "RecordingTransferSink"]
