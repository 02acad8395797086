"""
External collaborators of the disbursement ledger: the approval lookup and the
value transfer sink. Only their interfaces matter to the ledger; the classes
here are in-process implementations for devnet tooling and tests.
"""

from .approvals import (EndorsementThreshold, StaticApprovals, ThresholdAggregator,
                        approvals_for)
from .transfers import RecordingTransferSink, TransferSink

__all__ = [
    "ThresholdAggregator",
    "StaticApprovals",
    "EndorsementThreshold",
    "approvals_for",
    "TransferSink",
    "RecordingTransferSink",
]
