from __future__ import annotations

import os

import pytest

from disbursement.contract import LoanDisbursement
from disbursement.tests import (BORROWER, GOV, IMPACT_TRACKER,
                                REPAYMENT_TRACKER, THRESHOLD_AGGREGATOR)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Config loaders read DISB_*; tests start from defaults."""
    for key in list(os.environ):
        if key.startswith("DISB_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def ledger() -> LoanDisbursement:
    """A fresh ledger with default config, no governance registered."""
    return LoanDisbursement()


@pytest.fixture
def governed(ledger: LoanDisbursement) -> LoanDisbursement:
    """Governance and every collaborator registered by self-attestation."""
    assert ledger.set_governance_contract(GOV, GOV).ok
    assert ledger.set_threshold_aggregator_contract(THRESHOLD_AGGREGATOR, THRESHOLD_AGGREGATOR).ok
    assert ledger.set_repayment_tracker_contract(REPAYMENT_TRACKER, REPAYMENT_TRACKER).ok
    assert ledger.set_impact_tracker_contract(IMPACT_TRACKER, IMPACT_TRACKER).ok
    return ledger


@pytest.fixture
def funded(governed: LoanDisbursement) -> LoanDisbursement:
    """Governed ledger with 10_000 in the treasury."""
    assert governed.fund_treasury(GOV, 10_000).value == 10_000
    return governed

