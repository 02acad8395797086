from __future__ import annotations

"""
Read accessors and the camelCase action dispatcher.
"""

import pytest

from disbursement.contract import ACTIONS, LoanDisbursement
from disbursement.errors import ErrorKind, UnknownAction
from disbursement.tests import BORROWER, GOV, RECIPIENT, loan_args


def test_default_views(ledger):
    assert ledger.get_treasury_balance().value == 0
    assert ledger.get_disbursement_paused().value is False
    assert ledger.get_min_disbursement_amount().value == 100
    assert ledger.get_max_disbursement_amount().value == 1_000_000
    assert ledger.get_total_disbursed().value == 0
    assert ledger.get_disbursement_count().value == 0
    assert ledger.get_loan_details(1) is None
    for view in (ledger.get_treasury_balance, ledger.get_total_disbursed, ledger.get_disbursement_count):
        assert view().ok


def test_views_after_disbursement(funded):
    funded.approvals.approve(1)
    funded.disburse_loan(**loan_args())
    assert funded.get_total_disbursed().value == 500
    assert funded.get_disbursement_count().value == 1
    assert funded.get_treasury_balance().value == 9_500


def test_every_public_operation_is_dispatchable():
    ledger = LoanDisbursement()
    for action, (method, _) in ACTIONS.items():
        assert callable(getattr(ledger, method)), action


def test_dispatch_full_flow_with_camel_case_arguments(ledger):
    assert ledger.call("setGovernanceContract", caller=GOV, principal=GOV).ok
    assert ledger.call("fundTreasury", caller=GOV, amount=10_000).value == 10_000
    ledger.approvals.approve(1)
    res = ledger.call(
        "disburseLoan",
        caller=GOV,
        borrower=BORROWER,
        amount=500,
        requestId=1,
        tokenContract=None,
        repaymentSchedule=30,
        impactData="Impact data",
        currency="STX",
        height=10,
    )
    assert res.ok
    assert ledger.call("getTreasuryBalance").value == 9_500
    assert ledger.call("getLoanDetails", requestId=1).borrower == BORROWER
    assert ledger.call("recordLoanImpact", caller=BORROWER, requestId=1, impactData="done").ok
    assert ledger.call("withdrawTreasuryFunds", caller=GOV, amount=2_000, recipient=RECIPIENT).ok
    assert ledger.call("getTreasuryBalance").value == 7_500


def test_dispatch_accepts_snake_case_arguments(governed):
    assert governed.call("setMaxDisbursementAmount", caller=GOV, new_max=5_000).ok
    assert governed.call("setMinDisbursementAmount", caller=GOV, newMin=200).ok
    assert governed.call("getMinDisbursementAmount").value == 200
    assert governed.call("getMaxDisbursementAmount").value == 5_000


def test_dispatch_returns_rejections_as_values(ledger):
    res = ledger.call("pauseDisbursements", caller=GOV, paused=True)
    assert res.error is ErrorKind.UNAUTHORIZED


def test_dispatch_unknown_action(ledger):
    with pytest.raises(UnknownAction) as ei:
        ledger.call("mintTokens", caller=GOV)
    assert ei.value.to_dict()["details"]["action"] == "mintTokens"


def test_dispatch_mutating_action_requires_caller(ledger):
    with pytest.raises(TypeError):
        ledger.call("fundTreasury", amount=10)


def test_reset_restores_fresh_ledger(funded):
    funded.approvals.approve(1)
    funded.disburse_loan(**loan_args())
    funded.reset()
    assert funded.state.governance_contract is None
    assert funded.get_treasury_balance().value == 0
    assert funded.get_loan_details(1) is None
    assert funded.sink.all_transfers == []
    assert funded.approvals.is_approved(1) is False
