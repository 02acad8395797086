from __future__ import annotations

import json

import pytest

from disbursement.config import DisbursementLimits
from disbursement.dtypes import LoanRecord
from disbursement.errors import StateError
from disbursement.ledger.state import LedgerState
from disbursement.tests import BORROWER, GOV, TOKEN, loan_args


def test_fresh_uses_configured_limits():
    st = LedgerState.fresh(DisbursementLimits(min_disbursement_amount=10, max_disbursement_amount=20))
    assert (st.min_disbursement_amount, st.max_disbursement_amount) == (10, 20)
    with pytest.raises(ValueError):
        LedgerState.fresh(DisbursementLimits(min_disbursement_amount=20, max_disbursement_amount=20))


def test_snapshot_survives_json_and_keeps_loans(funded):
    funded.approvals.approve(1)
    funded.approvals.approve(2)
    funded.disburse_loan(**loan_args())
    funded.disburse_loan(**loan_args(request_id=2, amount=900, token_contract=TOKEN,
                                     currency="SIP010", height=12))
    funded.record_loan_impact(BORROWER, 1, "built a well")

    data = json.loads(json.dumps(funded.state.dump()))
    restored = LedgerState.load(data)

    assert restored.treasury_balance == 8_600
    assert restored.governance_contract == GOV
    assert restored.last_disbursement_time == 12
    assert restored.disbursed_loans == funded.state.disbursed_loans
    assert restored.get_loan_details(1).impact_recorded is True
    assert restored.get_loan_details(2).token_contract == TOKEN
    # the journal is observability only and is not part of the snapshot
    assert restored.events() == ()


def test_load_rejects_inconsistent_counters():
    st = LedgerState(treasury_balance=100)
    st.disbursed_loans[1] = LoanRecord(BORROWER, 500, 3, None, 12)
    st.last_disbursement_time = 3
    data = st.dump()  # count/total left at 0
    with pytest.raises(StateError):
        LedgerState.load(data)

    data["disbursement_count"] = 1
    data["total_disbursed"] = 500
    assert LedgerState.load(data).disbursement_count == 1


def test_load_rejects_malformed_snapshot():
    with pytest.raises(StateError):
        LedgerState.load({"treasury_balance": "lots"})
    with pytest.raises(StateError):
        LedgerState.load({"disbursed_loans": {"1": {"borrower": BORROWER}}})


@pytest.mark.parametrize(
    "field, value",
    [
        ("treasury_balance", -1),
        ("min_disbursement_amount", 0),
        ("max_disbursement_amount", 100),
    ],
)
def test_assert_consistent_flags_invariant_violations(field, value):
    st = LedgerState()
    setattr(st, field, value)
    with pytest.raises(StateError):
        st.assert_consistent()


def test_loan_after_last_disbursement_time_is_inconsistent():
    st = LedgerState(total_disbursed=500, disbursement_count=1, last_disbursement_time=2)
    st.disbursed_loans[1] = LoanRecord(BORROWER, 500, 9, None, 12)
    with pytest.raises(StateError):
        st.assert_consistent()


def test_events_is_a_snapshot_of_the_journal(governed):
    events = governed.state.events()
    assert [ev.name for ev in events] == ["ContractRegistered"] * 4
    assert [ev.seq for ev in events] == [1, 2, 3, 4]
    governed.pause_disbursements(GOV, True)
    assert len(events) == 4
    assert governed.state.events()[-1].name == "PauseChanged"
