from __future__ import annotations

"""
Loan Disbursement Ledger: public operation surface

A deterministic ledger that:
1. Registers its collaborators (governance, impact tracker, threshold
   aggregator, repayment tracker) by self-attestation
2. Lets governance tune disbursement bounds and pause disbursements
3. Holds a treasury that anyone may fund once governance is registered and
   governance may withdraw from
4. Disburses endorsed loan requests exactly once each, at most one per clock
   height, after an ordered chain of precondition checks
5. Lets borrowers record the impact of their loan once

State lives in one owned `LedgerState`; the approval lookup and the transfer
sink are injected collaborators. Every operation returns a `Result`; no
rejected call mutates anything.

Methods (snake_case) and dispatcher actions (camelCase):
  - set_governance_contract            setGovernanceContract
  - set_impact_tracker_contract        setImpactTrackerContract
  - set_threshold_aggregator_contract  setThresholdAggregatorContract
  - set_repayment_tracker_contract     setRepaymentTrackerContract
  - set_min_disbursement_amount        setMinDisbursementAmount
  - set_max_disbursement_amount        setMaxDisbursementAmount
  - pause_disbursements                pauseDisbursements
  - fund_treasury                      fundTreasury
  - disburse_loan                      disburseLoan
  - record_loan_impact                 recordLoanImpact
  - withdraw_treasury_funds            withdrawTreasuryFunds
  - get_treasury_balance … get_loan_details (views)
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from disbursement import metrics
from disbursement.adapters.approvals import ThresholdAggregator, approvals_for
from disbursement.adapters.transfers import RecordingTransferSink, TransferSink
from disbursement.config import DisbursementConfig
from disbursement.dtypes import Amount, Height, Identity, LoanRecord, RequestId
from disbursement.errors import ErrorKind, Result, UnknownAction
from disbursement.ledger import governance, impact
from disbursement.ledger.executor import apply_disbursement
from disbursement.ledger.state import LedgerState
from disbursement.ledger.validator import (CallContext, DisbursementRequest,
                                           explain, validate)

log = logging.getLogger(__name__)


class LoanDisbursement:
    """
    One ledger instance plus its collaborators.

    Example:
        ledger = LoanDisbursement()
        ledger.set_governance_contract("ST2GOV", "ST2GOV")
        ledger.fund_treasury("ST2GOV", 10_000)
        ledger.approvals.approve(1)
        ledger.disburse_loan("ST2GOV", "ST1BORROWER", 500, 1, None, 30,
                             "impact", "STX", height=10)
    """

    def __init__(
        self,
        config: Optional[DisbursementConfig] = None,
        *,
        approvals: Optional[ThresholdAggregator] = None,
        sink: Optional[TransferSink] = None,
        state: Optional[LedgerState] = None,
    ) -> None:
        self.config = config or DisbursementConfig()
        self.config.validate()
        self.approvals: Any = approvals if approvals is not None else self._default_approvals()
        self.sink: Any = sink if sink is not None else RecordingTransferSink()
        self.state = state if state is not None else LedgerState.fresh(self.config.limits)

    @property
    def ledger_identity(self) -> str:
        return self.config.chain.ledger_identity

    def reset(self) -> None:
        """Drop all ledger state; collaborators are replaced by fresh defaults."""
        self.state = LedgerState.fresh(self.config.limits)
        self.approvals = self._default_approvals()
        self.sink = RecordingTransferSink()
        log.info("ledger: reset")

    # --- internal helpers ---

    def _default_approvals(self) -> ThresholdAggregator:
        return approvals_for(self.config.approval_mode, self.config.endorsement_threshold)

    def _governance(self, action: str, res: Result) -> Result:
        metrics.record_governance(action, res.ok)
        if not res.ok:
            assert res.error is not None
            metrics.record_rejection(action, res.error.label)
        return res

    # --- governance gate ---

    def set_governance_contract(self, caller: str, principal: str) -> Result[bool]:
        return self._governance(
            "set_governance_contract",
            governance.set_governance_contract(self.state, caller, principal),
        )

    def set_impact_tracker_contract(self, caller: str, principal: str) -> Result[bool]:
        return self._governance(
            "set_impact_tracker_contract",
            governance.set_impact_tracker_contract(self.state, caller, principal),
        )

    def set_threshold_aggregator_contract(self, caller: str, principal: str) -> Result[bool]:
        return self._governance(
            "set_threshold_aggregator_contract",
            governance.set_threshold_aggregator_contract(self.state, caller, principal),
        )

    def set_repayment_tracker_contract(self, caller: str, principal: str) -> Result[bool]:
        return self._governance(
            "set_repayment_tracker_contract",
            governance.set_repayment_tracker_contract(self.state, caller, principal),
        )

    def set_min_disbursement_amount(self, caller: str, new_min: int) -> Result[bool]:
        return self._governance(
            "set_min_disbursement_amount",
            governance.set_min_disbursement_amount(self.state, caller, new_min),
        )

    def set_max_disbursement_amount(self, caller: str, new_max: int) -> Result[bool]:
        return self._governance(
            "set_max_disbursement_amount",
            governance.set_max_disbursement_amount(self.state, caller, new_max),
        )

    def pause_disbursements(self, caller: str, paused: bool) -> Result[bool]:
        return self._governance(
            "pause_disbursements",
            governance.pause_disbursements(self.state, caller, paused),
        )

    def fund_treasury(self, caller: str, amount: int) -> Result[int]:
        res = governance.fund_treasury(
            self.state, caller, amount, sink=self.sink, ledger_identity=self.ledger_identity
        )
        if res.ok:
            metrics.set_treasury_balance(self.state.treasury_balance)
        return self._governance("fund_treasury", res)

    def withdraw_treasury_funds(self, caller: str, amount: int, recipient: str) -> Result[bool]:
        res = governance.withdraw_treasury_funds(
            self.state, caller, amount, recipient, sink=self.sink, ledger_identity=self.ledger_identity
        )
        if res.ok:
            metrics.set_treasury_balance(self.state.treasury_balance)
        return self._governance("withdraw_treasury_funds", res)

    # --- disbursement ---

    def _request(
        self,
        caller: str,
        borrower: str,
        amount: int,
        request_id: int,
        token_contract: Optional[str],
        repayment_schedule: int,
        impact_data: str,
        currency: str,
        height: int,
    ) -> Tuple[DisbursementRequest, CallContext]:
        req = DisbursementRequest(
            borrower=Identity(borrower),
            amount=Amount(amount),
            request_id=RequestId(request_id),
            token_contract=token_contract,
            repayment_schedule=repayment_schedule,
            impact_data=impact_data,
            currency=currency,
        )
        ctx = CallContext(
            caller=Identity(caller),
            height=Height(height),
            approvals=self.approvals,
            native_token_sentinel=self.config.chain.native_token_sentinel,
        )
        return req, ctx

    def disburse_loan(
        self,
        caller: str,
        borrower: str,
        amount: int,
        request_id: int,
        token_contract: Optional[str],
        repayment_schedule: int,
        impact_data: str,
        currency: str,
        *,
        height: int,
    ) -> Result[bool]:
        """
        Validate and, if every check passes, disburse `amount` to `borrower`.

        `height` is the current logical clock; at most one disbursement
        succeeds per height.
        """
        req, ctx = self._request(
            caller, borrower, amount, request_id, token_contract,
            repayment_schedule, impact_data, currency, height,
        )
        error = validate(self.state, req, ctx)
        if error is not None:
            log.debug(
                "ledger: disbursement rejected request_id=%d caller=%s error=%s",
                request_id, caller, error.name,
            )
            metrics.record_rejection("disburse", error.label)
            return Result.failure(error)

        apply_disbursement(self.state, req, ctx, sink=self.sink, ledger_identity=self.ledger_identity)
        metrics.record_disbursement(currency, amount, self.state.treasury_balance)
        return Result.success(True)

    def check_disbursement(
        self,
        caller: str,
        borrower: str,
        amount: int,
        request_id: int,
        token_contract: Optional[str],
        repayment_schedule: int,
        impact_data: str,
        currency: str,
        *,
        height: int,
    ) -> List[Tuple[str, bool, ErrorKind]]:
        """Dry run: every check's outcome in chain order; nothing is mutated."""
        req, ctx = self._request(
            caller, borrower, amount, request_id, token_contract,
            repayment_schedule, impact_data, currency, height,
        )
        return explain(self.state, req, ctx)

    def record_loan_impact(self, caller: str, request_id: int, impact_data: str) -> Result[bool]:
        res = impact.record_loan_impact(self.state, caller, request_id, impact_data)
        if res.ok:
            metrics.record_impact()
        else:
            assert res.error is not None
            metrics.record_rejection("record_impact", res.error.label)
        return res

    # --- views ---

    def get_treasury_balance(self) -> Result[int]:
        return Result.success(self.state.get_treasury_balance())

    def get_disbursement_paused(self) -> Result[bool]:
        return Result.success(self.state.get_disbursement_paused())

    def get_min_disbursement_amount(self) -> Result[int]:
        return Result.success(self.state.get_min_disbursement_amount())

    def get_max_disbursement_amount(self) -> Result[int]:
        return Result.success(self.state.get_max_disbursement_amount())

    def get_total_disbursed(self) -> Result[int]:
        return Result.success(self.state.get_total_disbursed())

    def get_disbursement_count(self) -> Result[int]:
        return Result.success(self.state.get_disbursement_count())

    def get_loan_details(self, request_id: int) -> Optional[LoanRecord]:
        return self.state.get_loan_details(RequestId(request_id))

    # --- action dispatcher ---

    def call(self, action: str, caller: Optional[str] = None, **kwargs: Any) -> Any:
        """
        Dispatch a camelCase action name (as used by the on-chain ABI) onto
        the matching method. Argument names may be camelCase or snake_case.

        View actions take no caller; every other action requires one.
        """
        entry = ACTIONS.get(action)
        if entry is None:
            raise UnknownAction(action)
        method_name, needs_caller = entry
        method: Callable[..., Any] = getattr(self, method_name)
        args = {_snake(k): v for k, v in kwargs.items()}
        if needs_caller:
            if caller is None:
                raise TypeError(f"action {action!r} requires a caller")
            return method(caller, **args)
        return method(**args)


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


# action -> (method name, takes caller)
ACTIONS: Dict[str, Tuple[str, bool]] = {
    "setGovernanceContract": ("set_governance_contract", True),
    "setImpactTrackerContract": ("set_impact_tracker_contract", True),
    "setThresholdAggregatorContract": ("set_threshold_aggregator_contract", True),
    "setRepaymentTrackerContract": ("set_repayment_tracker_contract", True),
    "setMinDisbursementAmount": ("set_min_disbursement_amount", True),
    "setMaxDisbursementAmount": ("set_max_disbursement_amount", True),
    "pauseDisbursements": ("pause_disbursements", True),
    "fundTreasury": ("fund_treasury", True),
    "disburseLoan": ("disburse_loan", True),
    "recordLoanImpact": ("record_loan_impact", True),
    "withdrawTreasuryFunds": ("withdraw_treasury_funds", True),
    "getTreasuryBalance": ("get_treasury_balance", False),
    "getDisbursementPaused": ("get_disbursement_paused", False),
    "getMinDisbursementAmount": ("get_min_disbursement_amount", False),
    "getMaxDisbursementAmount": ("get_max_disbursement_amount", False),
    "getTotalDisbursed": ("get_total_disbursed", False),
    "getDisbursementCount": ("get_disbursement_count", False),
    "getLoanDetails": ("get_loan_details", False),
}


__all__ = ["LoanDisbursement", "ACTIONS"]
