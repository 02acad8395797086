from __future__ import annotations

"""
Governance gate: collaborator registration, thresholds, pause & treasury
-------------------------------------------------------------------------

Every function here takes the ledger state and the caller identity
explicitly and returns a `Result`. Nothing is written unless every check
passed.

Authorization rules
~~~~~~~~~~~~~~~~~~~
  • Collaborator slots (governance / impact tracker / threshold aggregator /
    repayment tracker) are self-attesting: the caller must be the identity it
    registers. A later registration by another self-attesting caller
    overwrites the slot.
  • set_min/set_max only require governance to be *registered*; the caller
    does not have to be governance.
  • pause and withdraw require caller == governance.
  • fund requires governance to be registered; anyone may fund.
"""

import logging

from disbursement.adapters.transfers import TransferSink
from disbursement.errors import ErrorKind, Result
from disbursement.ledger.state import CONTRACT_FIELDS, LedgerState

log = logging.getLogger(__name__)


def _reject(op: str, kind: ErrorKind, caller: str) -> Result:
    log.debug("governance: %s rejected caller=%s error=%s", op, caller, kind.name)
    return Result.failure(kind)


def set_contract_reference(state: LedgerState, slot: str, caller: str, principal: str) -> Result[bool]:
    """Register `principal` in collaborator `slot`; caller must be `principal`."""
    if slot not in CONTRACT_FIELDS:
        raise ValueError(f"unknown contract slot {slot!r}")
    if caller != principal:
        return _reject(f"set {slot}", ErrorKind.UNAUTHORIZED, caller)
    previous = getattr(state, slot)
    setattr(state, slot, principal)
    state.emit("ContractRegistered", caller=caller, slot=slot, principal=principal, previous=previous)
    if previous is not None and previous != principal:
        log.warning("governance: %s overwritten previous=%s new=%s", slot, previous, principal)
    else:
        log.info("governance: %s registered principal=%s", slot, principal)
    return Result.success(True)


def set_governance_contract(state: LedgerState, caller: str, principal: str) -> Result[bool]:
    return set_contract_reference(state, "governance_contract", caller, principal)


def set_impact_tracker_contract(state: LedgerState, caller: str, principal: str) -> Result[bool]:
    return set_contract_reference(state, "impact_tracker_contract", caller, principal)


def set_threshold_aggregator_contract(state: LedgerState, caller: str, principal: str) -> Result[bool]:
    return set_contract_reference(state, "threshold_aggregator_contract", caller, principal)


def set_repayment_tracker_contract(state: LedgerState, caller: str, principal: str) -> Result[bool]:
    return set_contract_reference(state, "repayment_tracker_contract", caller, principal)


def set_min_disbursement_amount(state: LedgerState, caller: str, new_min: int) -> Result[bool]:
    if not state.governance_set:
        return _reject("set_min", ErrorKind.GOVERNANCE_NOT_SET, caller)
    if new_min <= 0 or new_min >= state.max_disbursement_amount:
        return _reject("set_min", ErrorKind.INVALID_AMOUNT, caller)
    old = state.min_disbursement_amount
    state.min_disbursement_amount = new_min
    state.emit("LimitsUpdated", caller=caller, bound="min", old=old, new=new_min)
    log.info("governance: min_disbursement_amount %d -> %d caller=%s", old, new_min, caller)
    return Result.success(True)


def set_max_disbursement_amount(state: LedgerState, caller: str, new_max: int) -> Result[bool]:
    if not state.governance_set:
        return _reject("set_max", ErrorKind.GOVERNANCE_NOT_SET, caller)
    if new_max <= state.min_disbursement_amount:
        return _reject("set_max", ErrorKind.INVALID_AMOUNT, caller)
    old = state.max_disbursement_amount
    state.max_disbursement_amount = new_max
    state.emit("LimitsUpdated", caller=caller, bound="max", old=old, new=new_max)
    log.info("governance: max_disbursement_amount %d -> %d caller=%s", old, new_max, caller)
    return Result.success(True)


def pause_disbursements(state: LedgerState, caller: str, paused: bool) -> Result[bool]:
    # An unset governance slot never equals a caller.
    if caller != state.governance_contract:
        return _reject("pause", ErrorKind.UNAUTHORIZED, caller)
    state.disbursement_paused = bool(paused)
    state.emit("PauseChanged", caller=caller, paused=state.disbursement_paused)
    log.info("governance: disbursements %s", "paused" if paused else "resumed")
    return Result.success(True)


def fund_treasury(
    state: LedgerState,
    caller: str,
    amount: int,
    *,
    sink: TransferSink,
    ledger_identity: str,
) -> Result[int]:
    """Move `amount` native units from caller into the treasury; returns the new balance."""
    if not state.governance_set:
        return _reject("fund", ErrorKind.GOVERNANCE_NOT_SET, caller)
    if amount <= 0:
        return _reject("fund", ErrorKind.INVALID_AMOUNT, caller)
    sink.transfer(amount, caller, ledger_identity)
    state.treasury_balance += amount
    state.emit("TreasuryFunded", caller=caller, amount=amount, balance=state.treasury_balance)
    log.info("governance: treasury funded amount=%d balance=%d from=%s", amount, state.treasury_balance, caller)
    return Result.success(state.treasury_balance)


def withdraw_treasury_funds(
    state: LedgerState,
    caller: str,
    amount: int,
    recipient: str,
    *,
    sink: TransferSink,
    ledger_identity: str,
) -> Result[bool]:
    """
    Move `amount` native units from the treasury to `recipient` (governance only).

    Deliberate deviation from the on-chain ledger this mirrors, which accepts
    any amount here: a non-positive `amount` is rejected with INVALID_AMOUNT
    (checked after authorization, before the balance check), so a withdrawal
    can never grow the treasury balance.
    """
    if caller != state.governance_contract:
        return _reject("withdraw", ErrorKind.UNAUTHORIZED, caller)
    if amount <= 0:
        return _reject("withdraw", ErrorKind.INVALID_AMOUNT, caller)
    if state.treasury_balance < amount:
        return _reject("withdraw", ErrorKind.INSUFFICIENT_TREASURY_BALANCE, caller)
    sink.transfer(amount, ledger_identity, recipient)
    state.treasury_balance -= amount
    state.emit(
        "TreasuryWithdrawn",
        caller=caller,
        amount=amount,
        recipient=recipient,
        balance=state.treasury_balance,
    )
    log.info(
        "governance: treasury withdrawal amount=%d to=%s balance=%d",
        amount, recipient, state.treasury_balance,
    )
    return Result.success(True)


__all__ = [
    "set_contract_reference",
    "set_governance_contract",
    "set_impact_tracker_contract",
    "set_threshold_aggregator_contract",
    "set_repayment_tracker_contract",
    "set_min_disbursement_amount",
    "set_max_disbursement_amount",
    "pause_disbursements",
    "fund_treasury",
    "withdraw_treasury_funds",
]
