from __future__ import annotations

"""
disbursement.cli.ledger
-----------------------

Devnet utility to drive a loan disbursement ledger from the shell.

Ledger state, approvals and the transfer log are kept in a JSON file between
invocations (``--state``, default ``ledger_state.json``). Every command prints
a JSON document; a rejected operation prints its error kind and exits with
status 1.

Examples
--------
# Fresh ledger, governance self-registers and funds the treasury
python -m disbursement.cli.ledger init
python -m disbursement.cli.ledger register governance ST2GOV --caller ST2GOV
python -m disbursement.cli.ledger fund 10000 --caller ST2GOV

# Approve request 1 (with DISB_APPROVAL_MODE=endorsements, gather distinct
# endorsements via `endorse 1 --endorser ST3THR` instead), then disburse 500
# native units at height 10
python -m disbursement.cli.ledger approve 1
python -m disbursement.cli.ledger disburse --caller ST2GOV --borrower ST1BORROWER \
  --amount 500 --request-id 1 --schedule 30 --impact "school fees" --height 10

# Why would a disbursement be rejected?
python -m disbursement.cli.ledger disburse ... --explain

# Borrower records impact; inspect
python -m disbursement.cli.ledger record-impact 1 "classroom built" --caller ST1BORROWER
python -m disbursement.cli.ledger show
python -m disbursement.cli.ledger loan 1
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from disbursement import config as config_mod
from disbursement.adapters.approvals import approvals_for
from disbursement.adapters.transfers import RecordingTransferSink
from disbursement.contract import LoanDisbursement
from disbursement.errors import Result, StateError
from disbursement.ledger.state import LedgerState

log = logging.getLogger(__name__)

app = typer.Typer(
    name="disbursement-ledger",
    add_completion=False,
    no_args_is_help=True,
    help="Drive a loan disbursement ledger kept in a local JSON state file (devnet/test tooling).",
)

DEFAULT_STATE = "ledger_state.json"

SLOTS = {
    "governance": "set_governance_contract",
    "impact-tracker": "set_impact_tracker_contract",
    "threshold-aggregator": "set_threshold_aggregator_contract",
    "repayment-tracker": "set_repayment_tracker_contract",
}

# -------------------- state file --------------------


def _state_path(ctx: typer.Context) -> Path:
    return Path((ctx.obj or {}).get("state", DEFAULT_STATE))


def _open(ctx: typer.Context) -> LoanDisbursement:
    path = _state_path(ctx)
    cfg = config_mod.load()
    if not path.exists():
        typer.secho(f"state file {path} not found; run `init` first", err=True, fg=typer.colors.RED)
        raise typer.Exit(2)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        state = LedgerState.load(data.get("ledger", {}))
        approvals = approvals_for(cfg.approval_mode, cfg.endorsement_threshold, data.get("approvals", {}))
        sink = RecordingTransferSink.load(data.get("transfers", {}))
    except (ValueError, KeyError, TypeError, AttributeError, StateError) as e:
        typer.secho(f"cannot load {path}: {e!r}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2)
    return LoanDisbursement(cfg, approvals=approvals, sink=sink, state=state)


def _save(ctx: typer.Context, ledger: LoanDisbursement) -> None:
    path = _state_path(ctx)
    doc = {
        "ledger": ledger.state.dump(),
        "approvals": ledger.approvals.dump(),
        "transfers": ledger.sink.dump(),
    }
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(doc, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)
    log.debug("cli: saved state to %s", path)


def _emit(obj: Dict[str, Any]) -> None:
    typer.echo(json.dumps(obj, indent=2, sort_keys=True))


def _require_mode(ledger: LoanDisbursement, mode: str, command: str) -> None:
    if ledger.config.approval_mode != mode:
        typer.secho(
            f"`{command}` needs DISB_APPROVAL_MODE={mode} (current: {ledger.config.approval_mode})",
            err=True,
            fg=typer.colors.RED,
        )
        raise typer.Exit(2)


def _finish(ctx: typer.Context, ledger: LoanDisbursement, res: Result) -> None:
    """Print the result; persist on success, exit 1 on rejection."""
    _emit(res.to_dict())
    if not res.ok:
        raise typer.Exit(1)
    _save(ctx, ledger)


# -------------------- commands --------------------


@app.command("init")
def init_cmd(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing state file."),
) -> None:
    """Create a fresh ledger using the loaded configuration."""
    path = _state_path(ctx)
    if path.exists() and not force:
        typer.secho(f"{path} already exists (use --force to overwrite)", err=True, fg=typer.colors.RED)
        raise typer.Exit(2)
    ledger = LoanDisbursement(config_mod.load())
    _save(ctx, ledger)
    _emit({"ok": True, "state": str(path), "ledger": ledger.state.dump()})


@app.command("register")
def register_cmd(
    ctx: typer.Context,
    slot: str = typer.Argument(..., help="governance | impact-tracker | threshold-aggregator | repayment-tracker"),
    principal: str = typer.Argument(..., help="Identity to register (must equal --caller)."),
    caller: str = typer.Option(..., "--caller", help="Calling identity."),
) -> None:
    """Self-register a collaborator identity."""
    method = SLOTS.get(slot)
    if method is None:
        typer.secho(f"unknown slot {slot!r}; choose from {', '.join(SLOTS)}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2)
    ledger = _open(ctx)
    _finish(ctx, ledger, getattr(ledger, method)(caller, principal))


@app.command("set-limits")
def set_limits_cmd(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller", help="Calling identity."),
    min_amount: Optional[int] = typer.Option(None, "--min", help="New minimum disbursement amount."),
    max_amount: Optional[int] = typer.Option(None, "--max", help="New maximum disbursement amount."),
) -> None:
    """Update disbursement bounds (max is applied before min)."""
    if min_amount is None and max_amount is None:
        typer.secho("nothing to do: pass --min and/or --max", err=True, fg=typer.colors.RED)
        raise typer.Exit(2)
    ledger = _open(ctx)
    res: Result = Result.success(True)
    if max_amount is not None:
        res = ledger.set_max_disbursement_amount(caller, max_amount)
    if res.ok and min_amount is not None:
        res = ledger.set_min_disbursement_amount(caller, min_amount)
    _finish(ctx, ledger, res)


@app.command("pause")
def pause_cmd(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller", help="Calling identity (must be governance)."),
    resume: bool = typer.Option(False, "--resume", help="Clear the pause flag instead of setting it."),
) -> None:
    """Pause (or resume) disbursements."""
    ledger = _open(ctx)
    _finish(ctx, ledger, ledger.pause_disbursements(caller, not resume))


@app.command("fund")
def fund_cmd(
    ctx: typer.Context,
    amount: int = typer.Argument(..., help="Amount to move into the treasury."),
    caller: str = typer.Option(..., "--caller", help="Funding identity."),
) -> None:
    """Fund the treasury."""
    ledger = _open(ctx)
    _finish(ctx, ledger, ledger.fund_treasury(caller, amount))


@app.command("approve")
def approve_cmd(
    ctx: typer.Context,
    request_id: int = typer.Argument(..., help="Request id to approve."),
    revoke: bool = typer.Option(False, "--revoke", help="Revoke the approval instead."),
) -> None:
    """Set the devnet approval flag for a request (static approval mode)."""
    ledger = _open(ctx)
    _require_mode(ledger, "static", "approve")
    if revoke:
        ledger.approvals.revoke(request_id)
    else:
        ledger.approvals.approve(request_id)
    _finish(ctx, ledger, Result.success(ledger.approvals.is_approved(request_id)))


@app.command("endorse")
def endorse_cmd(
    ctx: typer.Context,
    request_id: int = typer.Argument(..., help="Request id to endorse."),
    endorser: str = typer.Option(..., "--endorser", help="Endorsing identity."),
    withdraw: bool = typer.Option(False, "--withdraw", help="Withdraw the endorsement instead."),
) -> None:
    """Add (or withdraw) an endorsement for a request (endorsements approval mode)."""
    ledger = _open(ctx)
    _require_mode(ledger, "endorsements", "endorse")
    if withdraw:
        count = ledger.approvals.withdraw(request_id, endorser)
    else:
        count = ledger.approvals.endorse(request_id, endorser)
    _emit({
        "request_id": request_id,
        "endorsements": count,
        "threshold": ledger.approvals.threshold,
        "approved": ledger.approvals.is_approved(request_id),
    })
    _save(ctx, ledger)


@app.command("disburse")
def disburse_cmd(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller", help="Calling identity."),
    borrower: str = typer.Option(..., "--borrower", help="Borrower identity."),
    amount: int = typer.Option(..., "--amount", help="Amount to disburse."),
    request_id: int = typer.Option(..., "--request-id", help="Endorsed request id."),
    height: int = typer.Option(..., "--height", help="Current logical clock / block height."),
    schedule: int = typer.Option(..., "--schedule", help="Number of repayment periods."),
    impact: str = typer.Option(..., "--impact", help="Impact statement."),
    token: Optional[str] = typer.Option(None, "--token", help="Token contract identity (omit for native)."),
    currency: str = typer.Option("STX", "--currency", help="STX | SIP010"),
    explain_only: bool = typer.Option(False, "--explain", help="Only report every check's outcome."),
) -> None:
    """Disburse a loan (or dry-run the checks with --explain)."""
    ledger = _open(ctx)
    args = (caller, borrower, amount, request_id, token, schedule, impact, currency)
    if explain_only:
        checks = ledger.check_disbursement(*args, height=height)
        _emit({
            "checks": [
                {"check": name, "passed": passed, "error": kind.name}
                for name, passed, kind in checks
            ],
            "would_fail_with": next((kind.name for _, passed, kind in checks if not passed), None),
        })
        return
    _finish(ctx, ledger, ledger.disburse_loan(*args, height=height))


@app.command("record-impact")
def record_impact_cmd(
    ctx: typer.Context,
    request_id: int = typer.Argument(..., help="Disbursed request id."),
    impact: str = typer.Argument(..., help="Impact statement."),
    caller: str = typer.Option(..., "--caller", help="Calling identity (must be the borrower)."),
) -> None:
    """Record the impact of a disbursed loan (once)."""
    ledger = _open(ctx)
    _finish(ctx, ledger, ledger.record_loan_impact(caller, request_id, impact))


@app.command("withdraw")
def withdraw_cmd(
    ctx: typer.Context,
    amount: int = typer.Argument(..., help="Amount to withdraw."),
    recipient: str = typer.Argument(..., help="Recipient identity."),
    caller: str = typer.Option(..., "--caller", help="Calling identity (must be governance)."),
) -> None:
    """Withdraw treasury funds to a recipient."""
    ledger = _open(ctx)
    _finish(ctx, ledger, ledger.withdraw_treasury_funds(caller, amount, recipient))


@app.command("show")
def show_cmd(ctx: typer.Context) -> None:
    """Print ledger counters, thresholds and registered identities."""
    ledger = _open(ctx)
    doc = ledger.state.dump()
    doc.pop("disbursed_loans", None)
    doc["transfers"] = ledger.sink.dump()
    _emit(doc)


@app.command("loan")
def loan_cmd(
    ctx: typer.Context,
    request_id: int = typer.Argument(..., help="Request id to look up."),
) -> None:
    """Print the loan record for a request id."""
    ledger = _open(ctx)
    rec = ledger.get_loan_details(request_id)
    if rec is None:
        _emit({"request_id": request_id, "loan": None})
        raise typer.Exit(1)
    _emit({"request_id": request_id, "loan": rec.to_dict()})


@app.command("config")
def config_cmd() -> None:
    """Print the effective configuration (file + environment)."""
    typer.echo(config_mod.pretty())


@app.callback()
def main(
    ctx: typer.Context,
    state: str = typer.Option(DEFAULT_STATE, "--state", help="Path of the JSON state file."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    """Loan disbursement ledger devnet CLI."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"state": state}


if __name__ == "__main__":
    app()
