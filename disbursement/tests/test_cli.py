from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from disbursement.cli.ledger import app
from disbursement.tests import BORROWER, GOV, RECIPIENT, STRANGER

runner = CliRunner()


@pytest.fixture
def state_file(tmp_path):
    return str(tmp_path / "ledger.json")


def _run(state_file, *args):
    return runner.invoke(app, ["--state", state_file, *args])


def _json(result):
    return json.loads(result.stdout)


def _disburse_args(**kw):
    opts = {
        "--caller": GOV,
        "--borrower": BORROWER,
        "--amount": "500",
        "--request-id": "1",
        "--height": "10",
        "--schedule": "30",
        "--impact": "Impact data",
    }
    opts.update(kw)
    out = ["disburse"]
    for k, v in opts.items():
        out += [k, v]
    return out


@pytest.fixture
def funded_state(state_file):
    assert _run(state_file, "init").exit_code == 0
    assert _run(state_file, "register", "governance", GOV, "--caller", GOV).exit_code == 0
    res = _run(state_file, "fund", "10000", "--caller", GOV)
    assert res.exit_code == 0, res.output
    assert _json(res) == {"ok": True, "value": 10_000}
    return state_file


def test_full_flow(funded_state):
    assert _run(funded_state, "approve", "1").exit_code == 0

    res = _run(funded_state, *_disburse_args())
    assert res.exit_code == 0, res.output
    assert _json(res) == {"ok": True, "value": True}

    res = _run(funded_state, "record-impact", "1", "classroom built", "--caller", BORROWER)
    assert res.exit_code == 0, res.output

    res = _run(funded_state, "withdraw", "1000", RECIPIENT, "--caller", GOV)
    assert res.exit_code == 0, res.output

    shown = _json(_run(funded_state, "show"))
    assert shown["treasury_balance"] == 8_500
    assert shown["total_disbursed"] == 500
    assert shown["disbursement_count"] == 1
    assert shown["transfers"]["native"][-1] == {
        "amount": 1_000, "from": "contract", "to": RECIPIENT,
    }

    loan = _json(_run(funded_state, "loan", "1"))["loan"]
    assert loan["borrower"] == BORROWER
    assert loan["impact_recorded"] is True


def test_rejection_exits_1_and_leaves_state_untouched(funded_state):
    before = open(funded_state, encoding="utf-8").read()
    res = _run(funded_state, *_disburse_args())  # not approved
    assert res.exit_code == 1
    assert _json(res) == {"ok": False, "error": "INSUFFICIENT_ENDORSEMENTS", "code": 1001}
    assert open(funded_state, encoding="utf-8").read() == before

    res = _run(funded_state, "pause", "--caller", STRANGER)
    assert res.exit_code == 1
    assert _json(res)["error"] == "UNAUTHORIZED"


def test_explain_reports_first_failure(funded_state):
    _run(funded_state, "pause", "--caller", GOV)
    res = _run(funded_state, *_disburse_args(), "--explain")
    assert res.exit_code == 0, res.output
    doc = _json(res)
    assert doc["would_fail_with"] == "DISBURSEMENT_PAUSED"
    assert [c["check"] for c in doc["checks"]][0] == "not_paused"

    _run(funded_state, "pause", "--caller", GOV, "--resume")
    _run(funded_state, "approve", "1")
    assert _json(_run(funded_state, *_disburse_args(), "--explain"))["would_fail_with"] is None
    # a dry run never disburses
    assert _json(_run(funded_state, "show"))["disbursement_count"] == 0


def test_set_limits_applies_max_first(funded_state):
    res = _run(funded_state, "set-limits", "--caller", GOV, "--min", "2000000", "--max", "3000000")
    assert res.exit_code == 0, res.output
    shown = _json(_run(funded_state, "show"))
    assert shown["min_disbursement_amount"] == 2_000_000
    assert shown["max_disbursement_amount"] == 3_000_000


def test_missing_state_file(state_file):
    res = _run(state_file, "show")
    assert res.exit_code == 2


def test_init_refuses_to_overwrite(state_file):
    assert _run(state_file, "init").exit_code == 0
    assert _run(state_file, "init").exit_code == 2
    assert _run(state_file, "init", "--force").exit_code == 0


def test_unknown_slot(state_file):
    _run(state_file, "init")
    assert _run(state_file, "register", "oracle", GOV, "--caller", GOV).exit_code == 2


def test_missing_loan_exits_1(funded_state):
    res = _run(funded_state, "loan", "42")
    assert res.exit_code == 1
    assert _json(res)["loan"] is None


def test_config_command_honours_env(monkeypatch):
    monkeypatch.setenv("DISB_MAX_DISBURSEMENT_AMOUNT", "5000")
    res = runner.invoke(app, ["config"])
    assert res.exit_code == 0
    assert _json(res)["limits"]["max_disbursement_amount"] == 5_000


def test_endorsement_mode_flow(state_file, monkeypatch):
    monkeypatch.setenv("DISB_APPROVAL_MODE", "endorsements")
    monkeypatch.setenv("DISB_ENDORSEMENT_THRESHOLD", "2")
    _run(state_file, "init")
    _run(state_file, "register", "governance", GOV, "--caller", GOV)
    _run(state_file, "fund", "10000", "--caller", GOV)

    assert _run(state_file, "approve", "1").exit_code == 2

    doc = _json(_run(state_file, "endorse", "1", "--endorser", "ST.A"))
    assert doc == {"request_id": 1, "endorsements": 1, "threshold": 2, "approved": False}
    assert _run(state_file, *_disburse_args()).exit_code == 1

    doc = _json(_run(state_file, "endorse", "1", "--endorser", "ST.B"))
    assert doc["approved"] is True
    res = _run(state_file, *_disburse_args())
    assert res.exit_code == 0, res.output


def test_endorse_needs_endorsement_mode(funded_state):
    assert _run(funded_state, "endorse", "1", "--endorser", "ST.A").exit_code == 2


@pytest.mark.parametrize(
    "section, value",
    [
        ("approvals", ["not", "a", "map"]),
        ("approvals", {"one": True}),
        ("transfers", {"native": [{"amount": 5}]}),
    ],
)
def test_corrupt_collaborator_section_exits_2(funded_state, section, value):
    with open(funded_state, encoding="utf-8") as fh:
        doc = json.load(fh)
    doc[section] = value
    with open(funded_state, "w", encoding="utf-8") as fh:
        json.dump(doc, fh)
    res = _run(funded_state, "show")
    assert res.exit_code == 2
    assert not isinstance(res.exception, (KeyError, ValueError, AttributeError, TypeError))
