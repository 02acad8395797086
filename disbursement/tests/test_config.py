from __future__ import annotations

import json

import pytest

from disbursement import config as cfg_mod
from disbursement.contract import LoanDisbursement


def test_defaults_validate():
    cfg = cfg_mod.DisbursementConfig()
    cfg.validate()
    assert cfg.limits.min_disbursement_amount == 100
    assert cfg.limits.max_disbursement_amount == 1_000_000
    assert cfg.chain.native_token_sentinel == "SP000000000000000000002Q6VF78"
    assert cfg.chain.ledger_identity == "contract"
    assert cfg.endorsement_threshold == 1
    assert cfg.approval_mode == "static"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DISB_MIN_DISBURSEMENT_AMOUNT", "1_000")
    monkeypatch.setenv("DISB_MAX_DISBURSEMENT_AMOUNT", "50000")
    monkeypatch.setenv("DISB_LEDGER_IDENTITY", "SP.pool")
    monkeypatch.setenv("DISB_ENDORSEMENT_THRESHOLD", "3")
    cfg = cfg_mod.load()
    assert cfg.limits.min_disbursement_amount == 1_000
    assert cfg.limits.max_disbursement_amount == 50_000
    assert cfg.chain.ledger_identity == "SP.pool"
    assert cfg.endorsement_threshold == 3


def test_env_invalid_int(monkeypatch):
    monkeypatch.setenv("DISB_MIN_DISBURSEMENT_AMOUNT", "lots")
    with pytest.raises(ValueError):
        cfg_mod.load()


def test_env_inverted_bounds_rejected(monkeypatch):
    monkeypatch.setenv("DISB_MIN_DISBURSEMENT_AMOUNT", "500")
    monkeypatch.setenv("DISB_MAX_DISBURSEMENT_AMOUNT", "500")
    with pytest.raises(ValueError):
        cfg_mod.load()


def test_json_file_then_env(tmp_path, monkeypatch):
    p = tmp_path / "disb.json"
    p.write_text(json.dumps({
        "limits": {"min_disbursement_amount": 10, "max_disbursement_amount": 20_000},
        "chain": {"ledger_identity": "SP.file"},
    }))
    monkeypatch.setenv("DISB_CONFIG_FILE", str(p))
    monkeypatch.setenv("DISB_MAX_DISBURSEMENT_AMOUNT", "30000")
    cfg = cfg_mod.load()
    assert cfg.limits.min_disbursement_amount == 10
    assert cfg.limits.max_disbursement_amount == 30_000  # env wins over file
    assert cfg.chain.ledger_identity == "SP.file"
    assert cfg.chain.native_token_sentinel == cfg_mod.NATIVE_TOKEN_SENTINEL


def test_yaml_file(tmp_path):
    p = tmp_path / "disb.yaml"
    p.write_text(
        "limits:\n"
        "  min_disbursement_amount: 50\n"
        "  max_disbursement_amount: 5000\n"
        "endorsement_threshold: 2\n"
    )
    cfg = cfg_mod.from_file(p)
    assert cfg.limits.min_disbursement_amount == 50
    assert cfg.endorsement_threshold == 2


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        cfg_mod.from_file(tmp_path / "nope.json")


def test_pretty_is_json():
    doc = json.loads(cfg_mod.pretty(cfg_mod.DisbursementConfig()))
    assert doc["limits"]["max_disbursement_amount"] == 1_000_000


def test_ledger_starts_from_configured_limits():
    cfg = cfg_mod.DisbursementConfig(
        limits=cfg_mod.DisbursementLimits(min_disbursement_amount=5, max_disbursement_amount=50)
    )
    ledger = LoanDisbursement(cfg)
    assert ledger.get_min_disbursement_amount().value == 5
    assert ledger.get_max_disbursement_amount().value == 50
    ledger.reset()
    assert ledger.get_max_disbursement_amount().value == 50


def test_invalid_config_rejected_by_ledger():
    cfg = cfg_mod.DisbursementConfig(endorsement_threshold=0)
    with pytest.raises(ValueError):
        LoanDisbursement(cfg)


def test_approval_mode_from_env(monkeypatch):
    monkeypatch.setenv("DISB_APPROVAL_MODE", "endorsements")
    monkeypatch.setenv("DISB_ENDORSEMENT_THRESHOLD", "2")
    cfg = cfg_mod.load()
    assert cfg.approval_mode == "endorsements"
    assert LoanDisbursement(cfg).approvals.threshold == 2


def test_unknown_approval_mode_rejected(monkeypatch):
    monkeypatch.setenv("DISB_APPROVAL_MODE", "quorum")
    with pytest.raises(ValueError):
        cfg_mod.load()
