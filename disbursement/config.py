from __future__ import annotations
"""
disbursement.config: configuration for the loan disbursement ledger

Covers:
- Initial disbursement bounds of a freshly created ledger
- Chain constants: the reserved native-currency sentinel principal and the
  identity the ledger itself uses as sender/recipient of treasury transfers
- Approval backend: an explicit approve/revoke map ("static") or distinct
  endorser counting against a threshold ("endorsements")

Environment overrides (all optional; sensible defaults provided):

  # Bounds (smallest currency unit)
  DISB_MIN_DISBURSEMENT_AMOUNT=100
  DISB_MAX_DISBURSEMENT_AMOUNT=1000000

  # Chain constants
  DISB_NATIVE_TOKEN_SENTINEL=SP000000000000000000002Q6VF78
  DISB_LEDGER_IDENTITY=contract

  # Approval backend and, for "endorsements", the distinct endorsers required
  DISB_APPROVAL_MODE=static
  DISB_ENDORSEMENT_THRESHOLD=1

You can also load from a JSON or YAML file via `DISB_CONFIG_FILE=/path/to/config.(json|yaml|yml)`.
File values override defaults; environment overrides the file.
"""


from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional
import json
import os
from pathlib import Path

import yaml

NATIVE_TOKEN_SENTINEL = "SP000000000000000000002Q6VF78"

APPROVAL_MODES = ("static", "endorsements")


# -------------------------- Data classes --------------------------


@dataclass
class DisbursementLimits:
    """Inclusive bounds applied to a single disbursement amount."""
    min_disbursement_amount: int = 100
    max_disbursement_amount: int = 1_000_000

    def validate(self) -> None:
        if self.min_disbursement_amount <= 0:
            raise ValueError("min_disbursement_amount must be positive.")
        if self.max_disbursement_amount <= self.min_disbursement_amount:
            raise ValueError(
                "max_disbursement_amount must be greater than min_disbursement_amount "
                f"(got min={self.min_disbursement_amount}, max={self.max_disbursement_amount})."
            )


@dataclass
class ChainParams:
    """Chain-level identities the ledger compares against."""
    native_token_sentinel: str = NATIVE_TOKEN_SENTINEL
    ledger_identity: str = "contract"

    def validate(self) -> None:
        if not self.native_token_sentinel.strip():
            raise ValueError("native_token_sentinel must be non-empty.")
        if not self.ledger_identity.strip():
            raise ValueError("ledger_identity must be non-empty.")


@dataclass
class DisbursementConfig:
    """Top-level configuration container."""
    limits: DisbursementLimits = field(default_factory=DisbursementLimits)
    chain: ChainParams = field(default_factory=ChainParams)
    approval_mode: str = "static"
    endorsement_threshold: int = 1

    def validate(self) -> None:
        self.limits.validate()
        self.chain.validate()
        if self.approval_mode not in APPROVAL_MODES:
            raise ValueError(
                f"approval_mode must be one of {APPROVAL_MODES} (got {self.approval_mode!r})."
            )
        if self.endorsement_threshold <= 0:
            raise ValueError("endorsement_threshold must be positive.")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------------------------- Loaders --------------------------


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except ValueError as e:
        raise ValueError(f"Invalid int for {name}: {v!r}") from e


def _getenv_str(name: str, default: str) -> str:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    return v.strip()


def from_env(base: Optional[DisbursementConfig] = None, prefix: str = "DISB_") -> DisbursementConfig:
    """
    Build a DisbursementConfig from environment variables, optionally layering on top of `base`.
    """
    cfg = base or DisbursementConfig()

    new_cfg = DisbursementConfig(
        limits=DisbursementLimits(
            min_disbursement_amount=_getenv_int(
                f"{prefix}MIN_DISBURSEMENT_AMOUNT", cfg.limits.min_disbursement_amount
            ),
            max_disbursement_amount=_getenv_int(
                f"{prefix}MAX_DISBURSEMENT_AMOUNT", cfg.limits.max_disbursement_amount
            ),
        ),
        chain=ChainParams(
            native_token_sentinel=_getenv_str(
                f"{prefix}NATIVE_TOKEN_SENTINEL", cfg.chain.native_token_sentinel
            ),
            ledger_identity=_getenv_str(f"{prefix}LEDGER_IDENTITY", cfg.chain.ledger_identity),
        ),
        approval_mode=_getenv_str(f"{prefix}APPROVAL_MODE", cfg.approval_mode),
        endorsement_threshold=_getenv_int(
            f"{prefix}ENDORSEMENT_THRESHOLD", cfg.endorsement_threshold
        ),
    )
    new_cfg.validate()
    return new_cfg


def from_file(path: str | os.PathLike[str]) -> DisbursementConfig:
    """
    Load configuration from a JSON or YAML file.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    limits = data.get("limits", {})
    chain = data.get("chain", {})
    defaults = DisbursementConfig()

    cfg = DisbursementConfig(
        limits=DisbursementLimits(
            min_disbursement_amount=int(
                limits.get("min_disbursement_amount", defaults.limits.min_disbursement_amount)
            ),
            max_disbursement_amount=int(
                limits.get("max_disbursement_amount", defaults.limits.max_disbursement_amount)
            ),
        ),
        chain=ChainParams(
            native_token_sentinel=str(
                chain.get("native_token_sentinel", defaults.chain.native_token_sentinel)
            ),
            ledger_identity=str(chain.get("ledger_identity", defaults.chain.ledger_identity)),
        ),
        approval_mode=str(data.get("approval_mode", defaults.approval_mode)),
        endorsement_threshold=int(data.get("endorsement_threshold", defaults.endorsement_threshold)),
    )
    cfg.validate()
    return cfg


def load() -> DisbursementConfig:
    """
    Load configuration using the following precedence:
      1) File at $DISB_CONFIG_FILE (JSON/YAML)
      2) Environment variables (DISB_*), applied on top of defaults or file values
    """
    file_path = os.getenv("DISB_CONFIG_FILE")
    base = from_file(file_path) if file_path else DisbursementConfig()
    return from_env(base=base)


# -------------------------- Utilities --------------------------


def pretty(cfg: Optional[DisbursementConfig] = None) -> str:
    """Return a human-readable JSON string of the current config."""
    obj = (cfg or load()).to_dict()
    return json.dumps(obj, indent=2, sort_keys=True)


__all__ = [
    "NATIVE_TOKEN_SENTINEL",
    "APPROVAL_MODES",
    "DisbursementLimits",
    "ChainParams",
    "DisbursementConfig",
    "from_env",
    "from_file",
    "load",
    "pretty",
]
