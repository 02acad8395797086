from __future__ import annotations
"""
disbursement - loan disbursement ledger package.

This package validates and records disbursement of funds against a treasury
ledger, gated by governance registration, endorsement approval, a pause flag,
amount bounds and per-request anti-replay. Submodules are lazily imported to
keep import time minimal.

Public surface (lazily loaded):
- config, errors, metrics, version
- dtypes, ledger, adapters, contract, cli
"""


from typing import List

from .version import __version__

__all__: List[str] = [
    "__version__",
    # lazily importable subpackages/modules
    "config",
    "errors",
    "metrics",
    "dtypes",
    "ledger",
    "adapters",
    "contract",
    "cli",
]

# --- Lazy module loader (PEP 562) -------------------------------------------------
import importlib


_lazy_modules = set(__all__) - {"__version__"}


def __getattr__(name: str):
    if name in _lazy_modules:
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(set(globals().keys()) | _lazy_modules)


def get_version() -> str:
    """Return the package version string."""
    return __version__
