from __future__ import annotations

"""
disbursement.version: package version string.

Resolution order:
- DISB_VERSION in the environment (packaging/CI override)
- the installed distribution metadata of `loan-disbursement-ledger`
- BASE_VERSION, for source checkouts that were never installed
"""


import os
from importlib import metadata

# Bump this on intentional releases; keep in sync with pyproject.toml.
BASE_VERSION = "0.1.0"
DIST_NAME = "loan-disbursement-ledger"


def build_version() -> str:
    env = os.getenv("DISB_VERSION")
    if env:
        return env
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = build_version()


def get_version() -> str:
    """Public helper returning the resolved version string."""
    return __version__


__all__ = ["__version__", "get_version", "BASE_VERSION", "DIST_NAME"]
