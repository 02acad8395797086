from __future__ import annotations

"""
Prometheus metrics for the loan disbursement ledger.

We expose counters, a histogram and a gauge covering:
- disbursements: successful disbursements by currency
- rejections: rejected operations by operation and error kind
- governance: governance-gate actions by action and result
- impact: impact records written
- amounts: distribution of disbursed amounts
- treasury: current treasury balance

This module is dependency-light and can be mounted into any ASGI app via the
helper at the bottom.
"""


from typing import Optional

from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Gauge, Histogram, generate_latest)

# Use a dedicated registry so embedding apps can choose to merge or expose it directly.
REGISTRY = CollectorRegistry()

# ────────────────────────────────────────────────────────────────────────────────
# Label conventions
#   currency: "STX" | "SIP010"
#   operation: "disburse" | "record_impact" | "<governance action>"
#   kind: lowercase ErrorKind name, e.g. "invalid_amount"
#   result: "ok" | "rejected"
# ────────────────────────────────────────────────────────────────────────────────

DISBURSEMENTS = Counter(
    "disbursement_loans_disbursed_total",
    "Total successful loan disbursements by currency.",
    labelnames=("currency",),
    registry=REGISTRY,
)

REJECTIONS = Counter(
    "disbursement_rejections_total",
    "Total rejected ledger operations by operation and error kind.",
    labelnames=("operation", "kind"),
    registry=REGISTRY,
)

GOVERNANCE_ACTIONS = Counter(
    "disbursement_governance_actions_total",
    "Total governance-gate calls by action and result.",
    labelnames=("action", "result"),
    registry=REGISTRY,
)

IMPACT_RECORDS = Counter(
    "disbursement_impact_records_total",
    "Total loan impact records written.",
    registry=REGISTRY,
)

DISBURSED_AMOUNT = Histogram(
    "disbursement_amount_units",
    "Distribution of disbursed amounts (smallest currency unit).",
    buckets=(
        100,
        250,
        500,
        1_000,
        2_500,
        5_000,
        10_000,
        25_000,
        50_000,
        100_000,
        250_000,
        500_000,
        1_000_000,
    ),
    registry=REGISTRY,
)

TREASURY_BALANCE = Gauge(
    "disbursement_treasury_balance_units",
    "Current treasury balance (smallest currency unit).",
    registry=REGISTRY,
)

# ────────────────────────────────────────────────────────────────────────────────
# Recording helpers
# ────────────────────────────────────────────────────────────────────────────────


def record_disbursement(currency: str, amount: int, balance_after: int) -> None:
    """Count a successful disbursement and observe its amount."""
    DISBURSEMENTS.labels(currency=currency).inc()
    if amount >= 0:
        DISBURSED_AMOUNT.observe(float(amount))
    TREASURY_BALANCE.set(balance_after)


def record_rejection(operation: str, kind: str) -> None:
    REJECTIONS.labels(operation=operation, kind=kind).inc()


def record_governance(action: str, ok: bool) -> None:
    GOVERNANCE_ACTIONS.labels(action=action, result="ok" if ok else "rejected").inc()


def record_impact() -> None:
    IMPACT_RECORDS.inc()


def set_treasury_balance(balance: int) -> None:
    TREASURY_BALANCE.set(balance)


# ────────────────────────────────────────────────────────────────────────────────
# ASGI mounting helper
# ────────────────────────────────────────────────────────────────────────────────


def make_prometheus_asgi_app(registry: Optional[CollectorRegistry] = None):
    """
    Return a minimal ASGI app that serves Prometheus metrics at '/'.
    No external web framework required.
    """
    reg = registry or REGISTRY

    async def app(scope, receive, send):  # type: ignore[override]
        if scope["type"] != "http" or (scope.get("path") or "/") != "/":
            await send({"type": "http.response.start", "status": 404, "headers": []})
            await send({"type": "http.response.body", "body": b"Not Found"})
            return
        payload = generate_latest(reg)
        headers = [
            (b"content-type", CONTENT_TYPE_LATEST.encode("ascii")),
            (b"cache-control", b"no-cache, no-store, must-revalidate"),
        ]
        await send({"type": "http.response.start", "status": 200, "headers": headers})
        await send({"type": "http.response.body", "body": payload})

    return app


__all__ = [
    "REGISTRY",
    "DISBURSEMENTS",
    "REJECTIONS",
    "GOVERNANCE_ACTIONS",
    "IMPACT_RECORDS",
    "DISBURSED_AMOUNT",
    "TREASURY_BALANCE",
    "record_disbursement",
    "record_rejection",
    "record_governance",
    "record_impact",
    "set_treasury_balance",
    "make_prometheus_asgi_app",
]
