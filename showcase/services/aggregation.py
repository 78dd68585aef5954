"""
Aggregation Engine — cumulative statistics over completed submissions.

Input is one materialized list of immutable snapshots (see
``submission_store.list_completed_snapshots``); the engine never queries the
database, so every sub-result is computed over the same submission set.

Outputs (single pass):
    - cost analysis:    projects with a parseable total_construction_cost, sum, mean
    - category / type:  histograms; empty values fall into "Unspecified"
    - suppliers:        full frequency ranking of non-empty supplier names

Ordering: count descending, ties by first-seen order.

Usage:
    from showcase.services.aggregation import aggregate

    report = aggregate(snapshots)
    report.to_dict(top_n=10)
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable

UNSPECIFIED = "Unspecified"

_CURRENCY_CODE = re.compile(r"^\s*USD\s*|\s*USD\s*$", re.IGNORECASE)
_NOISE = re.compile(r"[\s$€£¥,_']")
# Up to 999 trillion; exponent notation is not an amount.
_PLAIN_AMOUNT = re.compile(r"^\d{1,15}(\.\d+)?$")


def parse_cost(raw) -> Decimal | None:
    """Parse a free-text construction cost, or return None if it is not a usable amount.

    Currency symbols, thousands separators, whitespace and a leading/trailing
    ``USD`` are ignored. What remains must be a plain non-negative decimal
    with at most 15 integer digits; exponent forms, NaN and Infinity are
    rejected.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, Decimal)):
        text = str(raw)
    elif isinstance(raw, str):
        text = _NOISE.sub("", _CURRENCY_CODE.sub("", raw))
    else:
        return None
    if not _PLAIN_AMOUNT.match(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def _number(value: Decimal):
    """Render a Decimal as int when integral, float otherwise (JSON-friendly)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# ═════════════════════════════════════════════════════════════════════════════
# Result types
# ═════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class RankedEntry:
    name: str
    count: int

    def to_dict(self) -> dict:
        return {"name": self.name, "count": self.count}


@dataclass(frozen=True)
class CostAnalysis:
    projects_with_cost: int = 0
    total_spent: Decimal = Decimal(0)

    @property
    def average_cost(self) -> Decimal:
        if not self.projects_with_cost:
            return Decimal(0)
        return self.total_spent / self.projects_with_cost

    def to_dict(self) -> dict:
        return {
            "totalSpent": _number(self.total_spent),
            "averageCost": _number(self.average_cost),
            "projectsWithCost": self.projects_with_cost,
        }


@dataclass(frozen=True)
class CumulativeReport:
    total: int = 0
    cost_analysis: CostAnalysis = field(default_factory=CostAnalysis)
    by_category: tuple[RankedEntry, ...] = ()
    by_type: tuple[RankedEntry, ...] = ()
    suppliers: tuple[RankedEntry, ...] = ()

    @property
    def has_data(self) -> bool:
        return self.total > 0

    def top_suppliers(self, top_n: int | None = None) -> tuple[RankedEntry, ...]:
        if top_n is None:
            return self.suppliers
        return self.suppliers[:max(top_n, 0)]

    def to_dict(self, top_n: int | None = 10) -> dict:
        return {
            "hasData": self.has_data,
            "total": self.total,
            "costAnalysis": self.cost_analysis.to_dict(),
            "byCategory": [e.to_dict() for e in self.by_category],
            "byType": [e.to_dict() for e in self.by_type],
            "topSuppliers": [e.to_dict() for e in self.top_suppliers(top_n)],
        }


EMPTY_REPORT = CumulativeReport()


# ═════════════════════════════════════════════════════════════════════════════
# Engine
# ═════════════════════════════════════════════════════════════════════════════


def _bucket(value) -> str:
    if value is None:
        return UNSPECIFIED
    text = str(value).strip()
    return text or UNSPECIFIED


def _ranked(counter: Counter) -> tuple[RankedEntry, ...]:
    # Counter keeps insertion order; sorted() is stable, so ties stay first-seen.
    ordered = sorted(counter.items(), key=lambda item: -item[1])
    return tuple(RankedEntry(name, count) for name, count in ordered)


def aggregate(snapshots: Iterable) -> CumulativeReport:
    """Compute the cumulative report over completed submission snapshots."""
    total = 0
    projects_with_cost = 0
    total_spent = Decimal(0)
    categories: Counter = Counter()
    types: Counter = Counter()
    suppliers: Counter = Counter()

    for snap in snapshots:
        total += 1

        cost = parse_cost(snap.get("total_construction_cost"))
        if cost is not None:
            projects_with_cost += 1
            total_spent += cost

        categories[_bucket(snap.get("project_category"))] += 1
        types[_bucket(snap.get("project_type"))] += 1

        for supplier in snap.manufacturers_suppliers.values():
            name = (supplier or "").strip()
            if name:
                suppliers[name] += 1

    if not total:
        return EMPTY_REPORT

    return CumulativeReport(
        total=total,
        cost_analysis=CostAnalysis(projects_with_cost, total_spent),
        by_category=_ranked(categories),
        by_type=_ranked(types),
        suppliers=_ranked(suppliers),
    )
