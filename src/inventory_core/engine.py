"""
The reconcile() entry point.

A pure function of five point-in-time snapshots. It performs no I/O, keeps
no state between calls and returns a new immutable result every time, so a
refresh can swap results in one assignment.
"""

from .financials import compute_financials
from .reconciliation import ReconciliationEngine
from .records import (
    CatalogItem,
    ClosedOrder,
    Movement,
    ReceivedCost,
    ReconciliationOutput,
    SaleRecord,
)
from .rollup import compute_daily_summaries
from .units import ServingNormalizer


def reconcile(
    catalog_items: list[CatalogItem],
    movements: list[Movement],
    sales: list[SaleRecord],
    closed_orders: list[ClosedOrder],
    received_costs: list[ReceivedCost],
    normalizer: ServingNormalizer | None = None,
) -> ReconciliationOutput:
    """
    Turn the five input collections into item summaries, daily summaries and
    financial totals.

    Args:
        normalizer: Serving rules for spirit conversion. Defaults to the
            built-in keyword table and settings.
    """
    engine = ReconciliationEngine(catalog_items, movements, sales, normalizer=normalizer)

    return ReconciliationOutput(
        items=tuple(engine.summarize_items()),
        daily=tuple(compute_daily_summaries(movements, sales)),
        financials=compute_financials(closed_orders, sales, received_costs),
    )
