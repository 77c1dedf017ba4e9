"""Revenue, cost and profit from closed orders, POS sales and approved receipts."""

import logging

from .records import ClosedOrder, FinancialTotals, ReceivedCost, SaleRecord


logger = logging.getLogger(__name__)


def compute_financials(
    closed_orders: list[ClosedOrder],
    sales: list[SaleRecord],
    received_costs: list[ReceivedCost],
) -> FinancialTotals:
    """
    Derive revenue, cost and net profit.

    Closed orders are the revenue source of record. When they sum to exactly
    zero (none closed yet, or the outlet doesn't use orders) revenue falls back
    to POS sale totals. Cost is the sum of approved receiving records, which
    the caller has already filtered.
    """
    revenue = sum(o.total_amount for o in closed_orders)
    if revenue == 0:
        revenue = sum(s.total_price for s in sales)
        if sales:
            logger.debug("No closed-order revenue, using %s POS sales", len(sales))

    cost = sum(r.total_price for r in received_costs)

    return FinancialTotals(
        revenue=float(revenue),
        cost=float(cost),
        net_profit=float(revenue - cost),
    )
