"""
Daily rollup of stock movements and POS sales.

Every movement and sale contributes one row to a contribution frame keyed by
calendar date; the frame is then grouped by day. Records are keyed by their
raw item name here, so rows that match no catalog item still count.

Sales-table quantities and sale movements are both added to "sold" at this
level, unlike the per-item view which picks one source.
"""

from datetime import date
import logging

import pandas as pd

from .records import DailySummary, Movement, MovementType, ReceivedItem, SaleRecord


logger = logging.getLogger(__name__)

_COLUMNS = ["date", "name", "is_purchase", "received", "sold", "adjustments"]


def _movement_rows(movements: list[Movement]) -> list[dict]:
    rows = []
    for m in movements:
        if m.created_at is None:
            continue
        rows.append(
            {
                "date": m.created_at.date(),
                "name": m.item_name,
                "is_purchase": m.type is MovementType.PURCHASE,
                "received": abs(m.qty) if m.type is MovementType.PURCHASE else 0.0,
                "sold": abs(m.qty) if m.type is MovementType.SALE else 0.0,
                # Sign preserved: adjustments can remove stock
                "adjustments": m.qty if m.type is MovementType.ADJUSTMENT else 0.0,
            }
        )
    return rows


def _sale_rows(sales: list[SaleRecord]) -> list[dict]:
    return [
        {
            "date": s.sold_at.date(),
            "name": s.item_name,
            "is_purchase": False,
            "received": 0.0,
            "sold": s.quantity,
            "adjustments": 0.0,
        }
        for s in sales
        if s.sold_at is not None
    ]


def build_contributions(
    movements: list[Movement], sales: list[SaleRecord]
) -> pd.DataFrame:
    """
    One row per dated movement or sale.

    Columns: date, name, is_purchase, received, sold, adjustments. Movements
    come first, in input order, followed by sales.
    """
    rows = _movement_rows(movements) + _sale_rows(sales)
    skipped = len(movements) + len(sales) - len(rows)
    if skipped:
        logger.warning("%s records without a timestamp left out of daily rollup", skipped)

    df = pd.DataFrame(rows, columns=_COLUMNS)
    df["is_purchase"] = df["is_purchase"].astype(bool)
    for col in ("received", "sold", "adjustments"):
        df[col] = df[col].astype(float)
    return df


def _received_items_by_date(contrib: pd.DataFrame) -> dict[date, tuple[ReceivedItem, ...]]:
    # Zero-quantity purchases are still listed
    received = contrib[contrib["is_purchase"]]
    if len(received) == 0:
        return {}

    # sort=False keeps names in the order they were first received that day
    grouped = received.groupby(["date", "name"], sort=False)["received"].sum()

    result: dict[date, list[ReceivedItem]] = {}
    for (day, name), qty in grouped.items():
        result.setdefault(day, []).append(ReceivedItem(name=name, qty=float(qty)))
    return {day: tuple(items) for day, items in result.items()}


def compute_daily_summaries(
    movements: list[Movement], sales: list[SaleRecord]
) -> list[DailySummary]:
    """
    Group movements and sales by calendar day, newest day first.

    Per day:
    - received: absolute purchase quantities (also itemized by name)
    - sold: absolute sale-movement quantities plus raw POS quantities
    - adjustments: signed adjustment quantities
    - net_change: received - sold + adjustments

    Transfers, spillage and unknown movement types open a day but add nothing.
    """
    contrib = build_contributions(movements, sales)
    if len(contrib) == 0:
        return []

    totals = contrib.groupby("date", sort=False)[["received", "sold", "adjustments"]].sum()
    received_items = _received_items_by_date(contrib)

    summaries = [
        DailySummary(
            date=day,
            received=float(row["received"]),
            sold=float(row["sold"]),
            adjustments=float(row["adjustments"]),
            received_items=received_items.get(day, ()),
        )
        for day, row in totals.iterrows()
    ]

    return sorted(summaries, key=lambda s: s.date, reverse=True)
