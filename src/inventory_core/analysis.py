"""
Dashboard-facing analysis over a reconciliation run.

Computes:
- Key metrics (totals across items, financials)
- Item search by name or SKU
- Movement log entries with human labels
"""

from dataclasses import dataclass

from .records import ItemSummary, Movement, MovementType, ReconciliationOutput
from .units import infer_container_ml


MOVEMENT_LABELS = {
    MovementType.PURCHASE: "Received",
    MovementType.SALE: "Sale",
    MovementType.ADJUSTMENT: "Adjustment",
    MovementType.TRANSFER: "Transfer",
    MovementType.SPILLAGE: "Spillage",
}


def compute_key_metrics(output: ReconciliationOutput) -> dict:
    """Summary metrics for the report header."""
    items = output.items
    return {
        "item_count": len(items),
        "total_received": float(sum(i.total_received for i in items)),
        "total_sold": float(sum(i.total_sold for i in items)),
        "total_stock": float(sum(i.current_stock for i in items)),
        "items_out_of_stock": len([i for i in items if i.current_stock <= 0]),
        "days_with_activity": len(output.daily),
        "revenue": output.financials.revenue,
        "cost": output.financials.cost,
        "net_profit": output.financials.net_profit,
    }


def filter_item_summaries(items: list[ItemSummary], term: str | None) -> list[ItemSummary]:
    """Case-insensitive search on item name or SKU. Empty term keeps everything."""
    if not term:
        return list(items)
    needle = term.lower()
    return [
        i for i in items
        if needle in i.item_name.lower() or needle in i.sku.lower()
    ]


def format_qty_compact(qty: float) -> str:
    """
    Compact absolute quantity for display.

    0 -> "0", 12 -> "12", 1.5 -> "1.50", 0.0429 -> "0.043"
    """
    value = float(abs(qty))
    if value == 0:
        return "0"
    if value >= 1:
        return str(int(value)) if value.is_integer() else f"{value:.2f}"
    # Up to 3 decimals for small fractional movements
    return f"{value:.3f}".rstrip("0").rstrip(".")


@dataclass(frozen=True)
class MovementLogEntry:
    movement_id: str
    item_name: str
    label: str
    display_qty: str  # Signed: "+" received, "-" sold
    serving_ml: float | None = None  # Poured volume for spirit servings


def describe_movement(movement: Movement) -> MovementLogEntry:
    """
    Label a movement for the log.

    A sale movement under one unit is a poured spirit serving; its volume is
    estimated against the container size in the item name.
    """
    qty = abs(movement.qty)
    is_serving = movement.type is MovementType.SALE and qty < 1

    if is_serving:
        label = "Spirit serving"
        serving_ml = round(qty * infer_container_ml(movement.item_name), 1)
    else:
        label = MOVEMENT_LABELS.get(movement.type, "Unknown")
        serving_ml = None

    if movement.type is MovementType.PURCHASE:
        sign = "+"
    elif movement.type is MovementType.SALE:
        sign = "-"
    else:
        sign = ""

    return MovementLogEntry(
        movement_id=movement.id,
        item_name=movement.item_name,
        label=label,
        display_qty=f"{sign}{qty:.2f}",
        serving_ml=serving_ml,
    )


def movement_log(movements: list[Movement], limit: int = 50) -> list[MovementLogEntry]:
    """Most recent movements first, undated ones last."""
    ordered = sorted(
        movements,
        key=lambda m: (m.created_at is not None, m.created_at or 0),
        reverse=True,
    )
    return [describe_movement(m) for m in ordered[:limit]]
