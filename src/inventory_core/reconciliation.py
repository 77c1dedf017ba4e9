"""
Per-item reconciliation of catalog stock, movements and POS sales.

Movements and sales reference items by free-text name rather than by a
shared key, and both can describe the same real-world sale. This module
resolves names against the catalog, converts poured servings to bottle
fractions, and picks one authoritative "sold" figure per item.
"""

from dataclasses import dataclass, field
import logging

from .parsers import ItemNameNormalizer
from .records import CatalogItem, ItemSummary, Movement, MovementType, SaleRecord
from .units import ServingNormalizer


logger = logging.getLogger(__name__)


@dataclass
class MatchReport:
    """How many records from one source matched a catalog item."""

    source_name: str
    total_records: int
    matched_records: int
    unmatched_names: list[str] = field(default_factory=list)

    @property
    def unmatched_records(self) -> int:
        return self.total_records - self.matched_records

    @property
    def match_rate(self) -> float:
        if self.total_records == 0:
            return 0
        return self.matched_records / self.total_records

    def summary(self) -> dict:
        return {
            "source": self.source_name,
            "total": self.total_records,
            "matched": self.matched_records,
            "unmatched": self.unmatched_records,
            "match_rate": f"{self.match_rate:.1%}",
        }


class ReconciliationEngine:
    """
    Builds one ItemSummary per catalog item.

    For each item:
    1. Collect movements and sales whose name loosely matches the item name
    2. total_received = purchases (absolute) + positive adjustments
    3. Sold from movements = sale movements (absolute)
    4. Sold from sales = POS quantities, converted to bottle fractions for spirits
    5. Movement-derived sold wins whenever it is above zero

    Movement records already carry the post-conversion stock deduction, so
    the POS table is only a fallback for items not yet wired into movement
    logging.

    Usage:
        engine = ReconciliationEngine(catalog, movements, sales)
        summaries = engine.summarize_items()
        engine.match_report("movements").summary()
    """

    def __init__(
        self,
        catalog_items: list[CatalogItem],
        movements: list[Movement],
        sales: list[SaleRecord],
        normalizer: ServingNormalizer | None = None,
        name_matcher: ItemNameNormalizer | None = None,
    ):
        self.catalog_items = list(catalog_items)
        self.movements = list(movements)
        self.sales = list(sales)
        self.normalizer = normalizer or ServingNormalizer()
        self.name_matcher = name_matcher or ItemNameNormalizer()

    def matching_movements(self, item: CatalogItem) -> list[Movement]:
        return [m for m in self.movements if self.name_matcher.matches(m.item_name, item.name)]

    def matching_sales(self, item: CatalogItem) -> list[SaleRecord]:
        return [s for s in self.sales if self.name_matcher.matches(s.item_name, item.name)]

    def summarize_item(self, item: CatalogItem) -> ItemSummary:
        """Reconcile a single catalog item. Zero matches give an all-zero summary."""
        item_movements = self.matching_movements(item)
        item_sales = self.matching_sales(item)

        total_received = sum(
            abs(m.qty) for m in item_movements if m.type is MovementType.PURCHASE
        ) + sum(
            m.qty
            for m in item_movements
            if m.type is MovementType.ADJUSTMENT and m.qty > 0
        )

        movement_sold = sum(
            abs(m.qty) for m in item_movements if m.type is MovementType.SALE
        )

        raw_sales_qty = sum(s.quantity for s in item_sales)
        sales_sold = self.normalizer.sold_in_base_units(
            raw_sales_qty, item.name, item.category
        )

        # Movement log is authoritative whenever it recorded any sale
        total_sold = movement_sold if movement_sold > 0 else sales_sold

        timestamps = [m.created_at for m in item_movements if m.created_at is not None]

        return ItemSummary(
            item_id=item.id,
            item_name=item.name,
            sku=item.sku,
            base_unit=item.base_unit,
            total_received=float(total_received),
            total_sold=float(total_sold),
            current_stock=float(item.current_stock),
            last_movement_at=max(timestamps) if timestamps else None,
        )

    def summarize_items(self) -> list[ItemSummary]:
        """Reconcile every catalog item, in catalog order."""
        summaries = [self.summarize_item(item) for item in self.catalog_items]

        for source in ("movements", "sales"):
            report = self.match_report(source)
            if report.unmatched_records:
                logger.info(
                    "%s unmatched %s excluded from item summaries (match rate %s)",
                    report.unmatched_records,
                    source,
                    report.summary()["match_rate"],
                )

        return summaries

    def match_report(self, source: str) -> MatchReport:
        """Match statistics for "movements" or "sales"."""
        if source == "movements":
            records = self.movements
        elif source == "sales":
            records = self.sales
        else:
            raise ValueError(f"Unknown source: {source!r}")

        names = [item.name for item in self.catalog_items]
        matched = 0
        unmatched: list[str] = []
        for record in records:
            if any(self.name_matcher.matches(record.item_name, n) for n in names):
                matched += 1
            elif record.item_name not in unmatched:
                unmatched.append(record.item_name)

        return MatchReport(
            source_name=source,
            total_records=len(records),
            matched_records=matched,
            unmatched_names=unmatched,
        )
