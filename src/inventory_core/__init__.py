# Inventory reconciliation engine for hospitality venues
# Pure functions over already-fetched rows; no I/O happens in this package

from .parsers import ItemNameNormalizer, TimestampParser, normalize_name, names_match
from .units import (
    KeywordClass,
    ServingNormalizer,
    ServingRules,
    infer_container_ml,
    servings_to_containers,
)
from .records import (
    CatalogItem,
    ClosedOrder,
    DailySummary,
    FinancialTotals,
    ItemSummary,
    Movement,
    MovementType,
    ReceivedCost,
    ReceivedItem,
    ReconciliationOutput,
    SaleRecord,
    StockLevel,
)
from .quality import DataQualityChecker, DataQualityIssue, DataQualityReport
from .reconciliation import MatchReport, ReconciliationEngine
from .rollup import compute_daily_summaries
from .financials import compute_financials
from .engine import reconcile
from .analysis import (
    compute_key_metrics,
    describe_movement,
    filter_item_summaries,
    format_qty_compact,
    movement_log,
)
from .insights import InsightGenerator, InventoryHealthReport

__all__ = [
    "ItemNameNormalizer",
    "TimestampParser",
    "normalize_name",
    "names_match",
    "KeywordClass",
    "ServingNormalizer",
    "ServingRules",
    "infer_container_ml",
    "servings_to_containers",
    "CatalogItem",
    "ClosedOrder",
    "DailySummary",
    "FinancialTotals",
    "ItemSummary",
    "Movement",
    "MovementType",
    "ReceivedCost",
    "ReceivedItem",
    "ReconciliationOutput",
    "SaleRecord",
    "StockLevel",
    "DataQualityChecker",
    "DataQualityIssue",
    "DataQualityReport",
    "MatchReport",
    "ReconciliationEngine",
    "compute_daily_summaries",
    "compute_financials",
    "reconcile",
    "compute_key_metrics",
    "describe_movement",
    "filter_item_summaries",
    "format_qty_compact",
    "movement_log",
    "InsightGenerator",
    "InventoryHealthReport",
]
