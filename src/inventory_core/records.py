"""
Typed records for the engine's inputs and outputs.

Input rows come from the store's query layer and are loosely typed: numbers
arrive as strings or nulls, timestamps in several shapes, and nested joins
use the store's table names as keys. The pydantic models below validate rows
once, at the ingestion boundary, coercing malformed fields to zero/absent so
the engine can assume total, well-typed inputs.

Outputs are plain frozen dataclasses, recomputed wholesale on every run.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

import pandas as pd
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .parsers import TimestampParser


_timestamps = TimestampParser()


def _to_float(value: Any) -> float:
    """Number-ish value -> float; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if pd.isna(result):
        return 0.0
    return result


def _to_text(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value)


def _to_optional_text(value: Any) -> str | None:
    text = _to_text(value)
    return text or None


class MovementType(str, Enum):
    """Typed cause of a stock movement."""

    PURCHASE = "purchase"
    SALE = "sale"
    ADJUSTMENT = "adjustment"
    TRANSFER = "transfer"
    SPILLAGE = "spillage"


class InputRecord(BaseModel):
    """Base for all input rows: read-only, tolerant of extra columns."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # ids come back as uuids or ints depending on the table
        if v is None or v == "":
            raise ValueError("id is required")
        return str(v)


class StockLevel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    location_id: str | None = None
    quantity: float = 0.0

    @field_validator("location_id", mode="before")
    @classmethod
    def coerce_location(cls, v):
        return _to_optional_text(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v):
        return _to_float(v)


class CatalogItem(InputRecord):
    """A stock-keeping unit tracked by name, SKU and base unit."""

    name: str = ""
    sku: str = ""
    base_unit: str = "unit"
    category: str | None = None
    stock_levels: list[StockLevel] = Field(
        default_factory=list,
        validation_alias=AliasChoices("stock_levels", "lab_ops_stock_levels"),
    )

    @field_validator("name", "sku", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _to_text(v)

    @field_validator("base_unit", mode="before")
    @classmethod
    def coerce_base_unit(cls, v):
        return _to_text(v) or "unit"

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v):
        return _to_optional_text(v)

    @field_validator("stock_levels", mode="before")
    @classmethod
    def coerce_stock_levels(cls, v):
        if not v:
            return []
        return [sl for sl in v if isinstance(sl, (dict, StockLevel))]

    @property
    def current_stock(self) -> float:
        return sum(sl.quantity for sl in self.stock_levels)


class Movement(InputRecord):
    """A single logged change to stock quantity."""

    item_id: str | None = Field(
        default=None, validation_alias=AliasChoices("item_id", "inventory_item_id")
    )
    item_name: str = ""
    type: MovementType | None = Field(
        default=None, validation_alias=AliasChoices("type", "movement_type")
    )
    qty: float = 0.0
    created_at: datetime | None = None
    created_by: str | None = None
    notes: str | None = None
    to_location_name: str | None = None

    @field_validator("item_id", "created_by", "notes", "to_location_name", mode="before")
    @classmethod
    def coerce_optional_text(cls, v):
        return _to_optional_text(v)

    @field_validator("item_name", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _to_text(v)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v):
        if isinstance(v, MovementType):
            return v
        key = _to_text(v).strip().lower()
        try:
            return MovementType(key)
        except ValueError:
            return None

    @field_validator("qty", mode="before")
    @classmethod
    def coerce_qty(cls, v):
        return _to_float(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, v):
        return _timestamps.parse(v)


class SaleRecord(InputRecord):
    """A POS sale line. May describe the same real-world sale as a movement."""

    item_name: str = ""
    quantity: float = 0.0
    total_price: float = 0.0
    sold_at: datetime | None = None
    sold_by: str | None = None

    @field_validator("item_name", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _to_text(v)

    @field_validator("sold_by", mode="before")
    @classmethod
    def coerce_optional_text(cls, v):
        return _to_optional_text(v)

    @field_validator("quantity", "total_price", mode="before")
    @classmethod
    def coerce_number(cls, v):
        return _to_float(v)

    @field_validator("sold_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, v):
        return _timestamps.parse(v)


class ClosedOrder(InputRecord):
    """A closed order. Revenue source of record when any are present."""

    total_amount: float = 0.0
    closed_at: datetime | None = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def coerce_number(cls, v):
        return _to_float(v)

    @field_validator("closed_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, v):
        return _timestamps.parse(v)


class ReceivedCost(InputRecord):
    """An approved receiving record. Cost source of record."""

    total_price: float = 0.0

    @field_validator("total_price", mode="before")
    @classmethod
    def coerce_number(cls, v):
        return _to_float(v)


# --- Outputs ---


@dataclass(frozen=True)
class ItemSummary:
    """Reconciled view of one catalog item."""

    item_id: str
    item_name: str
    sku: str
    base_unit: str
    total_received: float = 0.0
    total_sold: float = 0.0  # Always in base_unit, never raw servings
    current_stock: float = 0.0
    last_movement_at: datetime | None = None


@dataclass(frozen=True)
class ReceivedItem:
    name: str
    qty: float


@dataclass(frozen=True)
class DailySummary:
    """
    Movement and sales totals for one calendar day.

    net_change is derived on construction, so received - sold + adjustments
    always equals net_change.
    """

    date: date
    received: float = 0.0
    sold: float = 0.0
    adjustments: float = 0.0
    received_items: tuple[ReceivedItem, ...] = ()
    net_change: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(
            self, "net_change", self.received - self.sold + self.adjustments
        )


@dataclass(frozen=True)
class FinancialTotals:
    revenue: float = 0.0
    cost: float = 0.0
    net_profit: float = 0.0


@dataclass(frozen=True)
class ReconciliationOutput:
    """Everything one reconcile run produces."""

    items: tuple[ItemSummary, ...]
    daily: tuple[DailySummary, ...]
    financials: FinancialTotals

    def to_dict(self) -> dict:
        """JSON-ready dict (dates and datetimes as ISO strings)."""

        def _iso(value):
            if isinstance(value, (date, datetime)):
                return value.isoformat()
            if isinstance(value, dict):
                return {k: _iso(v) for k, v in value.items()}
            if isinstance(value, (list, tuple)):
                return [_iso(v) for v in value]
            return value

        return _iso(asdict(self))
