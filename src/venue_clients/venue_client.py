"""
Snapshot loader for a venue's exported store tables.

THIS FILE CONTAINS STORE-SPECIFIC LOGIC:
- File names of the JSON exports for each table
- Nested join shapes the query layer produces (item and location names)
- Status filters for closed orders and approved receiving records

The engine in inventory_core is store-agnostic. To load from a different
store, write another loader that produces the same LoadedSnapshot.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd
from pydantic import BaseModel, ValidationError

from inventory_core import settings
from inventory_core.engine import reconcile
from inventory_core.quality import DataQualityChecker, DataQualityReport
from inventory_core.records import (
    CatalogItem,
    ClosedOrder,
    Movement,
    MovementType,
    ReceivedCost,
    ReconciliationOutput,
    SaleRecord,
)
from inventory_core.units import ServingNormalizer


logger = logging.getLogger(__name__)


class SnapshotFetchError(Exception):
    """One of the input collections could not be retrieved."""


@dataclass
class LoadedSnapshot:
    """Validated point-in-time copy of all five input collections."""

    catalog_items: list[CatalogItem]
    movements: list[Movement]
    sales: list[SaleRecord]
    closed_orders: list[ClosedOrder]
    received_costs: list[ReceivedCost]
    quality_reports: dict[str, DataQualityReport] = field(default_factory=dict)

    def reconcile(self, normalizer: ServingNormalizer | None = None) -> ReconciliationOutput:
        return reconcile(
            self.catalog_items,
            self.movements,
            self.sales,
            self.closed_orders,
            self.received_costs,
            normalizer=normalizer,
        )


class VenueSnapshotLoader:
    """
    Loads and validates the JSON exports for one venue.

    Store quirks handled:
    - Movements carry the item name and destination location as nested joins
      ({"lab_ops_inventory_items": {"name": ...}})
    - Movement columns are named inventory_item_id / movement_type
    - Orders and receiving records include every status; only closed orders
      and approved receipts count
    """

    FILES = {
        "catalog": "catalog_items.json",
        "movements": "stock_movements.json",
        "sales": "sales.json",
        "orders": "orders.json",
        "receipts": "received_records.json",
    }

    def __init__(self, data_dir: Path | str | None = None):
        self.data_dir = Path(data_dir or settings.DATA_DIR)

    def load_all(self) -> LoadedSnapshot:
        """Load and validate all sources. Raises SnapshotFetchError."""
        catalog, catalog_report = self.load_catalog()
        movements, movement_report = self.load_movements()
        sales, sales_report = self.load_sales()
        orders, orders_report = self.load_closed_orders()
        receipts, receipts_report = self.load_received_costs()

        logger.info(
            "Loaded snapshot: %s items, %s movements, %s sales, %s closed orders, %s receipts",
            len(catalog),
            len(movements),
            len(sales),
            len(orders),
            len(receipts),
        )

        return LoadedSnapshot(
            catalog_items=catalog,
            movements=movements,
            sales=sales,
            closed_orders=orders,
            received_costs=receipts,
            quality_reports={
                "catalog": catalog_report,
                "movements": movement_report,
                "sales": sales_report,
                "orders": orders_report,
                "receipts": receipts_report,
            },
        )

    def _read_rows(self, key: str) -> list[dict]:
        path = self.data_dir / self.FILES[key]
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise SnapshotFetchError(f"Missing export for {key}: {path}") from e
        except json.JSONDecodeError as e:
            raise SnapshotFetchError(f"Export for {key} is not valid JSON: {path}") from e

        # Exports are either a bare list or {"rows": [...]}
        if isinstance(data, dict):
            data = data.get("rows", [])
        if not isinstance(data, list):
            raise SnapshotFetchError(f"Export for {key} is not a list of rows: {path}")
        return data

    def _validate(
        self, model: type[BaseModel], rows: list, checker: DataQualityChecker
    ) -> tuple[list, DataQualityReport]:
        """Validate rows into records; unusable rows are dropped and reported."""
        records = []
        rejected = []
        for row in rows:
            if not isinstance(row, dict):
                rejected.append(row)
                continue
            try:
                records.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "Dropping %s row %r: %s", model.__name__, row.get("id"), e.errors()[0]["msg"]
                )
                rejected.append(row.get("id"))

        if rejected:
            checker.record_rejected_rows(len(rejected), len(rows), rejected)

        frame = pd.DataFrame([r for r in rows if isinstance(r, dict)])
        return records, checker.run(frame)

    def load_catalog(self) -> tuple[list[CatalogItem], DataQualityReport]:
        """Catalog items with their nested stock levels."""
        rows = self._read_rows("catalog")
        checker = DataQualityChecker(
            "Catalog Items", required_columns=["id", "name"]
        ).check_duplicates(["id"])
        return self._validate(CatalogItem, rows, checker)

    def load_movements(self) -> tuple[list[Movement], DataQualityReport]:
        """
        Stock movements.

        Store-specific handling:
        - Item name comes from the joined inventory item
        - Destination location name comes from the joined location
        """
        rows = [self._flatten_movement(r) for r in self._read_rows("movements")]
        checker = (
            DataQualityChecker(
                "Stock Movements",
                required_columns=["id", "item_name", "type", "qty", "created_at"],
            )
            .check_duplicates(["id"])
            .check_invalid_values("type", {t.value for t in MovementType})
            .check_non_numeric("qty")
            .check_unparseable_timestamps("created_at")
        )
        return self._validate(Movement, rows, checker)

    def _flatten_movement(self, row):
        if not isinstance(row, dict):
            return row

        flat = {k: v for k, v in row.items() if not isinstance(v, dict)}
        if "inventory_item_id" in flat and "item_id" not in flat:
            flat["item_id"] = flat.pop("inventory_item_id")
        if "movement_type" in flat and "type" not in flat:
            flat["type"] = flat.pop("movement_type")

        item = row.get("lab_ops_inventory_items")
        if isinstance(item, dict) and not flat.get("item_name"):
            flat["item_name"] = item.get("name")

        location = row.get("lab_ops_locations")
        if isinstance(location, dict) and not flat.get("to_location_name"):
            flat["to_location_name"] = location.get("name")

        return flat

    def load_sales(self) -> tuple[list[SaleRecord], DataQualityReport]:
        rows = self._read_rows("sales")
        checker = (
            DataQualityChecker(
                "POS Sales", required_columns=["id", "item_name", "quantity", "sold_at"]
            )
            .check_duplicates(["id"])
            .check_non_numeric("quantity")
            .check_non_numeric("total_price")
            .check_outliers("quantity", min_val=0)
            .check_unparseable_timestamps("sold_at")
        )
        return self._validate(SaleRecord, rows, checker)

    def load_closed_orders(self) -> tuple[list[ClosedOrder], DataQualityReport]:
        """Orders with status "closed". Rows without a status are assumed pre-filtered."""
        rows = self._filter_status(self._read_rows("orders"), "closed")
        checker = DataQualityChecker(
            "Closed Orders", required_columns=["id", "total_amount"]
        ).check_non_numeric("total_amount")
        return self._validate(ClosedOrder, rows, checker)

    def load_received_costs(self) -> tuple[list[ReceivedCost], DataQualityReport]:
        """Receiving records with status "approved". Rows without a status are assumed pre-filtered."""
        rows = self._filter_status(self._read_rows("receipts"), "approved")
        checker = DataQualityChecker(
            "Received Costs", required_columns=["id", "total_price"]
        ).check_non_numeric("total_price")
        return self._validate(ReceivedCost, rows, checker)

    def _filter_status(self, rows: list, status: str) -> list:
        kept = []
        for row in rows:
            if isinstance(row, dict) and "status" in row:
                if str(row["status"] or "").strip().lower() != status:
                    continue
            kept.append(row)
        return kept
