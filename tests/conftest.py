import json

import pytest

from inventory_core.records import (
    CatalogItem,
    ClosedOrder,
    Movement,
    ReceivedCost,
    SaleRecord,
)


@pytest.fixture
def make_item():
    """Catalog item factory."""

    def _make(name, id=None, category=None, stock=(), sku="", base_unit="bottle"):
        return CatalogItem(
            id=id or name.lower().replace(" ", "-"),
            name=name,
            sku=sku,
            base_unit=base_unit,
            category=category,
            stock_levels=[{"location_id": f"loc-{i}", "quantity": q} for i, q in enumerate(stock)],
        )

    return _make


@pytest.fixture
def make_movement():
    counter = iter(range(1, 10_000))

    def _make(item_name, type, qty, created_at="2024-01-01T12:00:00", **extra):
        return Movement(
            id=f"mv-{next(counter)}",
            item_name=item_name,
            type=type,
            qty=qty,
            created_at=created_at,
            **extra,
        )

    return _make


@pytest.fixture
def make_sale():
    counter = iter(range(1, 10_000))

    def _make(item_name, quantity, total_price=0, sold_at="2024-01-01T20:00:00"):
        return SaleRecord(
            id=f"sale-{next(counter)}",
            item_name=item_name,
            quantity=quantity,
            total_price=total_price,
            sold_at=sold_at,
        )

    return _make


@pytest.fixture
def snapshot_dir(tmp_path):
    """Writes a minimal but complete set of store exports."""

    def _write(**overrides):
        files = {
            "catalog_items.json": [
                {
                    "id": "itm-1",
                    "name": "Absolut Vodka 70cl",
                    "sku": "ABS-70",
                    "base_unit": "bottle",
                    "category": "Vodka",
                    "lab_ops_stock_levels": [{"location_id": "bar", "quantity": 3.5}],
                }
            ],
            "stock_movements.json": [
                {
                    "id": "mv-1",
                    "inventory_item_id": "itm-1",
                    "movement_type": "purchase",
                    "qty": 6,
                    "created_at": "2024-01-01T10:00:00Z",
                    "lab_ops_inventory_items": {"name": "Absolut Vodka 70cl"},
                    "lab_ops_locations": {"name": "Main Store"},
                }
            ],
            "sales.json": [
                {
                    "id": "s-1",
                    "item_name": "Absolut Vodka 70cl",
                    "quantity": 2,
                    "total_price": 16,
                    "sold_at": "2024-01-01T21:00:00Z",
                }
            ],
            "orders.json": [
                {"id": "o-1", "status": "closed", "total_amount": 40, "closed_at": "2024-01-01T22:00:00Z"},
                {"id": "o-2", "status": "open", "total_amount": 25, "closed_at": None},
            ],
            "received_records.json": [
                {"id": "r-1", "status": "approved", "total_price": 90},
                {"id": "r-2", "status": "rejected", "total_price": 500},
            ],
        }
        files.update(overrides)
        for name, rows in files.items():
            if rows is None:
                continue
            (tmp_path / name).write_text(json.dumps(rows), encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def empty_inputs():
    return {
        "catalog_items": [],
        "movements": [],
        "sales": [],
        "closed_orders": [],
        "received_costs": [],
    }


@pytest.fixture
def closed_order():
    return lambda amount, id="o-1": ClosedOrder(id=id, total_amount=amount)


@pytest.fixture
def received_cost():
    return lambda price, id="r-1": ReceivedCost(id=id, total_price=price)
