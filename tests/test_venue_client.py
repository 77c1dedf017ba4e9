from datetime import datetime

import pytest

from venue_clients.venue_client import SnapshotFetchError, VenueSnapshotLoader


def test_load_all_validates_every_source(snapshot_dir):
    snapshot = VenueSnapshotLoader(snapshot_dir()).load_all()

    [item] = snapshot.catalog_items
    assert item.current_stock == 3.5

    [movement] = snapshot.movements
    assert movement.item_id == "itm-1"
    assert movement.item_name == "Absolut Vodka 70cl"
    assert movement.to_location_name == "Main Store"
    assert movement.type.value == "purchase"
    assert movement.created_at == datetime(2024, 1, 1, 10)

    assert [s.id for s in snapshot.sales] == ["s-1"]
    assert set(snapshot.quality_reports) == {"catalog", "movements", "sales", "orders", "receipts"}


def test_only_closed_orders_and_approved_receipts(snapshot_dir):
    snapshot = VenueSnapshotLoader(snapshot_dir()).load_all()
    assert [o.id for o in snapshot.closed_orders] == ["o-1"]
    assert [r.id for r in snapshot.received_costs] == ["r-1"]


def test_rows_without_status_are_assumed_filtered(snapshot_dir):
    path = snapshot_dir(**{"orders.json": [{"id": "o-9", "total_amount": 12}]})
    assert [o.id for o in VenueSnapshotLoader(path).load_closed_orders()[0]] == ["o-9"]


def test_snapshot_reconciles(snapshot_dir):
    output = VenueSnapshotLoader(snapshot_dir()).load_all().reconcile()
    [summary] = output.items
    assert summary.total_received == 6
    assert summary.total_sold == pytest.approx(2 * 30 / 700)
    assert output.financials.revenue == 40
    assert output.financials.cost == 90


def test_malformed_rows_degrade_instead_of_failing(snapshot_dir):
    path = snapshot_dir(
        **{
            "stock_movements.json": [
                {"id": "mv-1", "movement_type": "purchase", "qty": None, "item_name": "Gin", "created_at": "2024-01-01"},
                {"id": "mv-2", "movement_type": "sale", "qty": "abc", "item_name": "Gin", "created_at": "nope"},
                {"movement_type": "purchase", "qty": 5, "item_name": "Gin"},
                "not a row",
            ]
        }
    )
    movements, report = VenueSnapshotLoader(path).load_movements()

    assert [m.id for m in movements] == ["mv-1", "mv-2"]
    assert all(m.qty == 0 for m in movements)
    assert movements[1].created_at is None

    issue_types = {i.issue_type for i in report.issues}
    assert {"rejected", "non_numeric", "unparsed_timestamp"} <= issue_types
    rejected = next(i for i in report.issues if i.issue_type == "rejected")
    assert rejected.count == 2


def test_rows_wrapper_is_accepted(snapshot_dir):
    path = snapshot_dir(**{"sales.json": {"rows": [{"id": "s-7", "item_name": "Gin", "quantity": 1}]}})
    sales, _ = VenueSnapshotLoader(path).load_sales()
    assert [s.id for s in sales] == ["s-7"]


def test_missing_export_raises_fetch_error(snapshot_dir):
    path = snapshot_dir(**{"sales.json": None})
    with pytest.raises(SnapshotFetchError, match="sales"):
        VenueSnapshotLoader(path).load_all()


def test_invalid_json_raises_fetch_error(snapshot_dir):
    path = snapshot_dir()
    (path / "orders.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotFetchError, match="not valid JSON"):
        VenueSnapshotLoader(path).load_closed_orders()
