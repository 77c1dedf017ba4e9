from datetime import date

import pytest

from inventory_core.records import ReceivedItem
from inventory_core.rollup import build_contributions, compute_daily_summaries


def test_purchase_and_sale_on_same_day(make_movement, make_sale):
    daily = compute_daily_summaries(
        [make_movement("Vodka", "purchase", 10, created_at="2024-01-01T09:00:00")],
        [make_sale("Vodka", 2, total_price=20, sold_at="2024-01-01T21:00:00")],
    )
    assert len(daily) == 1
    day = daily[0]
    assert day.date == date(2024, 1, 1)
    assert day.received == 10
    assert day.sold == 2
    assert day.adjustments == 0
    assert day.net_change == 8
    assert day.received_items == (ReceivedItem(name="Vodka", qty=10),)


def test_sales_and_sale_movements_are_both_counted(make_movement, make_sale):
    [day] = compute_daily_summaries(
        [make_movement("Absolut Vodka 70cl", "sale", -0.05)],
        [make_sale("Absolut Vodka 70cl", 3)],
    )
    assert day.sold == pytest.approx(3.05)


def test_adjustments_keep_their_sign(make_movement):
    [day] = compute_daily_summaries(
        [
            make_movement("Gin", "adjustment", 2),
            make_movement("Gin", "adjustment", -3.5),
        ],
        [],
    )
    assert day.adjustments == -1.5
    assert day.received == 0
    assert day.net_change == -1.5


def test_transfers_and_spillage_open_a_day_without_totals(make_movement):
    [day] = compute_daily_summaries(
        [
            make_movement("Tonic", "transfer", 24, created_at="2024-01-02T10:00:00"),
            make_movement("Tonic", "spillage", -1, created_at="2024-01-02T11:00:00"),
        ],
        [],
    )
    assert day.date == date(2024, 1, 2)
    assert (day.received, day.sold, day.adjustments, day.net_change) == (0, 0, 0, 0)


def test_received_items_merged_by_name(make_movement):
    [day] = compute_daily_summaries(
        [
            make_movement("Vodka", "purchase", 6),
            make_movement("Coca-Cola", "purchase", 24),
            make_movement("Vodka", "purchase", -4),
        ],
        [],
    )
    assert day.received == 34
    assert day.received_items == (
        ReceivedItem(name="Vodka", qty=10),
        ReceivedItem(name="Coca-Cola", qty=24),
    )


def test_unmatched_names_still_count(make_sale):
    [day] = compute_daily_summaries([], [make_sale("Something Not In The Catalog", 4)])
    assert day.sold == 4


def test_sorted_newest_first(make_movement, make_sale):
    daily = compute_daily_summaries(
        [
            make_movement("Gin", "purchase", 1, created_at="2024-01-02T10:00:00"),
            make_movement("Gin", "purchase", 1, created_at="2024-01-05T10:00:00"),
        ],
        [make_sale("Gin", 1, sold_at="2024-01-03T22:00:00")],
    )
    assert [d.date for d in daily] == [date(2024, 1, 5), date(2024, 1, 3), date(2024, 1, 2)]
    assert daily[1].received_items == ()


def test_records_without_timestamps_are_skipped(make_movement, make_sale):
    daily = compute_daily_summaries(
        [make_movement("Gin", "purchase", 5, created_at=None)],
        [make_sale("Gin", 1, sold_at="garbage")],
    )
    assert daily == []


def test_net_change_invariant_holds_for_every_day(make_movement, make_sale):
    daily = compute_daily_summaries(
        [
            make_movement("Gin", "purchase", 3.3, created_at="2024-01-01T10:00:00"),
            make_movement("Gin", "sale", -0.0429, created_at="2024-01-01T22:00:00"),
            make_movement("Gin", "adjustment", -0.1, created_at="2024-01-02T02:00:00"),
        ],
        [make_sale("Gin", 7, sold_at="2024-01-02T20:00:00")],
    )
    for day in daily:
        assert day.net_change == day.received - day.sold + day.adjustments


def test_empty_inputs():
    assert compute_daily_summaries([], []) == []
    assert list(build_contributions([], []).columns) == [
        "date", "name", "is_purchase", "received", "sold", "adjustments"
    ]


def test_purchase_with_missing_qty_is_listed_as_zero(make_movement):
    [day] = compute_daily_summaries([make_movement("Tonic", "purchase", None)], [])
    assert day.received == 0
    assert day.received_items == (ReceivedItem(name="Tonic", qty=0.0),)


def test_only_purchases_are_itemized(make_movement, make_sale):
    [day] = compute_daily_summaries(
        [
            make_movement("Gin", "adjustment", 2),
            make_movement("Rum", "purchase", 4),
            make_movement("Gin", "transfer", 1),
        ],
        [make_sale("Gin", 1)],
    )
    assert day.received_items == (ReceivedItem(name="Rum", qty=4.0),)
