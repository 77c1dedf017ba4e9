"""
Venue Inventory Dashboard

A Streamlit dashboard over the reconciled inventory view.
Run with: streamlit run app.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from inventory_core import settings
from inventory_core.analysis import (
    compute_key_metrics,
    filter_item_summaries,
    format_qty_compact,
    movement_log,
)
from inventory_core.logger import setup_logger
from venue_clients.refresh import RefreshController
from venue_clients.venue_client import VenueSnapshotLoader

# Page config
st.set_page_config(
    page_title="Venue Inventory",
    page_icon="🍸",
    layout="wide",
)

st.title("🍸 Venue Inventory")
st.caption(f"Snapshot source: {settings.DATA_DIR}")


@st.cache_resource
def get_controller() -> tuple[RefreshController, dict]:
    """One loader/controller per server process; the last snapshot is kept for the log views."""
    setup_logger("inventory_core")
    setup_logger("venue_clients")

    loader = VenueSnapshotLoader(settings.DATA_DIR)
    state: dict = {}

    def fetch():
        snapshot = loader.load_all()
        state["snapshot"] = snapshot
        return snapshot

    controller = RefreshController(fetch)
    controller.refresh_now()
    return controller, state


controller, state = get_controller()

# --- Refresh ---
if st.button("🔄 Refresh now"):
    if not controller.refresh_now():
        st.warning("Couldn't load the latest snapshot. Showing the previous result.")

output = controller.result
if output is None:
    st.error("No data loaded yet. Check the snapshot directory and the log.")
    st.stop()

snapshot = state["snapshot"]
metrics = compute_key_metrics(output)

# --- Key Metrics Row ---
st.header("Key Metrics")
col1, col2, col3, col4 = st.columns(4)

with col1:
    st.metric("Received", format_qty_compact(metrics["total_received"]))
with col2:
    st.metric("Sold", format_qty_compact(metrics["total_sold"]))
with col3:
    st.metric(
        "In Stock",
        format_qty_compact(metrics["total_stock"]),
        delta=f"{metrics['items_out_of_stock']} out of stock",
        delta_color="inverse",
    )
with col4:
    st.metric(
        "Net Profit",
        f"{metrics['net_profit']:,.2f}",
        delta=f"Revenue {metrics['revenue']:,.2f} / Cost {metrics['cost']:,.2f}",
    )

st.divider()

summary_tab, movements_tab, daily_tab, quality_tab = st.tabs(
    ["Item Summary", "Movement Log", "Daily Summary", "Data Quality"]
)

with summary_tab:
    search = st.text_input("Search items...", "")
    items = filter_item_summaries(list(output.items), search)

    if items:
        items_df = pd.DataFrame(
            [
                {
                    "Item": i.item_name,
                    "SKU": i.sku or "No SKU",
                    "Unit": i.base_unit,
                    "Received": i.total_received,
                    "Sold": i.total_sold,
                    "Stock": i.current_stock,
                    "Last Movement": i.last_movement_at,
                }
                for i in items
            ]
        )
        st.dataframe(
            items_df,
            use_container_width=True,
            hide_index=True,
            column_config={
                "Received": st.column_config.NumberColumn(format="%.2f"),
                "Sold": st.column_config.NumberColumn(format="%.3f"),
                "Stock": st.column_config.NumberColumn(format="%.2f"),
                "Last Movement": st.column_config.DatetimeColumn(format="MMM D"),
            },
        )
    else:
        st.info("No items match your search")

with movements_tab:
    entries = movement_log(snapshot.movements)
    if entries:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Item": e.item_name,
                        "Type": e.label,
                        "Qty": e.display_qty,
                        "Serving (ml)": e.serving_ml,
                    }
                    for e in entries
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No movements recorded")

with daily_tab:
    daily = list(output.daily)
    if daily:
        # Oldest to newest reads better on a chart
        chart_days = list(reversed(daily[:30]))
        fig_daily = go.Figure(
            data=[
                go.Bar(
                    name="Received",
                    x=[d.date for d in chart_days],
                    y=[d.received for d in chart_days],
                    marker_color="#2ecc71",
                ),
                go.Bar(
                    name="Sold",
                    x=[d.date for d in chart_days],
                    y=[-d.sold for d in chart_days],
                    marker_color="#e74c3c",
                ),
                go.Scatter(
                    name="Net",
                    x=[d.date for d in chart_days],
                    y=[d.net_change for d in chart_days],
                    mode="lines+markers",
                    marker_color="#34495e",
                ),
            ]
        )
        fig_daily.update_layout(
            barmode="relative",
            height=320,
            margin=dict(t=40, b=20, l=20, r=20),
            legend=dict(orientation="h", yanchor="bottom", y=-0.3),
        )
        st.plotly_chart(fig_daily, use_container_width=True)

        for day in daily[:30]:
            with st.expander(f"{day.date:%a, %b %d}  ·  {day.net_change:+.2f} net"):
                st.markdown(
                    f"Received **{format_qty_compact(day.received)}** · "
                    f"Sold **{format_qty_compact(day.sold)}** · "
                    f"Adjustments **{day.adjustments:+.2f}**"
                )
                for received in day.received_items:
                    st.markdown(f"- {received.name}: +{format_qty_compact(received.qty)}")
    else:
        st.info("No activity recorded")

with quality_tab:
    for report in snapshot.quality_reports.values():
        st.markdown(f"**{report.source_name}** ({report.total_rows} rows)")
        if report.issues:
            for issue in report.issues[:5]:
                icon = "🔴" if issue.severity == "critical" else "🟡" if issue.severity == "warning" else "🔵"
                st.markdown(f"{icon} {issue.column}: {issue.description}")
        else:
            st.markdown("✅ No issues found")

# --- Footer ---
st.divider()
st.caption(
    f"Items: {metrics['item_count']} | Movements: {len(snapshot.movements):,} | "
    f"Sales: {len(snapshot.sales):,} | Days: {metrics['days_with_activity']}"
)
