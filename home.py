from __future__ import annotations

import streamlit as st

from tracker.config import get_settings
from tracker.db import get_conn
from tracker.services.demo_data import migrate
from tracker.state import get_state
from tracker.utils import format_money

st.title("🧾 Shop Tracker")
st.caption("Sales, stock and expenses for a small apparel shop. Every sale moves inventory; returns and edits put it back.")

settings = get_settings()
conn = get_conn(settings.db_path)
migrate(conn)
state = get_state(conn, settings)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")
    st.write(f"**Negative stock allowed:** {'yes' if settings.allow_negative_stock else 'no'}")

c1, c2, c3 = st.columns(3)
c1.metric("Products", f"{len(state.products)}")
c2.metric("Recent sales", f"{len(state.sales)}")
c3.metric("7-day profit", format_money(state.summary_7d.profit if state.summary_7d else 0, settings.currency))

low = state.low_stock()
if low:
    st.warning("Low stock: " + ", ".join(f"{p['name']} ({p['qty_on_hand']} left)" for p in low))

st.info(
    "Record sales in **🛒 Quick Sale**, costs in **💸 Add Expense**, and fix mistakes in **🧾 History**. "
    "Use **🧪 Data Management** to export CSV or load demo data.",
    icon="ℹ️",
)
