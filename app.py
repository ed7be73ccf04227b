from __future__ import annotations

import streamlit as st

from tracker.config import get_settings
from tracker.db import get_conn
from tracker.logging_config import configure_logging
from tracker.services.demo_data import migrate

st.set_page_config(page_title="Shop Tracker", page_icon="🧾", layout="wide")

settings = get_settings()
configure_logging(settings.log_dir, settings.log_level)
migrate(get_conn(settings.db_path))

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_📊_Dashboard.py", title="Dashboard", icon="📊"),
    st.Page("pages/2_🛒_Quick_Sale.py", title="Quick Sale", icon="🛒"),
    st.Page("pages/3_💸_Add_Expense.py", title="Add Expense", icon="💸"),
    st.Page("pages/4_👕_Products.py", title="Products", icon="👕"),
    st.Page("pages/5_📦_Restock.py", title="Restock", icon="📦"),
    st.Page("pages/6_🧾_History.py", title="History", icon="🧾"),
    st.Page("pages/7_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
