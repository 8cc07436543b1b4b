"""
Streamlit dashboard for the sign shop back office.

Features:
- Quote builder with live cost breakdown from snapshot lines
- Service order list with status changes
- Materials and inks catalog
- Monthly dashboard and report export
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from signshop.engine import OrderStatus
from signshop.formatting import format_currency, status_label
from signshop.services.plans import PlanLimitError
from signshop.state import AppState


st.set_page_config(
    page_title="Sign Shop Manager",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_state():
    """Get cached application state."""
    return AppState.create()


try:
    state = get_state()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


def money(value: float) -> str:
    prefs = state.preferences
    return format_currency(value, prefs.currency, prefs.locale)


# ============================================================================
# SIDEBAR: Preferences
# ============================================================================
with st.sidebar:
    st.header("⚙️ Preferences")

    locales = ["pt-BR", "en"]
    locale = st.selectbox(
        "Language",
        locales,
        index=locales.index(state.preferences.locale) if state.preferences.locale in locales else 0,
    )
    if locale != state.preferences.locale:
        state.set_locale(locale)
        st.rerun()

    st.caption(f"**Currency:** {state.preferences.currency}")
    st.caption(f"**Plan:** {state.settings.shop.plan.upper()}")
    st.divider()
    st.caption(f"Default markup: {state.settings.shop.default_markup:g}%")


st.title("Sign Shop Manager")
st.caption(f"v1.0 | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3, tab4 = st.tabs(["⚡ Quote Builder", "📋 Orders", "📚 Catalog", "📊 Reports"])

materials = state.store.all('materials')
inks = state.store.all('inks')
clients = state.store.all('clients')


# ============================================================================
# TAB 1: QUOTE BUILDER
# ============================================================================
with tab1:
    if 'material_lines' not in st.session_state:
        st.session_state.material_lines = []
        st.session_state.ink_lines = []

    col1, col2 = st.columns([1.8, 1.2], gap="large")

    with col1:
        st.subheader("Add Lines")

        with st.container(border=True):
            st.markdown("##### 🧱 Material")
            material_labels = {f"{m['name']} ({m['unit']})": m['id'] for m in materials}
            choice = st.selectbox("Material", list(material_labels), key="material_pick")
            if choice:
                material = state.catalog.get_material(material_labels[choice])
                if material.unit == "m":
                    length = st.number_input("Length (m)", min_value=0.0, value=1.0, step=0.5)
                    dims = {"length_m": length}
                else:
                    c1, c2, c3 = st.columns(3)
                    dims = {
                        "width": c1.number_input("Width (m)", min_value=0.0, value=1.0, step=0.1),
                        "height": c2.number_input("Height (m)", min_value=0.0, value=1.0, step=0.1),
                        "count": c3.number_input("Count", min_value=1, value=1, step=1),
                    }
                if st.button("➕ Add Material", type="primary"):
                    st.session_state.material_lines.append(state.catalog.material_line(material.id, **dims))
                    st.rerun()

        with st.container(border=True):
            st.markdown("##### 🎨 Ink")
            ink_labels = {i['name']: i['id'] for i in inks}
            ink_choice = st.selectbox("Ink", list(ink_labels), key="ink_pick")
            ml = st.number_input("Milliliters", min_value=0.0, value=50.0, step=10.0)
            if ink_choice and st.button("➕ Add Ink"):
                st.session_state.ink_lines.append(state.catalog.ink_line(ink_labels[ink_choice], ml))
                st.rerun()

        with st.container(border=True):
            st.markdown("##### 🛠️ Labor & Pricing")
            c1, c2 = st.columns(2)
            labor_hours = c1.number_input("Labor hours", min_value=0.0, value=0.0, step=0.5)
            labor_rate = c2.number_input("Labor rate", min_value=0.0, value=0.0, step=5.0)
            c3, c4 = st.columns(2)
            extras_value = c3.number_input("Extras", min_value=0.0, value=0.0, step=1.0)
            discount_value = c4.number_input("Discount", min_value=0.0, value=0.0, step=1.0)
            c5, c6 = st.columns(2)
            markup = c5.number_input("Markup (%)", min_value=0.0, value=float(state.settings.shop.default_markup), step=5.0)
            manual_price = c6.number_input("Manual price (empty = use markup)", min_value=0.0, value=None, step=10.0)

    extras = [{"description": "Extras", "value": extras_value}] if extras_value else []
    discounts = [{"description": "Discount", "value": discount_value}] if discount_value else []
    quote_form = {
        "material_lines": [vars(line) for line in st.session_state.material_lines],
        "ink_lines": [vars(line) for line in st.session_state.ink_lines],
        "labor_hours": labor_hours,
        "labor_rate": labor_rate,
        "extras": extras,
        "discounts": discounts,
        "markup_percent": markup,
        "manual_price": manual_price,
    }
    breakdown = state.orders.preview(quote_form)

    with col2:
        st.subheader("Quote Summary")
        with st.container(border=True):
            m1, m2 = st.columns(2)
            m1.metric("Sale Price", money(breakdown.sale_price))
            m2.metric("Margin", f"{breakdown.margin_percent:.2f}%")
            st.divider()
            st.caption(f"Materials: {money(breakdown.material_cost)}")
            st.caption(f"Inks: {money(breakdown.ink_cost)}")
            st.caption(f"Labor: {money(breakdown.labor_cost)}")
            st.caption(f"Total cost: {money(breakdown.total_cost)}")
            st.caption(f"Profit: {money(breakdown.profit)}")
            for warning in breakdown.warnings:
                st.warning(warning)

            with st.expander("🔍 Calculation Details"):
                st.text(breakdown.get_trace_text())

        with st.container(border=True):
            st.markdown("##### 💾 Save as Order")
            client_labels = {c['name']: c['id'] for c in clients}
            client_choice = st.selectbox("Client", list(client_labels))
            order_name = st.text_input("Service name")
            if st.button("Save Order", type="primary", disabled=not client_choice):
                try:
                    order = state.orders.create_order({
                        **quote_form,
                        "client_id": client_labels[client_choice],
                        "name": order_name,
                    })
                    st.session_state.material_lines = []
                    st.session_state.ink_lines = []
                    st.toast(f"Order '{order.name}' saved")
                    st.rerun()
                except PlanLimitError as e:
                    st.error(str(e))
                except ValueError as e:
                    st.error(f"Could not save order: {e}")

    if st.session_state.material_lines or st.session_state.ink_lines:
        st.markdown("### 📝 Current Lines")
        rows = [{
            'Item': line.material_name,
            'Unit': line.unit,
            'Quantity': round(line.quantity, 3),
            'Snapshot Cost': line.cost_per_unit_snapshot,
        } for line in st.session_state.material_lines]
        rows += [{
            'Item': line.ink_name,
            'Unit': 'ml',
            'Quantity': line.ml,
            'Snapshot Cost': line.cost_per_liter_snapshot,
        } for line in st.session_state.ink_lines]
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
        if st.button("🗑️ Clear Lines"):
            st.session_state.material_lines = []
            st.session_state.ink_lines = []
            st.rerun()


# ============================================================================
# TAB 2: ORDERS
# ============================================================================
with tab2:
    st.subheader("📋 Service Orders")
    statuses = ["all"] + [s.value for s in OrderStatus]
    status_filter = st.selectbox(
        "Status",
        statuses,
        format_func=lambda s: "All" if s == "all" else status_label(s, state.preferences.locale),
    )
    page = state.orders.list_orders(limit=200, status=None if status_filter == "all" else status_filter)

    if page.data:
        frame = state.reports.orders_frame(page.data)
        frame['status'] = frame['status'].map(lambda s: status_label(s, state.preferences.locale))
        st.dataframe(frame.drop(columns=['id', 'client_id']), use_container_width=True, hide_index=True)

        with st.container(border=True):
            order_labels = {f"{o.name} ({o.id[:8]})": o.id for o in page.data}
            picked = st.selectbox("Order", list(order_labels))
            new_status = st.selectbox(
                "New status",
                [s.value for s in OrderStatus],
                format_func=lambda s: status_label(s, state.preferences.locale),
            )
            if st.button("Update Status"):
                state.orders.set_status(order_labels[picked], new_status)
                st.rerun()
    else:
        st.info("No service orders yet.")


# ============================================================================
# TAB 3: CATALOG
# ============================================================================
with tab3:
    c1, c2 = st.columns(2)
    with c1:
        st.subheader("🧱 Materials")
        st.dataframe(pd.DataFrame(materials, columns=['name', 'unit', 'cost_per_unit', 'supplier', 'stock']),
                     use_container_width=True, hide_index=True)
    with c2:
        st.subheader("🎨 Inks")
        st.dataframe(pd.DataFrame(inks, columns=['name', 'cost_per_liter', 'supplier', 'stock_ml']),
                     use_container_width=True, hide_index=True)


# ============================================================================
# TAB 4: REPORTS
# ============================================================================
with tab4:
    metrics = state.reports.dashboard_metrics()
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Revenue (month)", money(metrics.revenue_month))
    c2.metric("Profit (month)", money(metrics.profit_month))
    c3.metric("In Production", metrics.orders_in_production)
    c4.metric("Pending Quotes", metrics.pending_quotes)

    st.divider()
    by_month = state.reports.revenue_by_month()
    if by_month:
        st.subheader("Revenue by Month")
        st.bar_chart(pd.Series(by_month, name="Revenue"))

    top = state.reports.top_clients()
    if top:
        st.subheader("Top Clients")
        st.dataframe(pd.DataFrame(top), use_container_width=True, hide_index=True)

    try:
        csv_text = state.reports.export_csv(locale=state.preferences.locale)
        st.download_button("📥 Export CSV", data=csv_text, file_name="service-report.csv", mime="text/csv")
    except PlanLimitError as e:
        st.info(f"🔒 {e}")
