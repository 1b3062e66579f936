from contextlib import contextmanager
from typing import List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from core.data import DataFetchError, format_amount, format_pct, load_dashboard_data, prepare_context
from core.filters import ALL, describe_filters, normalize_filters
from core.insights import build_insight_prompt
from core.metrics_categories import compute_categories
from core.metrics_overview import compute_overview
from core.metrics_performers import compute_performers
from core.metrics_routes import compute_routes
from core.metrics_trend import compute_trend
from core.options import derive_options

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def chips_html(labels: List[str]) -> str:
    return "".join([f"<span class='chip'>{txt}</span>" for txt in labels])


def select(label: str, options: List[str], key: str, default: str = ALL) -> str:
    choices = ([ALL] if default == ALL else []) + options
    # an upstream change can drop the stored choice; fall back to the default
    if st.session_state.get(key) not in choices:
        st.session_state[key] = default if default in choices else choices[0]
    return st.selectbox(label, choices, key=key)


def render_table(rows: List[dict], pct_cols: List[str], amount_cols: Optional[List[str]] = None):
    if not rows:
        st.info("No rows for the current filters.")
        return
    display = pd.DataFrame(rows)
    for c in pct_cols:
        if c in display.columns:
            display[c] = display[c].apply(format_pct)
    for c in amount_cols or []:
        if c in display.columns:
            display[c] = display[c].apply(format_amount)
    st.dataframe(display, use_container_width=True, hide_index=True)


# ---------- UI setup ----------
st.set_page_config(page_title="BP-TT Sales Productivity Dashboard", layout="wide")
inject_base_styles()
st.title("BP-TT Sales Productivity Dashboard")
st.caption("Corporate Performance Analytics Platform")

top = st.columns([6, 2])
refresh = top[1].button("Refresh data")

try:
    data_ctx = load_dashboard_data(force_refresh=refresh)
except DataFetchError as exc:
    st.error(f"Could not load data. Please ensure the Google Sheet is accessible. ({exc})")
    st.stop()

loaded_at = data_ctx.get("loaded_at") or "Never"
top[0].markdown(f"<div class='chip-row'>{chips_html([f'Last updated: {loaded_at}'])}</div>", unsafe_allow_html=True)

productivity: pd.DataFrame = data_ctx["productivity"]
if productivity.empty:
    st.warning("The productivity sheet has no rows.")

# ----- Sidebar: cascading filters -----
with st.sidebar:
    st.markdown("### Filters")
    base = normalize_filters({"team": st.session_state.get("f_team"), "route_no": st.session_state.get("f_route")})
    opts = derive_options(productivity, base)
    month = select("Month", opts["months"], "f_month")
    week = select("Week", opts["weeks"], "f_week")
    team = select("Team", opts["teams"], "f_team")
    opts = derive_options(productivity, normalize_filters({"team": team}))
    route_no = select("Route", opts["routes"], "f_route")
    opts = derive_options(productivity, normalize_filters({"team": team, "route_no": route_no}))
    salesman = select("Salesman", opts["salesmen"], "f_salesman")
    category = select("Category", opts["categories"], "f_category", default="TOTAL")

filters = normalize_filters(
    {"month": month, "week": week, "team": team, "route_no": route_no, "salesman": salesman, "category": category}
)
ctx = prepare_context(filters, data_ctx)
st.markdown(f"<div class='chip-row'>{chips_html(describe_filters(filters))}</div>", unsafe_allow_html=True)

# ----- KPIs -----
overview = compute_overview(filters, ctx)
k = overview["kpis"]
row1 = st.columns(4)
row1[0].metric("Sales Achievement", format_pct(k["sales_achievement_pct"]), f"{format_amount(k['actual_sales'])} / {format_amount(k['target_sales'])}")
row1[1].metric("PJP Adherence", format_pct(k["pjp_pct"]), f"{format_amount(k['pjp_followed'])} of {format_amount(k['pjp_planned'])}")
row1[2].metric("Billed Outlets", format_pct(k["billed_pct"]), f"{format_amount(k['total_billed'])} of {format_amount(k['total_assigned'])}")
row1[3].metric("Pending Outlets", format_amount(k["pending_outlets"]))
row2 = st.columns(4)
row2[0].metric("Avg Daily Sales", format_amount(k["avg_daily_sales"]))
row2[1].metric("Avg Bill Value", format_amount(k["avg_bill_val"]))
row2[2].metric("Call Productivity", format_amount(k["avg_call_prod"], 1))
row2[3].metric("Line Productivity", format_amount(k["avg_line_prod"], 1))

with st.expander("Executive insight prompt"):
    st.code(build_insight_prompt(k), language=None)

# ----- Trend -----
trend = compute_trend(filters, ctx)
with card(f"Weekly trend: {trend['current_month'] or '-'} vs {trend['previous_month'] or '-'}"):
    cols = st.columns(3)
    for col, key in zip(cols, ["sales", "pjp", "billed"]):
        with col:
            st.vega_lite_chart(trend["charts"][key], use_container_width=True)

# ----- Category mix + performers -----
left, right = st.columns([1, 2])
with left:
    cats = compute_categories(filters, ctx)
    with card(f"Category billed outlets (total {format_amount(cats['total'])})"):
        if cats["charts"]:
            st.vega_lite_chart(cats["charts"]["distribution"], use_container_width=True)
        else:
            st.info("No billed outlets for the current filters.")
with right:
    perf = compute_performers(filters, ctx)
    with card("Top performers"):
        render_table(perf["top"], ["pjp_pct", "billed_pct"], ["sales", "score"])
    with card("Bottom performers"):
        render_table(perf["bottom"], ["pjp_pct", "billed_pct"], ["sales", "score"])

# ----- Routes -----
routes = compute_routes(filters, ctx)
with card("Route summary"):
    render_table(routes["routes"], ["billed_pct", "pjp_pct", "achievement"], ["assigned", "avg_bill", "call_prod", "line_prod"])
