from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.data import col_mean, col_sum, pct
from core.filters import FilterSelection, dimension_text

ROUTE_CATEGORY = "TOTAL"


def _first_or_dash(rows: pd.DataFrame, col: str) -> str:
    if rows.empty or col not in rows.columns:
        return "-"
    return dimension_text(rows[col].iloc[0]) or "-"


def summarize_routes(filtered_productivity: pd.DataFrame, filtered_performance: pd.DataFrame) -> List[Dict[str, Any]]:
    prod = filtered_productivity
    if prod.empty or "route_no" not in prod.columns:
        return []
    prod_routes = prod["route_no"].map(dimension_text)

    perf = filtered_performance
    if not perf.empty and {"route_no", "category"}.issubset(perf.columns):
        perf = perf[perf["category"].map(dimension_text).eq(ROUTE_CATEGORY)]
        perf_routes = perf["route_no"].map(dimension_text)
    else:
        perf = perf.iloc[0:0]
        perf_routes = pd.Series(dtype=object)

    out: List[Dict[str, Any]] = []
    for route in sorted(prod_routes.unique()):
        r_prod = prod[prod_routes.eq(route)]
        r_perf = perf[perf_routes.eq(route)] if not perf.empty else perf
        assigned = col_sum(r_prod, "outlets_assigned")
        out.append(
            {
                "route_no": route,
                # routes are assumed single-team, single-salesman; first row wins
                "team": _first_or_dash(r_prod, "team"),
                "salesman": _first_or_dash(r_prod, "salesman_name"),
                "assigned": assigned,
                "billed_pct": pct(col_sum(r_prod, "outlets_billed"), assigned),
                "pjp_pct": pct(col_sum(r_prod, "pjp_followed"), col_sum(r_prod, "pjp_planned")),
                "call_prod": col_mean(r_prod, "call_productivity"),
                "line_prod": col_mean(r_prod, "line_productivity"),
                "avg_bill": col_mean(r_prod, "average_bill_value"),
                "achievement": pct(col_sum(r_perf, "sales_value"), col_sum(r_perf, "monthly_target")),
            }
        )
    return out


def compute_routes(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    t = filters.thresholds
    routes = summarize_routes(
        ctx.get("filtered_productivity", pd.DataFrame()),
        ctx.get("filtered_performance", pd.DataFrame()),
    )
    for row in routes:
        row["billed_on_track"] = row["billed_pct"] >= t.billed_pct
        row["pjp_on_track"] = row["pjp_pct"] >= t.pjp_pct
        row["achievement_on_track"] = row["achievement"] >= t.achievement_pct
    return {"filters": asdict(filters), "routes": routes}
