from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.data import col_mean, col_sum, pct
from core.filters import FilterSelection, dimension_text
from core.insights import insight_inputs


def compute_kpis(
    filtered_productivity: pd.DataFrame,
    filtered_performance: pd.DataFrame,
    category: str,
) -> Dict[str, float]:
    prod = filtered_productivity
    total_assigned = col_sum(prod, "outlets_assigned")
    total_billed = col_sum(prod, "outlets_billed")
    pjp_planned = col_sum(prod, "pjp_planned")
    pjp_followed = col_sum(prod, "pjp_followed")

    perf = filtered_performance
    if not perf.empty and "category" in perf.columns:
        perf = perf[perf["category"].map(dimension_text).eq(category)]
    else:
        perf = perf.iloc[0:0]
    actual_sales = col_sum(perf, "sales_value")
    target_sales = col_sum(perf, "monthly_target")

    # pending and billed % are not clamped; billed can exceed assigned in source data
    return {
        "total_assigned": total_assigned,
        "total_billed": total_billed,
        "billed_pct": pct(total_billed, total_assigned),
        "pjp_planned": pjp_planned,
        "pjp_followed": pjp_followed,
        "pjp_pct": pct(pjp_followed, pjp_planned),
        "avg_call_prod": col_mean(prod, "call_productivity"),
        "avg_line_prod": col_mean(prod, "line_productivity"),
        "avg_bill_val": col_mean(prod, "average_bill_value"),
        "avg_daily_sales": col_mean(prod, "average_daily_sales"),
        "actual_sales": actual_sales,
        "target_sales": target_sales,
        "sales_achievement_pct": pct(actual_sales, target_sales),
        "pending_outlets": total_assigned - total_billed,
    }


def compute_overview(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    prod: pd.DataFrame = ctx.get("filtered_productivity", pd.DataFrame())
    perf: pd.DataFrame = ctx.get("filtered_performance", pd.DataFrame())
    kpis = compute_kpis(prod, perf, filters.category)
    return {
        "filters": asdict(filters),
        "kpis": kpis,
        "insight_inputs": insight_inputs(kpis),
        "row_counts": {
            "productivity": int(len(prod)),
            "performance": int(len(perf)),
            "category_billed": int(len(ctx.get("filtered_category_billed", pd.DataFrame()))),
        },
    }
