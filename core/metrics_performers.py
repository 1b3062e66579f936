from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.data import col_mean, col_sum, pct
from core.filters import FilterSelection

COHORT_SIZE = 5
SALES_SCALE = 1000.0

RANK_COLUMNS = ["name", "pjp_pct", "billed_pct", "sales", "score"]


def rank_salesmen(filtered_productivity: pd.DataFrame) -> pd.DataFrame:
    """One row per salesman, best composite score first.

    score = pjp_pct + billed_pct + sales / 1000. Ties keep first-appearance order.
    """
    df = filtered_productivity
    if df.empty or "salesman_name" not in df.columns:
        return pd.DataFrame(columns=RANK_COLUMNS)

    rows = []
    for name, group in df.groupby("salesman_name", sort=False):
        pjp_pct = pct(col_sum(group, "pjp_followed"), col_sum(group, "pjp_planned"))
        billed_pct = pct(col_sum(group, "outlets_billed"), col_sum(group, "outlets_assigned"))
        sales = col_mean(group, "average_daily_sales")
        rows.append(
            {
                "name": name,
                "pjp_pct": pjp_pct,
                "billed_pct": billed_pct,
                "sales": sales,
                "score": pjp_pct + billed_pct + sales / SALES_SCALE,
            }
        )
    ranked = pd.DataFrame(rows, columns=RANK_COLUMNS)
    return ranked.sort_values("score", ascending=False, kind="mergesort").reset_index(drop=True)


def compute_performers(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    ranked = rank_salesmen(ctx.get("filtered_productivity", pd.DataFrame()))
    top = ranked.head(COHORT_SIZE)
    # worst performer first
    bottom = ranked.tail(COHORT_SIZE).iloc[::-1]
    return {
        "filters": asdict(filters),
        "top": top.to_dict(orient="records"),
        "bottom": bottom.to_dict(orient="records"),
        "ranked_count": int(len(ranked)),
    }
