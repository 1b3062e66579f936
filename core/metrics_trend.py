from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from core.charts import comparison_line_chart, to_vega_spec
from core.data import col_mean, col_sum, pct
from core.filters import ALL, FilterSelection, dimension_text

WEEK_LABELS = ["Week 1", "Week 2", "Week 3", "Week 4"]


def resolve_months(month: str, months: Sequence[str]) -> Tuple[Optional[str], Optional[str]]:
    """Current and previous month for the comparison.

    "All" resolves to the last month in `months`; the previous month is the one
    sorted immediately before it, if any.
    """
    current = (months[-1] if months else None) if month == ALL else month
    if current is None or current not in months:
        return current, None
    idx = list(months).index(current)
    return current, (months[idx - 1] if idx > 0 else None)


def _week_slice(productivity: pd.DataFrame, month: Optional[str], week: str) -> pd.DataFrame:
    if month is None or productivity.empty:
        return productivity.iloc[0:0]
    mask = productivity["month"].map(dimension_text).eq(month) & productivity["week"].map(dimension_text).eq(week)
    return productivity[mask]


def _week_values(rows: pd.DataFrame) -> Tuple[float, float, float]:
    return (
        col_mean(rows, "average_daily_sales"),
        pct(col_sum(rows, "pjp_followed"), col_sum(rows, "pjp_planned")),
        pct(col_sum(rows, "outlets_billed"), col_sum(rows, "outlets_assigned")),
    )


def compute_weekly_trend(productivity: pd.DataFrame, month: str, months: Sequence[str]) -> List[Dict[str, Any]]:
    # Unfiltered on purpose: only the month selection applies to this comparison.
    current, previous = resolve_months(month, months)
    out: List[Dict[str, Any]] = []
    for label in WEEK_LABELS:
        week = label.split(" ")[1]
        curr_sales, curr_pjp, curr_billed = _week_values(_week_slice(productivity, current, week))
        prev_sales, prev_pjp, prev_billed = _week_values(_week_slice(productivity, previous, week))
        out.append(
            {
                "name": label,
                "curr_sales": curr_sales,
                "prev_sales": prev_sales,
                "curr_pjp": curr_pjp,
                "prev_pjp": prev_pjp,
                "curr_billed": curr_billed,
                "prev_billed": prev_billed,
            }
        )
    return out


def compute_trend(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    productivity: pd.DataFrame = ctx.get("productivity", pd.DataFrame())
    months: List[str] = ctx.get("months", []) or []
    current, previous = resolve_months(filters.month, months)
    weeks = compute_weekly_trend(productivity, filters.month, months)

    weeks_df = pd.DataFrame(weeks)
    charts = {
        "sales": to_vega_spec(
            comparison_line_chart(weeks_df, "curr_sales", "prev_sales", title="Avg Daily Sales", value_format=",.0f")
        ),
        "pjp": to_vega_spec(
            comparison_line_chart(weeks_df, "curr_pjp", "prev_pjp", title="PJP Adherence %", value_format=".1f")
        ),
        "billed": to_vega_spec(
            comparison_line_chart(weeks_df, "curr_billed", "prev_billed", title="Billed Outlets %", value_format=".1f")
        ),
    }
    return {
        "filters": asdict(filters),
        "current_month": current,
        "previous_month": previous,
        "weeks": weeks,
        "charts": charts,
    }
