from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Tuple

import pandas as pd

from core.charts import donut_chart, to_vega_spec
from core.data import col_sum
from core.filters import FilterSelection, dimension_text

DISPLAY_CATEGORIES = ["Flour", "Edible Oil", "Chakki Atta", "Pulses", "Rice"]


def compute_category_distribution(filtered_category_billed: pd.DataFrame) -> Tuple[List[Dict[str, Any]], float]:
    df = filtered_category_billed
    labels = (
        df["category"].map(dimension_text).str.lower()
        if not df.empty and "category" in df.columns
        else pd.Series(dtype=object)
    )
    rows: List[Dict[str, Any]] = []
    for name in DISPLAY_CATEGORIES:
        value = col_sum(df[labels.eq(name.lower())], "outlets_billed") if not labels.empty else 0.0
        if value != 0:
            rows.append({"name": name, "value": value})
    total = float(sum(r["value"] for r in rows))
    return rows, total


def compute_categories(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    rows, total = compute_category_distribution(ctx.get("filtered_category_billed", pd.DataFrame()))
    distribution = [{**r, "share": (r["value"] / total) if total else 0.0} for r in rows]
    charts: Dict[str, Any] = {}
    if distribution:
        charts["distribution"] = to_vega_spec(donut_chart(pd.DataFrame(distribution)))
    return {
        "filters": asdict(filters),
        "distribution": distribution,
        "total": total,
        "charts": charts,
    }
