from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.data import sorted_unique
from core.filters import FilterSelection, dimension_text
from core.metrics_categories import DISPLAY_CATEGORIES


def compute_debug(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    datasets = ["productivity", "performance", "category_billed"]
    frames = {name: ctx.get(name, pd.DataFrame()) for name in datasets}
    payload: Dict[str, Any] = {
        "filters": asdict(filters),
        "row_counts": {name: int(len(df)) for name, df in frames.items()},
        "filtered_row_counts": {
            name: int(len(ctx.get(f"filtered_{name}", pd.DataFrame()))) for name in datasets
        },
        "coerced_non_numeric": {name: int(df.attrs.get("dq_non_numeric", 0)) for name, df in frames.items()},
        "months": list(ctx.get("months", []) or []),
        "weeks": [],
        "unmapped_categories": [],
    }

    prod = frames["productivity"]
    if not prod.empty and "week" in prod.columns:
        payload["weeks"] = sorted_unique(prod["week"])

    cat = frames["category_billed"]
    if not cat.empty and "category" in cat.columns:
        known = {c.lower() for c in DISPLAY_CATEGORIES}
        labels = cat["category"].map(dimension_text)
        unmapped = labels[~labels.str.lower().isin(known) & labels.ne("")]
        if not unmapped.empty:
            counts = unmapped.value_counts()
            payload["unmapped_categories"] = [
                {"category": str(label), "rows": int(n)} for label, n in counts.items()
            ]
    return payload
