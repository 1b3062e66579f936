from __future__ import annotations

from typing import Dict, List

import pandas as pd

from core.data import PERFORMANCE_CATEGORIES, sorted_unique
from core.filters import ALL, FilterSelection, dimension_text


def _column(df: pd.DataFrame, col: str) -> pd.Series:
    if col not in df.columns:
        return pd.Series(dtype=object)
    return df[col]


def derive_options(productivity: pd.DataFrame, filters: FilterSelection) -> Dict[str, List[str]]:
    """Dropdown choices, narrowed team -> route -> salesman.

    Months, weeks and teams always come from the full dataset; routes follow the
    selected team and salesmen follow both team and route.
    """
    team = _column(productivity, "team").map(dimension_text)
    route = _column(productivity, "route_no").map(dimension_text)

    in_team = team.eq(filters.team) if filters.team != ALL else pd.Series(True, index=team.index)
    in_route = route.eq(filters.route_no) if filters.route_no != ALL else pd.Series(True, index=route.index)

    return {
        "months": sorted_unique(_column(productivity, "month")),
        "weeks": sorted_unique(_column(productivity, "week")),
        "teams": sorted_unique(team),
        "routes": sorted_unique(route[in_team]),
        "salesmen": sorted_unique(_column(productivity, "salesman_name")[in_team & in_route]),
        "categories": list(PERFORMANCE_CATEGORIES),
    }
