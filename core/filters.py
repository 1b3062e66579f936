from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

ALL = "All"
DEFAULT_CATEGORY = "TOTAL"

# selection attribute -> record column
DIMENSIONS: Dict[str, str] = {
    "month": "month",
    "week": "week",
    "team": "team",
    "route_no": "route_no",
    "salesman": "salesman_name",
}


@dataclass(frozen=True)
class Thresholds:
    billed_pct: float = 80.0
    pjp_pct: float = 80.0
    achievement_pct: float = 100.0


@dataclass(frozen=True)
class FilterSelection:
    month: str = ALL
    week: str = ALL
    team: str = ALL
    route_no: str = ALL
    salesman: str = ALL
    category: str = DEFAULT_CATEGORY
    thresholds: Thresholds = field(default_factory=Thresholds)


def dimension_text(value: object) -> str:
    """Render a dimensional cell the way it is compared against a selection."""
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


def _as_choice(value: object, default: str) -> str:
    text = dimension_text(value)
    return text if text else default


def _as_float(value: object, default: float) -> float:
    try:
        return float(value)
    except Exception:
        return default


def normalize_filters(raw: Optional[Mapping[str, Any]]) -> FilterSelection:
    raw = raw or {}
    route_no = raw.get("route_no", raw.get("routeNo"))
    t = raw.get("thresholds") or {}
    thresholds = Thresholds(
        billed_pct=_as_float(t.get("billed_pct", 80.0), 80.0),
        pjp_pct=_as_float(t.get("pjp_pct", 80.0), 80.0),
        achievement_pct=_as_float(t.get("achievement_pct", 100.0), 100.0),
    )
    return FilterSelection(
        month=_as_choice(raw.get("month"), ALL),
        week=_as_choice(raw.get("week"), ALL),
        team=_as_choice(raw.get("team"), ALL),
        route_no=_as_choice(route_no, ALL),
        salesman=_as_choice(raw.get("salesman"), ALL),
        category=_as_choice(raw.get("category"), DEFAULT_CATEGORY),
        thresholds=thresholds,
    )


def active_dimensions(filters: FilterSelection) -> Dict[str, str]:
    """Record column -> required value, for every dimension not set to "All"."""
    out: Dict[str, str] = {}
    for attr, col in DIMENSIONS.items():
        value = getattr(filters, attr)
        if value != ALL:
            out[col] = value
    return out


def record_matches(record: Mapping[str, Any], filters: FilterSelection) -> bool:
    for col, wanted in active_dimensions(filters).items():
        if dimension_text(record.get(col)) != wanted:
            return False
    return True


def apply_filters(df: pd.DataFrame, filters: FilterSelection) -> pd.DataFrame:
    """Row-wise equivalent of `record_matches` over a whole dataset."""
    if df.empty:
        return df.copy()
    mask = pd.Series(True, index=df.index)
    for col, wanted in active_dimensions(filters).items():
        if col not in df.columns:
            return df.iloc[0:0].copy()
        mask &= df[col].map(dimension_text).eq(wanted)
    return df[mask].copy()


def describe_filters(filters: FilterSelection) -> List[str]:
    labels = {
        "month": "Month",
        "week": "Week",
        "team": "Team",
        "route_no": "Route",
        "salesman": "Salesman",
    }
    chips = [f"{labels[attr]}: {getattr(filters, attr)}" for attr in DIMENSIONS if getattr(filters, attr) != ALL]
    chips.append(f"Category: {filters.category}")
    return chips
