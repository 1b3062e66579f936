from __future__ import annotations

import io
import logging
import os
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd
import requests

from core.filters import FilterSelection, apply_filters, dimension_text, normalize_filters

logger = logging.getLogger(__name__)

SHEET_ID = os.getenv("SALES_SHEET_ID", "1CoP63WfylZnQesUKZqbd21zGXlYQBzwl3aemE3AwESs")
BASE_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={sheet}"
DATA_DIR = Path(os.getenv("SALES_DATA_DIR")) if os.getenv("SALES_DATA_DIR") else None
FETCH_TIMEOUT = float(os.getenv("SALES_FETCH_TIMEOUT", "30"))

PRODUCTIVITY_SHEET = "Productivity_Data"
PERFORMANCE_SHEET = "Performance_Data"
CATEGORY_BILLED_SHEET = "Category_Billed_Outlets"

DIMENSION_COLUMNS = ["date", "month", "week", "team", "route_no", "salesman_name"]

PRODUCTIVITY_NUMERIC = [
    "outlets_assigned",
    "outlets_billed",
    "pjp_planned",
    "pjp_followed",
    "line_productivity",
    "call_productivity",
    "average_bill_value",
    "average_daily_sales",
]
PERFORMANCE_NUMERIC = ["sales_value", "monthly_target"]
CATEGORY_BILLED_NUMERIC = ["outlets_billed"]

# kind -> (text columns, numeric columns)
RECORD_KINDS: Dict[str, tuple] = {
    "productivity": (DIMENSION_COLUMNS, PRODUCTIVITY_NUMERIC),
    "performance": (DIMENSION_COLUMNS + ["category"], PERFORMANCE_NUMERIC),
    "category_billed": (DIMENSION_COLUMNS + ["category"], CATEGORY_BILLED_NUMERIC),
}

PERFORMANCE_CATEGORIES = ["TOTAL", "FLOUR", "OIL", "FOCUS", "RICE"]


class DataFetchError(RuntimeError):
    """Raised when a source sheet cannot be downloaded or parsed."""


def _squash(name: object) -> str:
    return re.sub(r"[\s_]+", "", str(name)).lower()


_CANONICAL = {
    _squash(col): col
    for cols in (DIMENSION_COLUMNS, ["category"], PRODUCTIVITY_NUMERIC, PERFORMANCE_NUMERIC)
    for col in cols
}


def canonical_column(header: object) -> str:
    return _CANONICAL.get(_squash(header), str(header).strip())


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col]
            if not pd.api.types.is_numeric_dtype(series):
                series = series.astype(str).str.replace(",", "", regex=False).str.strip()
            df[col] = pd.to_numeric(series, errors="coerce").replace([np.inf, -np.inf], np.nan).fillna(0.0).astype(float)
    return df


def count_non_numeric(df: pd.DataFrame, cols: Iterable[str]) -> int:
    """Cells that are present but would not parse as numbers."""
    total = 0
    for col in cols:
        if col not in df.columns:
            continue
        raw = df[col]
        text = raw.astype(str).str.replace(",", "", regex=False).str.strip()
        parsed = pd.to_numeric(text, errors="coerce")
        blank = raw.isna() | text.eq("") | text.str.lower().isin({"nan", "none"})
        total += int((parsed.isna() & ~blank).sum())
    return total


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col].map(dimension_text)
            df[col] = series.replace({"nan": "", "None": "", "<NA>": ""})
    return df


def frame_from_records(rows: Any, kind: str) -> pd.DataFrame:
    """Build a canonical frame for one record kind from loosely-typed rows.

    `rows` may be a list of dicts or a DataFrame with sheet-style headers. The input
    is never modified.
    """
    text_cols, numeric_cols = RECORD_KINDS[kind]
    if isinstance(rows, pd.DataFrame):
        df = rows.copy()
    else:
        df = pd.DataFrame([dict(r) for r in (rows or [])])
    df = df.rename(columns={c: canonical_column(c) for c in df.columns})
    df = df.loc[:, ~df.columns.duplicated()]
    dq_non_numeric = count_non_numeric(df, numeric_cols)
    if isinstance(rows, pd.DataFrame):
        dq_non_numeric += int(rows.attrs.get("dq_non_numeric", 0))
    for col in text_cols:
        if col not in df.columns:
            df[col] = ""
    for col in numeric_cols:
        if col not in df.columns:
            df[col] = 0.0
    df = coerce_str_safe(df, text_cols)
    df = numericize(df, numeric_cols)
    df = df[text_cols + numeric_cols + [c for c in df.columns if c not in text_cols and c not in numeric_cols]]
    df = df.reset_index(drop=True)
    df.attrs["dq_non_numeric"] = dq_non_numeric
    return df


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_pct(value: object, decimals: int = 1) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{float(value):.{decimals}f}%"


def format_amount(value: object, decimals: int = 0) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{float(value):,.{decimals}f}"


def sorted_unique(values: Iterable[object]) -> List[str]:
    """Distinct non-empty values, lexicographically sorted."""
    return sorted({dimension_text(v) for v in values} - {""})


# ---------------- Compute helpers ----------------
def col_sum(df: pd.DataFrame, col: str) -> float:
    if df.empty or col not in df.columns:
        return 0.0
    return float(pd.to_numeric(df[col], errors="coerce").fillna(0).sum())


def col_mean(df: pd.DataFrame, col: str) -> float:
    if df.empty or col not in df.columns:
        return 0.0
    return col_sum(df, col) / len(df)


def pct(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when the denominator is not positive."""
    return (numerator / denominator) * 100 if denominator > 0 else 0.0


# ---------------- Loaders ----------------
def sheet_url(sheet: str, sheet_id: str = SHEET_ID) -> str:
    return BASE_URL.format(sheet_id=sheet_id, sheet=sheet)


def fetch_sheet_csv(sheet: str, *, sheet_id: str = SHEET_ID, data_dir: Optional[Path] = DATA_DIR) -> pd.DataFrame:
    if data_dir is not None:
        path = Path(data_dir) / f"{sheet}.csv"
        logger.info("Reading sheet %s from %s", sheet, path)
        try:
            return pd.read_csv(path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
            raise DataFetchError(f"Could not read {sheet} from {path}") from exc

    url = sheet_url(sheet, sheet_id)
    logger.info("Fetching sheet %s", sheet)
    try:
        resp = requests.get(url, timeout=FETCH_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise DataFetchError(f"Failed to fetch {sheet} from Google Sheets") from exc
    if not resp.text.strip():
        return pd.DataFrame()
    try:
        return pd.read_csv(io.StringIO(resp.text), dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (UnicodeDecodeError, pd.errors.ParserError) as exc:
        raise DataFetchError(f"Could not parse {sheet} CSV") from exc


def load_productivity(**kwargs: Any) -> pd.DataFrame:
    return frame_from_records(fetch_sheet_csv(PRODUCTIVITY_SHEET, **kwargs), "productivity")


def load_performance(**kwargs: Any) -> pd.DataFrame:
    return frame_from_records(fetch_sheet_csv(PERFORMANCE_SHEET, **kwargs), "performance")


def load_category_billed(**kwargs: Any) -> pd.DataFrame:
    return frame_from_records(fetch_sheet_csv(CATEGORY_BILLED_SHEET, **kwargs), "category_billed")


def build_snapshot(
    productivity: Any,
    performance: Any,
    category_billed: Any,
    *,
    source: str = "memory",
) -> Dict[str, Any]:
    """Wrap three datasets (row dicts or frames) into a snapshot dict."""
    prod = frame_from_records(productivity, "productivity")
    perf = frame_from_records(performance, "performance")
    cat = frame_from_records(category_billed, "category_billed")
    return {
        "source": source,
        "loaded_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "productivity": prod,
        "performance": perf,
        "category_billed": cat,
        "months": sorted_unique(prod["month"]),
    }


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(sheet_id: str, data_dir: Optional[str]) -> Dict[str, Any]:
    kwargs = {"sheet_id": sheet_id, "data_dir": Path(data_dir) if data_dir else None}
    prod = load_productivity(**kwargs)
    perf = load_performance(**kwargs)
    cat = load_category_billed(**kwargs)
    for name, df in [("productivity", prod), ("performance", perf), ("category_billed", cat)]:
        logger.debug("%s: %d rows, %d non-numeric cells coerced to 0", name, len(df), df.attrs.get("dq_non_numeric", 0))
    return build_snapshot(prod, perf, cat, source=data_dir or sheet_id)


def load_dashboard_data(force_refresh: bool = False) -> Dict[str, Any]:
    if force_refresh:
        _load_dashboard_data_cached.cache_clear()
    return _load_dashboard_data_cached(SHEET_ID, str(DATA_DIR) if DATA_DIR is not None else None)


def prepare_context(filters: Mapping[str, Any] | FilterSelection, data_ctx: Mapping[str, Any]) -> Dict[str, Any]:
    filt = filters if isinstance(filters, FilterSelection) else normalize_filters(filters)
    productivity: pd.DataFrame = data_ctx.get("productivity", pd.DataFrame())
    performance: pd.DataFrame = data_ctx.get("performance", pd.DataFrame())
    category_billed: pd.DataFrame = data_ctx.get("category_billed", pd.DataFrame())

    months = data_ctx.get("months")
    if months is None:
        months = sorted_unique(productivity["month"]) if "month" in productivity.columns else []

    return {
        "filters": filt,
        "productivity": productivity,
        "performance": performance,
        "category_billed": category_billed,
        "filtered_productivity": apply_filters(productivity, filt),
        "filtered_performance": apply_filters(performance, filt),
        "filtered_category_billed": apply_filters(category_billed, filt),
        "months": list(months),
    }
