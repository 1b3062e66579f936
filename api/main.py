from __future__ import annotations

import logging
import math
from typing import Any, Dict

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import FilterSelectionModel, InsightPromptResponse, OptionsResponse
from core.dashboard import compute_dashboard
from core.data import DataFetchError, load_dashboard_data, prepare_context
from core.filters import FilterSelection, normalize_filters
from core.insights import build_insight_prompt, insight_inputs
from core.metrics_categories import compute_categories
from core.metrics_debug import compute_debug
from core.metrics_overview import compute_kpis, compute_overview
from core.metrics_performers import compute_performers
from core.metrics_routes import compute_routes, summarize_routes
from core.metrics_trend import compute_trend
from core.options import derive_options


app = FastAPI(title="BP-TT Sales Productivity API", version="0.1.0")
logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

EXPORTS = {
    "productivity": "filtered_productivity",
    "performance": "filtered_performance",
    "category-billed": "filtered_category_billed",
}


def _filters_from_model(model: FilterSelectionModel) -> FilterSelection:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    status = 502 if isinstance(exc, DataFetchError) else 500
    return JSONResponse(status_code=status, content={"error": str(exc), "type": type(exc).__name__})


def _context(filters: FilterSelectionModel) -> Dict[str, Any]:
    data_ctx = load_dashboard_data()
    return prepare_context(_filters_from_model(filters), data_ctx)


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/meta/options", response_model=OptionsResponse)
def meta_options(team: str = Query(default="All"), route_no: str = Query(default="All")):
    try:
        data_ctx = load_dashboard_data()
        f = normalize_filters({"team": team, "route_no": route_no})
        return _json(derive_options(data_ctx.get("productivity", pd.DataFrame()), f))
    except Exception as exc:
        return _error("meta_options", exc)


@app.get("/meta/snapshot")
def meta_snapshot():
    try:
        data_ctx = load_dashboard_data()
        return _json(
            {
                "source": data_ctx.get("source"),
                "loaded_at": data_ctx.get("loaded_at"),
                "months": data_ctx.get("months", []),
            }
        )
    except Exception as exc:
        return _error("meta_snapshot", exc)


@app.post("/refresh")
def refresh():
    try:
        data_ctx = load_dashboard_data(force_refresh=True)
        return _json({"loaded_at": data_ctx.get("loaded_at"), "rows": int(len(data_ctx.get("productivity", [])))})
    except Exception as exc:
        return _error("refresh", exc)


@app.post("/overview")
def overview(filters: FilterSelectionModel):
    try:
        ctx = _context(filters)
        return _json(compute_overview(ctx["filters"], ctx))
    except Exception as exc:
        return _error("overview", exc)


@app.post("/trend")
def trend(filters: FilterSelectionModel):
    try:
        ctx = _context(filters)
        return _json(compute_trend(ctx["filters"], ctx))
    except Exception as exc:
        return _error("trend", exc)


@app.post("/categories")
def categories(filters: FilterSelectionModel):
    try:
        ctx = _context(filters)
        return _json(compute_categories(ctx["filters"], ctx))
    except Exception as exc:
        return _error("categories", exc)


@app.post("/performers")
def performers(filters: FilterSelectionModel):
    try:
        ctx = _context(filters)
        return _json(compute_performers(ctx["filters"], ctx))
    except Exception as exc:
        return _error("performers", exc)


@app.post("/routes")
def routes(filters: FilterSelectionModel):
    try:
        ctx = _context(filters)
        return _json(compute_routes(ctx["filters"], ctx))
    except Exception as exc:
        return _error("routes", exc)


@app.post("/dashboard")
def dashboard(filters: FilterSelectionModel):
    try:
        data_ctx = load_dashboard_data()
        return _json(compute_dashboard(_filters_from_model(filters), data_ctx))
    except Exception as exc:
        return _error("dashboard", exc)


@app.post("/insight-prompt", response_model=InsightPromptResponse)
def insight_prompt(filters: FilterSelectionModel):
    try:
        ctx = _context(filters)
        kpis = compute_kpis(ctx["filtered_productivity"], ctx["filtered_performance"], ctx["filters"].category)
        return _json({"prompt": build_insight_prompt(kpis), "inputs": insight_inputs(kpis)})
    except Exception as exc:
        return _error("insight_prompt", exc)


@app.post("/debug")
def debug(filters: FilterSelectionModel):
    try:
        ctx = _context(filters)
        return _json(compute_debug(ctx["filters"], ctx))
    except Exception as exc:
        return _error("debug", exc)


@app.post("/export/{dataset}")
def export_dataset(dataset: str, filters: FilterSelectionModel):
    try:
        ctx = _context(filters)

        filename = f"{dataset}.csv"
        if dataset == "routes":
            export_df = pd.DataFrame(summarize_routes(ctx["filtered_productivity"], ctx["filtered_performance"]))
        elif dataset in EXPORTS:
            export_df = ctx.get(EXPORTS[dataset])
        else:
            return JSONResponse(status_code=404, content={"error": f"Unknown dataset: {dataset}", "type": "NotFound"})

        if export_df is None or not hasattr(export_df, "to_csv"):
            export_df = pd.DataFrame()
        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
        return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
    except Exception as exc:
        return _error("export", exc)
