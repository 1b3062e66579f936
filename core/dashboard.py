from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Mapping

from core.data import prepare_context
from core.filters import FilterSelection
from core.metrics_categories import compute_categories
from core.metrics_overview import compute_overview
from core.metrics_performers import compute_performers
from core.metrics_routes import compute_routes
from core.metrics_trend import compute_trend
from core.options import derive_options


def compute_dashboard(filters: Mapping[str, Any] | FilterSelection, data_ctx: Mapping[str, Any]) -> Dict[str, Any]:
    """Recompute every derived view for one snapshot and filter selection."""
    ctx = prepare_context(filters, data_ctx)
    f: FilterSelection = ctx["filters"]
    return {
        "filters": asdict(f),
        "options": derive_options(ctx["productivity"], f),
        "overview": compute_overview(f, ctx),
        "trend": compute_trend(f, ctx),
        "categories": compute_categories(f, ctx),
        "performers": compute_performers(f, ctx),
        "routes": compute_routes(f, ctx),
    }
