import math

import pytest

from core.data import frame_from_records
from core.filters import FilterSelection
from core.metrics_overview import compute_kpis, compute_overview


def test_two_route_example():
    prod = frame_from_records(
        [
            {"team": "A", "routeNo": "R1", "outletsAssigned": 10, "outletsBilled": 8, "pjpPlanned": 20, "pjpFollowed": 15},
            {"team": "A", "routeNo": "R2", "outletsAssigned": 5, "outletsBilled": 5, "pjpPlanned": 10, "pjpFollowed": 10},
        ],
        "productivity",
    )
    perf = frame_from_records([], "performance")
    kpis = compute_kpis(prod, perf, "TOTAL")
    assert kpis["total_assigned"] == 15
    assert kpis["total_billed"] == 13
    assert kpis["billed_pct"] == pytest.approx(86.667, abs=1e-3)
    assert kpis["pjp_pct"] == pytest.approx(83.333, abs=1e-3)
    assert kpis["pending_outlets"] == 2


def test_filtered_month(context_for):
    ctx = context_for(month="2025-02")
    kpis = compute_kpis(ctx["filtered_productivity"], ctx["filtered_performance"], "TOTAL")
    assert kpis["total_assigned"] == 23
    assert kpis["total_billed"] == 16
    assert kpis["billed_pct"] == pytest.approx(16 / 23 * 100)
    assert kpis["pjp_planned"] == 46
    assert kpis["pjp_followed"] == 32
    assert kpis["avg_daily_sales"] == pytest.approx((1200 + 2000 + 500) / 3)
    assert kpis["avg_call_prod"] == pytest.approx((70 + 90 + 30) / 3)
    assert kpis["avg_line_prod"] == pytest.approx((4 + 5 + 1) / 3)
    assert kpis["avg_bill_val"] == pytest.approx((120 + 150 + 50) / 3)
    assert kpis["actual_sales"] == 1500
    assert kpis["target_sales"] == 1400
    assert kpis["sales_achievement_pct"] == pytest.approx(1500 / 1400 * 100)
    assert kpis["pending_outlets"] == 7


def test_category_restricts_performance(context_for):
    ctx = context_for(month="2025-02")
    kpis = compute_kpis(ctx["filtered_productivity"], ctx["filtered_performance"], "FLOUR")
    assert kpis["actual_sales"] == 300
    assert kpis["target_sales"] == 200
    assert kpis["sales_achievement_pct"] == pytest.approx(150.0)


def test_empty_input_is_all_zero(empty_snapshot):
    kpis = compute_kpis(empty_snapshot["productivity"], empty_snapshot["performance"], "TOTAL")
    assert set(kpis.values()) == {0}
    assert len(kpis) == 14


def test_zero_denominators_are_zero():
    prod = frame_from_records([{"OutletsAssigned": 0, "OutletsBilled": 3, "PJPPlanned": 0, "PJPFollowed": 2}], "productivity")
    perf = frame_from_records([{"Category": "TOTAL", "SalesValue": 50, "MonthlyTarget": 0}], "performance")
    kpis = compute_kpis(prod, perf, "TOTAL")
    for key in ["billed_pct", "pjp_pct", "sales_achievement_pct"]:
        assert kpis[key] == 0
        assert not math.isnan(kpis[key])


def test_over_billing_is_not_clamped():
    prod = frame_from_records([{"OutletsAssigned": 5, "OutletsBilled": 8}], "productivity")
    kpis = compute_kpis(prod, frame_from_records([], "performance"), "TOTAL")
    assert kpis["billed_pct"] == pytest.approx(160.0)
    assert kpis["pending_outlets"] == -3


def test_non_numeric_cells_count_as_zero():
    prod = frame_from_records(
        [{"OutletsAssigned": "n/a", "OutletsBilled": 4, "AverageDailySales": "x"}, {"OutletsAssigned": 8, "AverageDailySales": 100}],
        "productivity",
    )
    kpis = compute_kpis(prod, frame_from_records([], "performance"), "TOTAL")
    assert kpis["total_assigned"] == 8
    assert kpis["billed_pct"] == pytest.approx(50.0)
    assert kpis["avg_daily_sales"] == pytest.approx(50.0)


def test_compute_overview_payload(context_for):
    ctx = context_for(team="A", category="TOTAL")
    payload = compute_overview(ctx["filters"], ctx)
    assert payload["filters"]["team"] == "A"
    assert payload["row_counts"] == {"productivity": 4, "performance": 4, "category_billed": 3}
    assert payload["insight_inputs"]["pending_outlets"] == payload["kpis"]["pending_outlets"]
    assert set(payload["kpis"]) >= {"billed_pct", "pjp_pct", "sales_achievement_pct"}


def test_selection_object_is_unchanged(context_for):
    ctx = context_for(month="2025-02")
    before = ctx["filters"]
    compute_overview(ctx["filters"], ctx)
    assert ctx["filters"] == before == FilterSelection(month="2025-02")
