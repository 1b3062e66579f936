"""Shared fixtures: a small two-month, two-team snapshot in sheet-style headers."""

from __future__ import annotations

import pytest

from core.data import build_snapshot, prepare_context


def _prod(date, month, week, team, route, name, assigned, billed, planned, followed, line, call, bill, daily):
    return {
        "DATE": date,
        "Month": month,
        "Week": week,
        "Team": team,
        "RouteNo": route,
        "SalesmanName": name,
        "OutletsAssigned": assigned,
        "OutletsBilled": billed,
        "PJPPlanned": planned,
        "PJPFollowed": followed,
        "LineProductivity": line,
        "CallProductivity": call,
        "AverageBillValue": bill,
        "AverageDailySales": daily,
    }


def _perf(month, week, team, route, name, category, sales, target):
    return {
        "DATE": f"{month}-01",
        "Month": month,
        "Week": week,
        "Team": team,
        "RouteNo": route,
        "SalesmanName": name,
        "Category": category,
        "SalesValue": sales,
        "MonthlyTarget": target,
    }


def _cat(month, week, team, route, name, category, billed):
    return {
        "DATE": f"{month}-01",
        "Month": month,
        "Week": week,
        "Team": team,
        "RouteNo": route,
        "SalesmanName": name,
        "Category": category,
        "OutletsBilled": billed,
    }


PRODUCTIVITY_ROWS = [
    _prod("2025-01-06", "2025-01", 1, "A", "R1", "Ali", 10, 8, 20, 15, 3, 60, 100, 1000),
    _prod("2025-01-13", "2025-01", 2, "A", "R1", "Ali", 10, 6, 20, 10, 2, 50, 80, 800),
    _prod("2025-02-03", "2025-02", 1, "A", "R1", "Ali", 10, 9, 20, 18, 4, 70, 120, 1200),
    _prod("2025-02-03", "2025-02", 1, "A", "R2", "Bina", 5, 5, 10, 10, 5, 90, 150, 2000),
    _prod("2025-02-10", "2025-02", 2, "B", "R3", "Chen", 8, 2, 16, 4, 1, 30, 50, 500),
]

PERFORMANCE_ROWS = [
    _perf("2025-02", 1, "A", "R1", "Ali", "TOTAL", 900, 1000),
    _perf("2025-02", 1, "A", "R1", "Ali", "FLOUR", 300, 200),
    _perf("2025-02", 1, "A", "R2", "Bina", "TOTAL", 500, 400),
    _perf("2025-02", 2, "B", "R3", "Chen", "TOTAL", 100, 0),
    _perf("2025-01", 1, "A", "R1", "Ali", "TOTAL", 700, 1000),
]

CATEGORY_BILLED_ROWS = [
    _cat("2025-02", 1, "A", "R1", "Ali", "Flour", 3),
    _cat("2025-02", 1, "A", "R1", "Ali", "flour", 2),
    _cat("2025-02", 1, "A", "R2", "Bina", "Edible Oil", 4),
    _cat("2025-02", 2, "B", "R3", "Chen", "Rice", 0),
    _cat("2025-02", 2, "B", "R3", "Chen", "Snacks", 7),
]


@pytest.fixture
def snapshot():
    return build_snapshot(PRODUCTIVITY_ROWS, PERFORMANCE_ROWS, CATEGORY_BILLED_ROWS, source="tests")


@pytest.fixture
def empty_snapshot():
    return build_snapshot([], [], [], source="tests")


@pytest.fixture
def context_for(snapshot):
    def _make(**filters):
        return prepare_context(filters, snapshot)

    return _make
