import pandas as pd

from core.data import frame_from_records
from core.filters import FilterSelection
from core.options import derive_options


def test_unfiltered_options(snapshot):
    opts = derive_options(snapshot["productivity"], FilterSelection())
    assert opts == {
        "months": ["2025-01", "2025-02"],
        "weeks": ["1", "2"],
        "teams": ["A", "B"],
        "routes": ["R1", "R2", "R3"],
        "salesmen": ["Ali", "Bina", "Chen"],
        "categories": ["TOTAL", "FLOUR", "OIL", "FOCUS", "RICE"],
    }


def test_team_narrows_routes_and_salesmen(snapshot):
    opts = derive_options(snapshot["productivity"], FilterSelection(team="A"))
    assert opts["routes"] == ["R1", "R2"]
    assert opts["salesmen"] == ["Ali", "Bina"]
    # upstream lists ignore narrower selections
    assert opts["teams"] == ["A", "B"]
    assert opts["months"] == ["2025-01", "2025-02"]


def test_team_and_route_narrow_salesmen(snapshot):
    opts = derive_options(snapshot["productivity"], FilterSelection(team="A", route_no="R2"))
    assert opts["salesmen"] == ["Bina"]
    assert opts["routes"] == ["R1", "R2"]


def test_route_without_team(snapshot):
    opts = derive_options(snapshot["productivity"], FilterSelection(route_no="R3"))
    assert opts["routes"] == ["R1", "R2", "R3"]
    assert opts["salesmen"] == ["Chen"]


def test_narrowing_never_adds_values(snapshot):
    prod = snapshot["productivity"]
    everything = derive_options(prod, FilterSelection())
    for team in everything["teams"] + ["Nobody"]:
        narrowed = derive_options(prod, FilterSelection(team=team))
        assert set(narrowed["routes"]) <= set(everything["routes"])
        assert set(narrowed["salesmen"]) <= set(everything["salesmen"])


def test_blank_values_excluded():
    prod = frame_from_records(
        [
            {"Month": "", "Team": "A", "RouteNo": "R1", "SalesmanName": ""},
            {"Month": "2025-03", "Team": "", "RouteNo": "", "SalesmanName": "Dee"},
        ],
        "productivity",
    )
    opts = derive_options(prod, FilterSelection())
    assert opts["months"] == ["2025-03"]
    assert opts["teams"] == ["A"]
    assert opts["routes"] == ["R1"]
    assert opts["salesmen"] == ["Dee"]
    assert opts["weeks"] == []


def test_empty_dataset():
    opts = derive_options(pd.DataFrame(), FilterSelection(team="A"))
    assert opts["months"] == opts["routes"] == opts["salesmen"] == []
    assert opts["categories"] == ["TOTAL", "FLOUR", "OIL", "FOCUS", "RICE"]


def test_zero_labels_are_kept():
    # "0" is a real route/week label; only blanks are dropped
    prod = frame_from_records(
        [
            {"Week": "0", "Team": "A", "RouteNo": "0", "SalesmanName": "Ike"},
            {"Week": "1", "Team": "A", "RouteNo": "", "SalesmanName": "Jo"},
        ],
        "productivity",
    )
    opts = derive_options(prod, FilterSelection())
    assert opts["weeks"] == ["0", "1"]
    assert opts["routes"] == ["0"]
