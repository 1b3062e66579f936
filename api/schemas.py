from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ThresholdsModel(BaseModel):
    billed_pct: float = 80.0
    pjp_pct: float = 80.0
    achievement_pct: float = 100.0


class FilterSelectionModel(BaseModel):
    month: str = "All"
    week: str = "All"
    team: str = "All"
    route_no: str = "All"
    salesman: str = "All"
    category: str = "TOTAL"
    thresholds: ThresholdsModel = Field(default_factory=ThresholdsModel)


class OptionsResponse(BaseModel):
    months: List[str]
    weeks: List[str]
    teams: List[str]
    routes: List[str]
    salesmen: List[str]
    categories: List[str]


class InsightPromptResponse(BaseModel):
    prompt: str
    inputs: dict
