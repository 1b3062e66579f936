"""Numeric inputs for the executive-insight text generator.

Only the summary values and the prompt text are produced here; calling a model
is left to the host application.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from core.data import round_half_up

PROMPT_TEMPLATE = """Act as a world-class executive sales analyst for BP-TT. Based on these metrics:
Sales Achievement: {sales_achievement_pct:.1f}%,
PJP Adherence: {pjp_pct:.1f}%,
Billed Outlets: {billed_pct:.1f}%,
Pending Outlets: {pending_outlets:.0f},
Avg Daily Sales: QAR {avg_daily_sales:.0f}.

Provide a concise 3-sentence executive insight following this exact structure:
Sentence 1 (Observation): What's happening - state the key metric and its current value.
Sentence 2 (Impact): Why it matters - explain the business consequence.
Sentence 3 (Action): What to do - provide clear, directive action.

Keep it highly professional, corporate, and sharp. Do not use conversational filler."""


def insight_inputs(kpis: Mapping[str, Any]) -> Dict[str, float]:
    return {
        "sales_achievement_pct": round_half_up(kpis.get("sales_achievement_pct", 0.0), 1) or 0.0,
        "pjp_pct": round_half_up(kpis.get("pjp_pct", 0.0), 1) or 0.0,
        "billed_pct": round_half_up(kpis.get("billed_pct", 0.0), 1) or 0.0,
        "pending_outlets": float(kpis.get("pending_outlets", 0.0) or 0.0),
        "avg_daily_sales": round_half_up(kpis.get("avg_daily_sales", 0.0), 0) or 0.0,
    }


def build_insight_prompt(kpis: Mapping[str, Any]) -> str:
    return PROMPT_TEMPLATE.format(**insight_inputs(kpis))
