"""LLM-powered month-in-review for the adaptive budget report.

If no API key is configured, or the model call fails, a short deterministic
summary built from the same report is returned instead.
"""

from __future__ import annotations

import logging
from typing import Any

from openai import OpenAI, OpenAIError

from . import settings, utils
from .engine import BudgetReport

logger = logging.getLogger(__name__)


def _build_prompt_from_snapshot(snapshot: dict[str, Any]) -> str:
    return f"""
You are a personal budgeting assistant writing a short month-in-review for a US consumer.
Use ~5–7 concise sentences. Be specific with numbers (currency USD, 0dp).
Avoid PII. Use category names as given.

DATA (JSON-like):
{snapshot}

Write:
1) Opening line with the month, income, expenses and savings rate.
2) How spending is pacing against the adaptive budgets for the top categories.
3) Any category whose recent spending trend departs from its history.
4) Then provide 2–3 bullet tips starting with a verb (e.g., “Trim …”, “Move …”, “Review …”) based on the data.
"""


def _build_snapshot(report: BudgetReport) -> dict[str, Any]:
    """Select the figures worth sending to the model."""

    metrics = report.get("metrics") or {}
    overview = report.get("overview") or {}
    projection = report.get("projection") or {}

    return {
        "as_of": report.get("as_of"),
        "month": overview.get("month_label"),
        "income": round(float(metrics.get("income", 0.0)), 2),
        "expenses": round(float(metrics.get("expenses", 0.0)), 2),
        "savings_rate_pct": round(float(metrics.get("savings_percentage", 0.0)), 1),
        "budget_used_pct": round(float(overview.get("budget_used_percentage", 0.0)), 1),
        "expected_pct_by_today": round(float(overview.get("expected_spending_percentage", 0.0)), 1),
        "progress": [
            {
                "category": entry["name"],
                "spent": round(entry["spent"], 2),
                "budget": round(entry["budget"], 2),
                "spent_pct": round(entry["spent_percentage"], 1),
                "pace": "over" if entry["is_over_pace"] else ("under" if entry["is_under_pace"] else "on track"),
                "trend": entry["trend_direction"],
            }
            for entry in report.get("progress", [])
        ],
        "trending": [
            {"category": item["name"], "trend_pct": round(item["trend_percentage"], 1)}
            for item in report.get("trending", [])
        ],
        "projected_annual_savings": round(float(projection.get("projected_annual_savings", 0.0)), 2)
        if projection
        else None,
    }


def _fallback_summary(report: BudgetReport) -> str:
    """Compact human-friendly summary without calling an LLM."""

    metrics = report.get("metrics")
    if metrics is None:
        return "Highlights — No transactions yet. Link an account to see your budget analysis."

    overview = report.get("overview") or {}
    month = overview.get("month_label", report.get("as_of", ""))
    text = (
        f"Highlights — In {month} you received {utils.format_currency(metrics['income'])} and spent "
        f"{utils.format_currency(metrics['expenses'])}, a savings rate of "
        f"{metrics['savings_percentage']:.1f}%."
    )

    if overview:
        text += (
            f" You have used {overview['budget_used_percentage']:.0f}% of your adaptive budget with "
            f"{overview['expected_spending_percentage']:.0f}% of the month gone."
        )

    over = [entry["name"] for entry in report.get("progress", []) if entry["is_over_pace"]]
    if over:
        text += f" Over pace: {', '.join(over)}."

    trending = report.get("trending", [])
    if trending:
        top = trending[0]
        arrow = "↑" if top["direction"] == "increasing" else "↓"
        text += f" Biggest shift: {top['name']} {arrow} {abs(top['trend_percentage']):.0f}% vs history."

    return text


def summarize_budget(
    report: BudgetReport,
    *,
    model: str = settings.LLM_MODEL,
    api_key: str | None = None,
    client: OpenAI | None = None,
) -> str:
    """Summarise a budget report with an OpenAI chat model.

    - Reads ``OPENAI_API_KEY`` from the environment when no key or client is given.
    - Falls back to a deterministic summary when there is nothing to send, no
      credentials, an empty reply, or an API error.
    """

    if report.get("metrics") is None:
        return _fallback_summary(report)

    if client is None:
        key = api_key or settings.get_openai_api_key()
        if not key:
            logger.info("OPENAI_API_KEY not configured; using fallback summary")
            return _fallback_summary(report)
        client = OpenAI(api_key=key)

    prompt = _build_prompt_from_snapshot(_build_snapshot(report))

    try:
        resp = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.2,
            max_tokens=320,
        )
    except OpenAIError as exc:
        logger.warning("LLM call failed (%s: %s); using fallback summary", type(exc).__name__, exc)
        return _fallback_summary(report)

    text = (resp.choices[0].message.content or "").strip() if resp.choices else ""
    if not text:
        logger.warning("Empty LLM response from %s; using fallback summary", model)
        return _fallback_summary(report)
    return text
