"""Adaptive budgeting engine: monthly metrics, category budgets, pacing and insights."""

from . import (
    categories,
    engine,
    features,
    insights,
    metrics,
    progress,
    session,
    settings,
    summarize,
    synth,
    utils,
    viz,
)
from .engine import BudgetEngine, build_report
from .session import BudgetSession

__all__ = [
    "BudgetEngine",
    "BudgetSession",
    "build_report",
    "categories",
    "engine",
    "features",
    "insights",
    "metrics",
    "progress",
    "session",
    "settings",
    "summarize",
    "synth",
    "utils",
    "viz",
]
