"""
Per-series analysis report and optional LLM summary.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Optional

from db import get_series_observations

from .regressions import (
    RegressionResult,
    linear_regression,
    logarithmic_regression,
    percent_change_regression,
    polynomial_regressions,
)

if TYPE_CHECKING:
    from providers.base import ChatProvider

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_INSTRUCTION = (
    "You are a data science expert. Summarize the following detailed statistical "
    "analysis results in a clear, professional manner. Comment on trends, "
    "variability, and model reliability. Also, compare the different regression "
    "analyses."
)


@dataclass
class SeriesAnalysis:
    """Every regression fit for one series."""

    series_id: str
    start: date
    end: date
    count: int
    linear: RegressionResult
    polynomials: list[RegressionResult] = field(default_factory=list)
    logarithmic: Optional[RegressionResult] = None
    percent_change: Optional[RegressionResult] = None

    def to_dict(self) -> dict:
        return {
            "seriesId": self.series_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "count": self.count,
            "linear": self.linear.to_dict(),
            "polynomials": [p.to_dict() for p in self.polynomials],
            "logarithmic": self.logarithmic.to_dict() if self.logarithmic else None,
            "percentChange": self.percent_change.to_dict() if self.percent_change else None,
        }


def analyze_series(
    series_id: str,
    points: Optional[list[tuple[date, float]]] = None,
) -> Optional[SeriesAnalysis]:
    """
    Run every regression on a series.

    Args:
        series_id: Series to analyze
        points: (date, value) pairs; read from the database when omitted

    Returns:
        SeriesAnalysis, or None if the series has fewer than two observations
    """
    if points is None:
        points = [(obs.date, obs.value) for obs in get_series_observations(series_id)]
    points = sorted(points)

    if len(points) < 2:
        logger.info(f"Not enough data to analyze series {series_id}")
        return None

    dates = [p[0] for p in points]
    values = [float(p[1]) for p in points]

    logarithmic = logarithmic_regression(dates, values)

    try:
        percent_change = percent_change_regression(values)
    except ValueError as e:
        logger.info(f"Skipping percent change fit for {series_id}: {e}")
        percent_change = None

    return SeriesAnalysis(
        series_id=series_id,
        start=dates[0],
        end=dates[-1],
        count=len(points),
        linear=linear_regression(dates, values),
        polynomials=polynomial_regressions(dates, values),
        logarithmic=logarithmic,
        percent_change=percent_change,
    )


def build_summary_prompt(analysis: SeriesAnalysis) -> str:
    """Render the analysis as the text report sent for summarization."""
    lines = [
        f"=== Detailed Analysis for FRED Series: {analysis.series_id} ===",
        f"Time Period: {analysis.start.isoformat()} to {analysis.end.isoformat()}",
        f"Number of Observations: {analysis.count}",
        "",
        "-- Linear Regression --",
        f"Equation: {analysis.linear.equation}",
        f"R²: {analysis.linear.r2:.4f}",
        "",
        f"-- Polynomial Regressions (Orders 1 to {len(analysis.polynomials)}) --",
    ]
    for poly in analysis.polynomials:
        lines.append(f"{poly.name}: Equation: {poly.equation}, R²: {poly.r2:.4f}")
    lines.append("")

    if analysis.logarithmic:
        lines += [
            "-- Logarithmic Regression --",
            f"Equation: {analysis.logarithmic.equation}",
            f"R²: {analysis.logarithmic.r2:.4f}",
            "",
        ]
    if analysis.percent_change:
        lines += [
            "-- Percent Change Regression --",
            f"Equation: {analysis.percent_change.equation}",
            f"R²: {analysis.percent_change.r2:.4f}",
            "",
        ]

    lines.append("Note: Data was analyzed as raw (without cleaning or normalization).")
    return "\n".join(lines)


def summarize(analysis: SeriesAnalysis, provider: "ChatProvider") -> str:
    """Ask a chat provider for a prose summary of the report (no retrieval)."""
    prompt = build_summary_prompt(analysis)
    logger.info(f"Requesting {provider.name} summary for {analysis.series_id}")
    return provider.complete(prompt, SUMMARY_SYSTEM_INSTRUCTION)
