"""
Regression analysis of stored series.
"""

from .regressions import (
    RegressionResult,
    linear_regression,
    logarithmic_regression,
    percent_change_regression,
    polynomial_regressions,
)
from .report import SeriesAnalysis, analyze_series, build_summary_prompt, summarize

__all__ = [
    "RegressionResult",
    "linear_regression",
    "polynomial_regressions",
    "logarithmic_regression",
    "percent_change_regression",
    "SeriesAnalysis",
    "analyze_series",
    "build_summary_prompt",
    "summarize",
]
