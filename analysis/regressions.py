"""
Off-the-shelf regression fits for a single series.

The independent variable is days since the first observation (plus one for
the logarithmic fit) or the point index for percent-change data.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

import numpy as np

logger = logging.getLogger(__name__)

PRECISION = 4
MAX_POLYNOMIAL_ORDER = 10


@dataclass
class RegressionResult:
    """One fitted model."""

    name: str
    coefficients: list[float]  # ascending powers: c0, c1, ...
    r2: float
    equation: str
    order: int | None = None
    predictions: list[float] = field(default_factory=list, repr=False)

    def to_dict(self, include_predictions: bool = False) -> dict:
        result = {
            "model": self.name,
            "coefficients": self.coefficients,
            "r2": self.r2,
            "equation": self.equation,
        }
        if self.order is not None:
            result["order"] = self.order
        if include_predictions:
            result["predictions"] = self.predictions
        return result


def r_squared(y: np.ndarray, predicted: np.ndarray) -> float:
    ss_res = float(np.sum((y - predicted) ** 2))
    ss_tot = float(np.sum((y - np.mean(y)) ** 2))
    if ss_tot == 0:
        return 1.0 if np.isclose(ss_res, 0.0) else 0.0
    return 1.0 - ss_res / ss_tot


def days_since_start(dates: list[date]) -> np.ndarray:
    base = dates[0]
    return np.array([(d - base).days for d in dates], dtype=float)


def _round(values) -> list[float]:
    return [round(float(v), PRECISION) for v in values]


def _polynomial_equation(coefficients: list[float], variable: str = "x") -> str:
    terms = []
    for power in range(len(coefficients) - 1, -1, -1):
        coef = coefficients[power]
        if power == 0:
            terms.append(f"{coef}")
        elif power == 1:
            terms.append(f"{coef}{variable}")
        else:
            terms.append(f"{coef}{variable}^{power}")
    return "y = " + " + ".join(terms)


def _require_points(x: np.ndarray, minimum: int = 2) -> None:
    if len(x) < minimum:
        raise ValueError(f"At least {minimum} observations are required, got {len(x)}")


def fit_linear(x: np.ndarray, y: np.ndarray, name: str, variable: str) -> RegressionResult:
    _require_points(x)
    slope, intercept = np.polyfit(x, y, 1)
    predicted = slope * x + intercept
    coefficients = _round([intercept, slope])
    return RegressionResult(
        name=name,
        coefficients=coefficients,
        r2=round(r_squared(y, predicted), PRECISION),
        equation=f"y = {coefficients[1]} * ({variable}) + {coefficients[0]}",
        predictions=_round(predicted),
    )


def linear_regression(dates: list[date], values: list[float]) -> RegressionResult:
    """Linear fit of value against days since the first observation."""
    return fit_linear(
        days_since_start(dates), np.asarray(values, dtype=float), "Linear Regression", "days"
    )


def polynomial_regressions(
    dates: list[date],
    values: list[float],
    max_order: int = MAX_POLYNOMIAL_ORDER,
) -> list[RegressionResult]:
    """
    Polynomial fits of orders 1..max_order.

    Orders that need more points than are available are skipped.
    """
    x = days_since_start(dates)
    y = np.asarray(values, dtype=float)
    _require_points(x)

    results = []
    for order in range(1, max_order + 1):
        if len(x) <= order:
            logger.debug(f"Skipping order {order}: only {len(x)} points")
            break
        # Fit on a scaled domain for conditioning, report raw-domain coefficients
        poly = np.polynomial.Polynomial.fit(x, y, order)
        predicted = poly(x)
        coefficients = _round(poly.convert().coef)
        results.append(
            RegressionResult(
                name=f"Polynomial Regression (order {order})",
                coefficients=coefficients,
                r2=round(r_squared(y, predicted), PRECISION),
                equation=_polynomial_equation(coefficients),
                order=order,
                predictions=_round(predicted),
            )
        )
    return results


def logarithmic_regression(dates: list[date], values: list[float]) -> RegressionResult:
    """Fit value = a * ln(days + 1) + b."""
    x = days_since_start(dates) + 1
    y = np.asarray(values, dtype=float)
    _require_points(x)
    a, b = np.polyfit(np.log(x), y, 1)
    predicted = a * np.log(x) + b
    coefficients = _round([b, a])
    return RegressionResult(
        name="Logarithmic Regression",
        coefficients=coefficients,
        r2=round(r_squared(y, predicted), PRECISION),
        equation=f"y = {coefficients[1]} * ln(days) + {coefficients[0]}",
        predictions=_round(predicted),
    )


def percent_changes(values: list[float]) -> list[float]:
    """Consecutive percent changes, skipping points after a zero."""
    return [
        (curr - prev) / prev * 100
        for prev, curr in zip(values, values[1:])
        if prev != 0
    ]


def percent_change_regression(values: list[float]) -> RegressionResult:
    """Linear fit of percent change against point index."""
    changes = np.asarray(percent_changes(values), dtype=float)
    return fit_linear(
        np.arange(len(changes), dtype=float), changes, "Percent Change Regression", "index"
    )
