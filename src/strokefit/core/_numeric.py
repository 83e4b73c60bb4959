"""Internal numeric helpers shared by the fitting strategies.

This is an internal module. Not intended for public use.
"""

import math
from collections.abc import Sequence

import numpy as np

from strokefit.config import StrategyOptions
from strokefit.domain import Equation, EquationDomain, KnotPoint


def as_array(points: Sequence[tuple[float, float]]) -> np.ndarray:
    """Convert a stroke to an (n, 2) float array."""
    return np.asarray(points, dtype=float).reshape(-1, 2)


def dedupe(points: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """Drop consecutive duplicate samples."""
    if len(points) < 2:
        return points
    steps = np.linalg.norm(np.diff(points, axis=0), axis=1)
    keep = np.concatenate([[True], steps > eps])
    return points[keep]


def diagonal(points: np.ndarray) -> float:
    """Length of the bounding-box diagonal."""
    if len(points) == 0:
        return 0.0
    span = points.max(axis=0) - points.min(axis=0)
    return float(math.hypot(span[0], span[1]))


def path_length(points: np.ndarray) -> float:
    """Total polyline length."""
    if len(points) < 2:
        return 0.0
    return float(np.linalg.norm(np.diff(points, axis=0), axis=1).sum())


def chord_length_parameterize(points: np.ndarray) -> np.ndarray:
    """Assign parameter values in [0, 1] using the chord-length method."""
    n = len(points)
    u = np.zeros(n)
    if n < 2:
        return u
    u[1:] = np.cumsum(np.linalg.norm(np.diff(points, axis=0), axis=1))
    if u[-1] > 1e-12:
        u /= u[-1]
    return u


def rms(residuals: np.ndarray) -> float:
    """Root mean square of a residual vector."""
    if len(residuals) == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(residuals))))


def distance_to_segment(points: np.ndarray, start: np.ndarray, end: np.ndarray) -> np.ndarray:
    """Distance of each point to the segment [start, end]."""
    direction = end - start
    length_sq = float(direction @ direction)
    if length_sq < 1e-24:
        return np.linalg.norm(points - start, axis=1)
    t = np.clip((points - start) @ direction / length_sq, 0.0, 1.0)
    projection = start + np.outer(t, direction)
    return np.linalg.norm(points - projection, axis=1)


def rdp_indices(points: np.ndarray, epsilon: float) -> list[int]:
    """Indices kept by Ramer-Douglas-Peucker simplification."""
    n = len(points)
    if n < 3:
        return list(range(n))

    keep = np.zeros(n, dtype=bool)
    keep[0] = keep[-1] = True
    stack = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        inner = points[first + 1 : last]
        distances = distance_to_segment(inner, points[first], points[last])
        offset = int(np.argmax(distances))
        if distances[offset] > epsilon:
            split = first + 1 + offset
            keep[split] = True
            stack.append((first, split))
            stack.append((split, last))
    return [int(i) for i in np.flatnonzero(keep)]


def quadratic_point(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Evaluate a quadratic Bezier at parameters ``t``."""
    t = np.asarray(t, dtype=float)[:, None]
    u = 1.0 - t
    return u * u * p0 + 2.0 * u * t * p1 + t * t * p2


def fit_quadratic_control(points: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Least-squares middle control point of a quadratic Bezier with fixed ends."""
    p0, p2 = points[0], points[-1]
    weight = 2.0 * (1.0 - t) * t
    denominator = float(weight @ weight)
    if denominator < 1e-12:
        return (p0 + p2) / 2.0
    target = points - np.outer((1.0 - t) ** 2, p0) - np.outer(t**2, p2)
    return (weight @ target) / denominator


def quadratic_residual(points: np.ndarray, control: tuple[np.ndarray, np.ndarray, np.ndarray]) -> float:
    """RMS distance between points and a quadratic Bezier sampled at chord parameters."""
    t = chord_length_parameterize(points)
    fitted = quadratic_point(*control, t)
    return rms(np.linalg.norm(points - fitted, axis=1))


def snap_value(value: float, options: StrategyOptions) -> float:
    """Round a coefficient to the options' decimals, or to the snap grid."""
    if options.snap:
        value = round(value / options.snap_step) * options.snap_step
    return round(value, options.decimals)


def fmt(value: float, decimals: int = 3) -> str:
    """Format a number compactly, without trailing zeros or negative zero."""
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def fmt_term(coefficient: float, suffix: str, first: bool, decimals: int = 3) -> str:
    """Format one polynomial term with its sign for joining into an expression."""
    text = fmt(abs(coefficient), decimals)
    if suffix and text == "1":
        text = ""
    sign = "-" if coefficient < 0 and text != "0" else "+"
    if first:
        return f"{'-' if sign == '-' else ''}{text}{suffix}"
    return f" {sign} {text}{suffix}"


def polynomial(coefficients: Sequence[float], variable: str, decimals: int = 3) -> str:
    """Render ``c0 v^n + ... + cn`` dropping zero terms."""
    degree = len(coefficients) - 1
    parts: list[str] = []
    for power, coefficient in zip(range(degree, -1, -1), coefficients, strict=True):
        if fmt(coefficient, decimals) == "0":
            continue
        suffix = "" if power == 0 else variable if power == 1 else f"{variable}^{power}"
        parts.append(fmt_term(coefficient, suffix, first=not parts, decimals=decimals))
    return "".join(parts) or "0"


def line_equation(
    start: np.ndarray, end: np.ndarray, options: StrategyOptions
) -> Equation:
    """Equation of the segment [start, end] as y = mx + b (or x = c)."""
    dx = float(end[0] - start[0])
    dy = float(end[1] - start[1])
    decimals = options.decimals
    if abs(dx) < 1e-12:
        c = snap_value(float(start[0]), options)
        low, high = sorted((float(start[1]), float(end[1])))
        formula = f"x = {fmt(c, decimals)}"
        return Equation(formula, EquationDomain(round(low, decimals), round(high, decimals)), "y", formula)

    slope = snap_value(dy / dx, options)
    intercept = snap_value(float(start[1]) - (dy / dx) * float(start[0]), options)
    body = polynomial([slope, intercept], "x", decimals)
    formula = f"y = {body}"
    low, high = sorted((float(start[0]), float(end[0])))
    return Equation(formula, EquationDomain(round(low, decimals), round(high, decimals)), "x", formula)


def quadratic_equation(
    p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, options: StrategyOptions
) -> Equation:
    """Parametric equation of a quadratic Bezier over t in [0, 1]."""
    decimals = options.decimals
    x_coefficients = [
        snap_value(float(p0[0] - 2 * p1[0] + p2[0]), options),
        snap_value(float(2 * (p1[0] - p0[0])), options),
        snap_value(float(p0[0]), options),
    ]
    y_coefficients = [
        snap_value(float(p0[1] - 2 * p1[1] + p2[1]), options),
        snap_value(float(2 * (p1[1] - p0[1])), options),
        snap_value(float(p0[1]), options),
    ]
    x_text = polynomial(x_coefficients, "t", decimals)
    y_text = polynomial(y_coefficients, "t", decimals)
    formula = f"(x, y) = ({x_text}, {y_text})"
    latex = f"\\left({x_text}, {y_text}\\right)"
    return Equation(formula, EquationDomain(0.0, 1.0), "t", latex)


def knot(point: np.ndarray) -> KnotPoint:
    """Knot from a 2-vector."""
    return KnotPoint(float(point[0]), float(point[1]))


def svg_polyline(points: np.ndarray) -> str:
    """SVG path through the given vertices."""
    if len(points) == 0:
        return ""
    head = f"M {fmt(points[0][0], 4)} {fmt(points[0][1], 4)}"
    tail = "".join(f" L {fmt(p[0], 4)} {fmt(p[1], 4)}" for p in points[1:])
    return head + tail


def svg_quadratic_chain(segments: Sequence[tuple[np.ndarray, np.ndarray, np.ndarray]]) -> str:
    """SVG path of consecutive quadratic Bezier segments."""
    if not segments:
        return ""
    start = segments[0][0]
    path = f"M {fmt(start[0], 4)} {fmt(start[1], 4)}"
    for _, control, end in segments:
        path += f" Q {fmt(control[0], 4)} {fmt(control[1], 4)} {fmt(end[0], 4)} {fmt(end[1], 4)}"
    return path
