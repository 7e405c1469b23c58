# src/labsim_core/simulation/solver.py
"""
Scalar operating-point solver for single-loop nonlinear circuits.

A device in series with a resistor across a supply settles where the loop
equation

    f(v) = v + R * I_device(v) - V_supply = 0

holds. Every device law used here is monotonic non-decreasing in its terminal
voltage, so f is strictly increasing and bisection on a straddling bracket is
guaranteed to converge. The solver never raises for finite input: if the root
cannot be bracketed or the iteration budget runs out, the best available estimate
is returned and the outcome is flagged on the `OperatingPoint`.
"""
import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..constants import (
    BOLTZMANN_J_PER_K, ELEMENTARY_CHARGE_C, EXP_CLAMP, ROOM_TEMPERATURE_K,
    SOLVER_MAX_ITERATIONS, SOLVER_TOLERANCE,
)

logger = logging.getLogger(__name__)

LoopFunction = Callable[[float], float]


@dataclass(frozen=True)
class OperatingPoint:
    """
    The outcome of a bisection solve.

    Attributes:
        value: The estimated root (the last midpoint evaluated, or the better
               endpoint when no bracket could be found).
        residual: f(value).
        iterations: Number of bisection iterations performed.
        converged: True if |residual| fell below the tolerance.
        bracketed: True if a sign-changing bracket was available.
    """
    value: float
    residual: float
    iterations: int
    converged: bool
    bracketed: bool = True


def thermal_voltage(temperature_k: float = ROOM_TEMPERATURE_K) -> float:
    """Vt = kT/q in volts."""
    return BOLTZMANN_J_PER_K * temperature_k / ELEMENTARY_CHARGE_C


def default_widened_bracket(v_supply: float) -> Tuple[float, float]:
    """The one-time fallback bracket for a supply-driven device loop."""
    return -5.0, max(v_supply + 2.0, 5.0)


def _straddles(fa: float, fb: float) -> bool:
    return fa * fb <= 0.0


def bisect_root(
    fn: LoopFunction,
    bracket: Tuple[float, float],
    *,
    widen_to: Optional[Tuple[float, float]] = None,
    max_iter: int = SOLVER_MAX_ITERATIONS,
    tol: float = SOLVER_TOLERANCE,
) -> OperatingPoint:
    """
    Finds a root of `fn` by bisection.

    Args:
        fn: Scalar function, expected to be monotonic over the bracket.
        bracket: Initial (a, b) search interval; order does not matter.
        widen_to: Interval tried once if `bracket` does not straddle a root.
        max_iter: Hard cap on bisection iterations.
        tol: The solve stops as soon as |fn(mid)| < tol.

    Returns:
        An `OperatingPoint`. On non-convergence `value` is the last midpoint.
    """
    a, b = sorted(bracket)
    fa, fb = fn(a), fn(b)

    if not _straddles(fa, fb) and widen_to is not None:
        logger.debug(f"Bracket [{a:.4g}, {b:.4g}] does not straddle a root; widening to {widen_to}.")
        a, b = sorted(widen_to)
        fa, fb = fn(a), fn(b)

    if not _straddles(fa, fb):
        value, residual = (a, fa) if abs(fa) <= abs(fb) else (b, fb)
        logger.debug(f"No sign change found; returning endpoint {value:.6g} (residual {residual:.3g}).")
        return OperatingPoint(value=value, residual=residual, iterations=0, converged=False, bracketed=False)

    if fa == 0.0:
        return OperatingPoint(value=a, residual=0.0, iterations=0, converged=True)
    if fb == 0.0:
        return OperatingPoint(value=b, residual=0.0, iterations=0, converged=True)

    mid, fm = a, fa
    iterations = 0
    for iterations in range(1, max_iter + 1):
        mid = 0.5 * (a + b)
        fm = fn(mid)
        if abs(fm) < tol:
            return OperatingPoint(value=mid, residual=fm, iterations=iterations, converged=True)
        if (fm < 0.0) == (fa < 0.0):
            a, fa = mid, fm
        else:
            b = mid

    logger.debug(f"Bisection hit the {max_iter}-iteration cap; |f| = {abs(fm):.3g}.")
    return OperatingPoint(value=mid, residual=fm, iterations=iterations, converged=False)


# --- Device Laws ---

def diode_current(v: float, i_s: float, n: float, temperature_k: float = ROOM_TEMPERATURE_K) -> float:
    """Shockley diode current with the exponent clamped to avoid overflow."""
    exponent = v / (n * thermal_voltage(temperature_k))
    exponent = max(-EXP_CLAMP, min(EXP_CLAMP, exponent))
    return i_s * (math.exp(exponent) - 1.0)


def bjt_collector_current(vce: float, ib: float, beta: float, vce_sat: float) -> float:
    """
    Two-region collector current: a linear ramp from the origin up to Vce_sat,
    then the constant active-region current beta * Ib.
    """
    active = beta * max(0.0, ib)
    if vce <= 0.0:
        return 0.0
    if vce < vce_sat:
        return active * vce / vce_sat
    return active


def mosfet_drain_current(vds: float, vgs: float, k: float, vth: float) -> float:
    """Square-law drain current in cut-off, triode and saturation."""
    vov = vgs - vth
    if vov <= 0.0 or vds <= 0.0:
        return 0.0
    if vds < vov:
        return k * (vov * vds - 0.5 * vds * vds)
    return 0.5 * k * vov * vov


# --- Loop Solvers ---

def _supply_bracket(v_supply: float) -> Tuple[float, float]:
    return min(0.0, v_supply), max(0.0, v_supply)


def solve_diode_loop(
    v_supply: float,
    r_series: float,
    i_s: float,
    n: float,
    temperature_k: float = ROOM_TEMPERATURE_K,
) -> OperatingPoint:
    """Diode voltage of a supply -> resistor -> diode loop."""
    def loop(v: float) -> float:
        return v + r_series * diode_current(v, i_s, n, temperature_k) - v_supply

    return bisect_root(loop, _supply_bracket(v_supply), widen_to=default_widened_bracket(v_supply))


def solve_bjt_loop(v_cc: float, r_c: float, ib: float, beta: float, vce_sat: float) -> OperatingPoint:
    """Collector-emitter voltage of a common-emitter stage with collector resistor."""
    def loop(v: float) -> float:
        return v + r_c * bjt_collector_current(v, ib, beta, vce_sat) - v_cc

    return bisect_root(loop, _supply_bracket(v_cc), widen_to=default_widened_bracket(v_cc))


def solve_mosfet_loop(v_dd: float, r_d: float, vgs: float, k: float, vth: float) -> OperatingPoint:
    """Drain-source voltage of a common-source stage with drain resistor."""
    def loop(v: float) -> float:
        return v + r_d * mosfet_drain_current(v, vgs, k, vth) - v_dd

    return bisect_root(loop, _supply_bracket(v_dd), widen_to=default_widened_bracket(v_dd))
