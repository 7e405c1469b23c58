# src/labsim_core/scenarios/bridges.py
"""
Bridge measurement scenarios: Wheatstone (DC resistance), Maxwell (inductance)
and Wien (frequency).

All three share one four-arm topology. Arms Z1 (top) and Z2 (bottom) form the
left divider, Z3 (top) and Z4 (bottom) the right one, and the detector sits
between the two midpoints. The detector sees

    Vd = Vs * (Z1*Z4 - Z2*Z3) / ((Z1 + Z2) * (Z3 + Z4))

behind the Thevenin impedance Z1||Z2 + Z3||Z4. The bridge is balanced when
Z1*Z4 = Z2*Z3, at which point the detector current is exactly zero.
"""
import cmath
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict

from ..constants import MIN_DENOMINATOR
from ..data_structures import Sample, ScenarioState, SweepRange
from ..parameters import Number
from .base import register_scenario

logger = logging.getLogger(__name__)

_TOLERANCE = Number("tolerance", 1e-3, 1e-9, 1.0, None, "Relative balance tolerance")
_DETECTOR = Number("Rd", 50.0, 0.0, 1e6, "ohm", "Detector (galvanometer) resistance")


@dataclass(frozen=True)
class BridgeReading:
    """Detector-side solution of a four-arm bridge."""
    detector_voltage: complex
    detector_current: complex
    thevenin_impedance: complex
    balance_error: float


def _parallel(a: complex, b: complex) -> complex:
    total = a + b
    if abs(total) < MIN_DENOMINATOR:
        return 0j
    return a * b / total


def solve_bridge(z1: complex, z2: complex, z3: complex, z4: complex, vs: float, r_detector: float) -> BridgeReading:
    """Solves the detector branch of a four-arm bridge driven by `vs`."""
    left = z1 + z2
    right = z3 + z4
    denominator = left * right
    if abs(denominator) < MIN_DENOMINATOR:
        denominator = MIN_DENOMINATOR
    vd = vs * (z1 * z4 - z2 * z3) / denominator

    zth = _parallel(z1, z2) + _parallel(z3, z4)
    loop = zth + r_detector
    if abs(loop) < MIN_DENOMINATOR:
        loop = MIN_DENOMINATOR
    reference = max(abs(z2 * z3), MIN_DENOMINATOR)
    return BridgeReading(
        detector_voltage=vd,
        detector_current=vd / loop,
        thevenin_impedance=zth,
        balance_error=abs(z1 * z4 - z2 * z3) / reference,
    )


@register_scenario(
    "wheatstone",
    label="Wheatstone Bridge",
    group="Measurements",
    parameters=[
        Number("R1", 1000.0, 1e-3, 1e9, "ohm"),
        Number("R2", 1000.0, 1e-3, 1e9, "ohm"),
        Number("R3", 1000.0, 1e-3, 1e9, "ohm"),
        Number("Rx", 400.0, 1e-3, 1e9, "ohm", "Unknown resistance"),
        Number("Vs", 5.0, 0.0, 1000.0, "V", "Bridge supply"),
        _DETECTOR,
        _TOLERANCE,
    ],
    columns=["Rx_calc", "galvI", "balanced"],
    default_sweep=SweepRange(param="Rx", start=100.0, stop=2000.0, steps=200),
)
def wheatstone_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    DC Wheatstone bridge. `Rx_calc = R2*R3/R1` is the value of Rx that would
    balance the bridge; `galvI` is the signed galvanometer current.
    """
    r1, r2, r3, rx = params["R1"], params["R2"], params["R3"], params["Rx"]
    vs = params["Vs"]

    reading = solve_bridge(r1, r2, r3, rx, vs, params["Rd"])
    ig = reading.detector_current.real
    magnitude = abs(ig)

    return Sample(
        V=vs,
        I=magnitude,
        P=vs * magnitude,
        extra={
            "Rx_calc": r2 * r3 / r1,
            "galvI": ig,
            "Vth": reading.detector_voltage.real,
            "Rth": reading.thevenin_impedance.real,
            "balance_error": reading.balance_error,
            "balanced": reading.balance_error < params["tolerance"],
        },
    )


def _instantaneous(amplitude: complex, w: float, t: float) -> float:
    return abs(amplitude) * math.sin(w * t + cmath.phase(amplitude))


@register_scenario(
    "maxwell",
    label="Maxwell Inductance Bridge",
    group="Measurements",
    parameters=[
        Number("R1", 1000.0, 1e-3, 1e9, "ohm", "Arm parallel to C4"),
        Number("R2", 1000.0, 1e-3, 1e9, "ohm"),
        Number("R3", 500.0, 1e-3, 1e9, "ohm"),
        Number("C4", 0.1, 1e-6, 1e4, "uF", "Standard capacitor"),
        Number("Vs", 5.0, 0.0, 1000.0, "V", "Source amplitude"),
        Number("freq", 1000.0, 0.1, 1e6, "Hz", "Source frequency"),
        Number("Lx_coil", 50.0, 1e-3, 1e6, "mH", "Inductance of the coil under test"),
        Number("Rx_coil", 500.0, 0.0, 1e9, "ohm", "Resistance of the coil under test"),
        _DETECTOR,
        _TOLERANCE,
    ],
    columns=["Lx_calc", "Rx_calc", "detector_current", "balanced"],
    time_dependent=True,
)
def maxwell_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Maxwell inductance-capacitance bridge against a coil under test.

    Z1 = R1 || C4, Z2 = R2, Z3 = R3, Z4 = Rx_coil + jwLx_coil. At balance
    Lx = R2*R3*C4 and Rx = R2*R3/R1, independent of frequency. V is the
    instantaneous excitation and I the instantaneous detector current.
    """
    r1, r2, r3 = params["R1"], params["R2"], params["R3"]
    c4 = params["C4"] * 1e-6
    lx = params["Lx_coil"] * 1e-3
    vs = params["Vs"]
    w = 2.0 * math.pi * params["freq"]
    t = state.time_s

    z1 = r1 / (1.0 + 1j * w * r1 * c4)
    z4 = params["Rx_coil"] + 1j * w * lx
    reading = solve_bridge(z1, r2, r3, z4, vs, params["Rd"])

    v = vs * math.sin(w * t)
    i = _instantaneous(reading.detector_current, w, t)
    rx_calc = r2 * r3 / r1
    lx_calc = r2 * r3 * c4
    return Sample(
        V=v,
        I=i,
        P=v * i,
        extra={
            "Lx_calc": lx_calc * 1e3,
            "Rx_calc": rx_calc,
            "Q": w * lx_calc / max(rx_calc, MIN_DENOMINATOR),
            "detector_current": abs(reading.detector_current),
            "detector_voltage": abs(reading.detector_voltage),
            "balance_error": reading.balance_error,
            "balanced": reading.balance_error < params["tolerance"],
        },
    )


def wien_frequency(r1: float, r2: float, c1_f: float, c2_f: float) -> float:
    return 1.0 / (2.0 * math.pi * math.sqrt(r1 * r2 * c1_f * c2_f))


@register_scenario(
    "wien_freq",
    label="Wien Bridge Frequency Measurement",
    group="Measurements",
    parameters=[
        Number("R1", 10000.0, 1e-3, 1e9, "ohm", "Series arm resistance"),
        Number("R2", 10000.0, 1e-3, 1e9, "ohm", "Parallel arm resistance"),
        Number("C1", 0.1, 1e-6, 1e4, "uF", "Series arm capacitance"),
        Number("C2", 0.1, 1e-6, 1e4, "uF", "Parallel arm capacitance"),
        Number("R3", 2000.0, 1e-3, 1e9, "ohm", "Ratio arm (top)"),
        Number("R4", 1000.0, 1e-3, 1e9, "ohm", "Ratio arm (bottom)"),
        Number("Vs", 10.0, 0.0, 1000.0, "V", "Source amplitude"),
        Number("freq", None, 0.1, 1e6, "Hz", "Source frequency (defaults to f0)"),
        _DETECTOR,
        _TOLERANCE,
    ],
    columns=["f0", "detector_current", "balance_error", "balanced"],
    time_dependent=True,
    default_sweep=SweepRange(param="freq", start=10.0, stop=1000.0, steps=200, y_field="detector_current"),
)
def wien_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Wien bridge. Z1 = R1 + 1/(jwC1) (series arm), Z2 = R2 || C2 (parallel arm),
    Z3 = R3, Z4 = R4. Balance requires both f = f0 = 1/(2*pi*sqrt(R1R2C1C2))
    and R3/R4 = R1/R2 + C2/C1.
    """
    r1, r2, r3, r4 = params["R1"], params["R2"], params["R3"], params["R4"]
    c1 = params["C1"] * 1e-6
    c2 = params["C2"] * 1e-6
    vs = params["Vs"]
    f0 = wien_frequency(r1, r2, c1, c2)
    f = params["freq"] if params["freq"] is not None else f0
    w = 2.0 * math.pi * f
    t = state.time_s

    z1 = r1 + 1.0 / (1j * w * c1)
    z2 = r2 / (1.0 + 1j * w * r2 * c2)
    reading = solve_bridge(z1, z2, r3, r4, vs, params["Rd"])

    v = vs * math.sin(w * t)
    i = _instantaneous(reading.detector_current, w, t)
    return Sample(
        V=v,
        I=i,
        P=v * i,
        extra={
            "f0": f0,
            "freq": f,
            "ratio": r3 / r4,
            "ratio_required": r1 / r2 + c2 / c1,
            "detector_current": abs(reading.detector_current),
            "detector_voltage": abs(reading.detector_voltage),
            "balance_error": reading.balance_error,
            "balanced": reading.balance_error < params["tolerance"],
        },
    )
