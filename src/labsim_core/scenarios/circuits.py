# src/labsim_core/scenarios/circuits.py
"""
Linear circuit scenarios: resistive networks measured with a multimeter and the
series RLC resonance experiment.
"""
import logging
import math
from typing import Any, Dict, List

from ..constants import MIN_DENOMINATOR
from ..data_structures import Sample, ScenarioState, SweepRange
from ..parameters import Choice, Number
from .base import register_scenario

logger = logging.getLogger(__name__)

DEFAULT_RESISTORS_OHM = (100.0, 220.0, 330.0)
_RESISTOR_SPEC = Number("R", 100.0, 1e-3, 1e9, "ohm", "Resistor value")

_PROBE_UNITS = {"voltage": "V", "current": "A", "resistance": "ohm"}


def _read_resistors(raw: Any) -> List[float]:
    """Reads a resistor chain from a list of numbers or quantity strings."""
    if not isinstance(raw, (list, tuple)) or not raw:
        return list(DEFAULT_RESISTORS_OHM)
    return [_RESISTOR_SPEC.coerce(value) for value in raw]


@register_scenario(
    "ohms_law",
    label="Ohm's Law & Resistor Networks",
    group="Circuits",
    parameters=[
        Number("Vs", 5.0, -1000.0, 1000.0, "V", "Supply voltage"),
        Choice("topology", ("series", "parallel"), "series", "How the resistors are connected"),
        Choice("probe", ("voltage", "current", "resistance"), "current", "Multimeter measure mode"),
    ],
    columns=["Req", "reading"],
)
def ohms_law_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    V = Vs, I = Vs / Req, P = V * I.

    Series chains also report the drop across each resistor (`V_R1`, ...) and the
    divider voltage to ground after it (`V_node1`, ...); parallel banks report the
    branch currents (`I_R1`, ...).
    """
    vs = params["Vs"]
    resistors = _read_resistors(params.get("resistors"))
    topology = params["topology"]

    extra: Dict[str, Any] = {"topology": topology, "n_resistors": len(resistors)}
    if topology == "series":
        req = sum(resistors)
        current = vs / req
        remaining = vs
        for n, r in enumerate(resistors, start=1):
            drop = current * r
            remaining -= drop
            extra[f"V_R{n}"] = drop
            extra[f"V_node{n}"] = remaining
    else:
        req = 1.0 / sum(1.0 / r for r in resistors)
        current = vs / req
        for n, r in enumerate(resistors, start=1):
            extra[f"I_R{n}"] = vs / r

    readings = {"voltage": vs, "current": current, "resistance": req}
    probe = params["probe"]
    extra.update({
        "Req": req,
        "reading": readings[probe],
        "reading_unit": _PROBE_UNITS[probe],
    })
    return Sample(V=vs, I=current, P=vs * current, extra=extra)


def resonant_frequency(l_h: float, c_f: float) -> float:
    return 1.0 / (2.0 * math.pi * math.sqrt(l_h * c_f))


@register_scenario(
    "rlc_resonance",
    label="Series RLC Resonance",
    group="Circuits",
    parameters=[
        Number("R", 10.0, 0.01, 1e6, "ohm", "Series resistance"),
        Number("L", 10.0, 1e-3, 1e4, "mH", "Inductance"),
        Number("C", 0.01, 1e-6, 1e4, "uF", "Capacitance"),
        Number("freq", 50.0, 0.1, 1e6, "Hz", "Source frequency"),
        Number("Vs", 10.0, 0.0, 1000.0, "V", "Source amplitude"),
    ],
    columns=["Xl", "Xc", "Z", "V_R", "V_L", "V_C", "f0"],
    default_sweep=SweepRange(param="freq", start=100.0, stop=40000.0, steps=400),
)
def rlc_resonance_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Magnitude model of a series RLC circuit driven at `freq`.

    I = Vs / |Z| peaks at f0 = 1 / (2*pi*sqrt(LC)); P = Vs * I * R / |Z| is the
    real power delivered, i.e. the apparent power times the power factor.
    """
    r = params["R"]
    l_h = params["L"] * 1e-3
    c_f = params["C"] * 1e-6
    f = params["freq"]
    vs = params["Vs"]

    w = 2.0 * math.pi * f
    xl = w * l_h
    xc = 1.0 / max(w * c_f, MIN_DENOMINATOR)
    z = max(math.hypot(r, xl - xc), MIN_DENOMINATOR)
    current = vs / z
    pf = r / z

    return Sample(
        V=vs,
        I=current,
        P=vs * current * pf,
        extra={
            "Xl": xl,
            "Xc": xc,
            "Z": z,
            "V_R": current * r,
            "V_L": current * xl,
            "V_C": current * xc,
            "f0": resonant_frequency(l_h, c_f),
            "pf": pf,
            "phase_deg": math.degrees(math.atan2(xl - xc, r)),
        },
    )
