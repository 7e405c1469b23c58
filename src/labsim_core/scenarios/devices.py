# src/labsim_core/scenarios/devices.py
"""
Semiconductor curve-tracer scenarios. Each device sits in series with a resistor
across a supply; its operating point is found with the bisection solver.
"""
import logging
from typing import Any, Dict

from ..data_structures import Sample, ScenarioState, SweepRange
from ..parameters import Number
from ..simulation.solver import (
    OperatingPoint,
    bjt_collector_current,
    diode_current,
    mosfet_drain_current,
    solve_bjt_loop,
    solve_diode_loop,
    solve_mosfet_loop,
)
from .base import register_scenario

logger = logging.getLogger(__name__)


def _solver_extra(op: OperatingPoint) -> Dict[str, Any]:
    if not op.converged:
        logger.debug(f"Operating point did not converge: {op}")
    return {
        "converged": op.converged,
        "bracketed": op.bracketed,
        "residual": op.residual,
        "iterations": op.iterations,
    }


@register_scenario(
    "diode_iv",
    label="Diode I-V Characteristic",
    group="Devices",
    parameters=[
        Number("Vs", 5.0, -50.0, 50.0, "V", "Supply voltage"),
        Number("R", 1000.0, 1.0, 1e7, "ohm", "Series resistor"),
        Number("Is", 1e-9, 1e-18, 1e-3, "A", "Saturation current"),
        Number("n", 1.8, 1.0, 4.0, None, "Ideality factor"),
        Number("T", 300.0, 200.0, 500.0, "K", "Junction temperature"),
    ],
    columns=["Vd", "Id", "converged"],
    default_sweep=SweepRange(param="Vs", start=-1.0, stop=5.0, steps=121),
)
def diode_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """V is the supply, I the diode current, P the power dissipated in the diode."""
    vs, r = params["Vs"], params["R"]
    op = solve_diode_loop(vs, r, params["Is"], params["n"], params["T"])
    vd = op.value
    i_d = diode_current(vd, params["Is"], params["n"], params["T"])
    return Sample(
        V=vs,
        I=i_d,
        P=vd * i_d,
        extra={"Vd": vd, "Id": i_d, "V_R": i_d * r, **_solver_extra(op)},
    )


@register_scenario(
    "bjt_output",
    label="BJT Output Characteristic",
    group="Devices",
    parameters=[
        Number("Vcc", 5.0, 0.0, 100.0, "V", "Collector supply"),
        Number("Rc", 100.0, 1.0, 1e7, "ohm", "Collector resistor"),
        Number("Ib", 1e-5, 0.0, 0.1, "A", "Base current"),
        Number("beta", 100.0, 1.0, 1000.0, None, "Current gain"),
        Number("Vce_sat", 0.2, 0.01, 2.0, "V", "Saturation voltage"),
    ],
    columns=["Vce", "Ic", "region"],
    default_sweep=SweepRange(param="Vcc", start=0.0, stop=10.0, steps=121),
)
def bjt_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    vcc, rc, ib = params["Vcc"], params["Rc"], params["Ib"]
    beta, vce_sat = params["beta"], params["Vce_sat"]
    op = solve_bjt_loop(vcc, rc, ib, beta, vce_sat)
    vce = op.value
    ic = bjt_collector_current(vce, ib, beta, vce_sat)
    if ib <= 0.0:
        region = "cutoff"
    elif vce < vce_sat:
        region = "saturation"
    else:
        region = "active"
    return Sample(
        V=vcc,
        I=ic,
        P=vce * ic,
        extra={"Vce": vce, "Ic": ic, "region": region, **_solver_extra(op)},
    )


@register_scenario(
    "mosfet_output",
    label="MOSFET Output Characteristic",
    group="Devices",
    parameters=[
        Number("Vdd", 10.0, 0.0, 100.0, "V", "Drain supply"),
        Number("Rd", 100.0, 1.0, 1e7, "ohm", "Drain resistor"),
        Number("Vgs", 3.5, 0.0, 20.0, "V", "Gate-source voltage"),
        Number("k", 2e-3, 1e-6, 10.0, "A/V**2", "Transconductance parameter"),
        Number("Vth", 2.5, 0.0, 10.0, "V", "Threshold voltage"),
    ],
    columns=["Vds", "Id", "region"],
    default_sweep=SweepRange(param="Vdd", start=0.0, stop=10.0, steps=121),
)
def mosfet_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    vdd, rd, vgs = params["Vdd"], params["Rd"], params["Vgs"]
    k, vth = params["k"], params["Vth"]
    op = solve_mosfet_loop(vdd, rd, vgs, k, vth)
    vds = op.value
    i_d = mosfet_drain_current(vds, vgs, k, vth)
    vov = vgs - vth
    if vov <= 0.0:
        region = "cutoff"
    elif vds < vov:
        region = "triode"
    else:
        region = "saturation"
    return Sample(
        V=vdd,
        I=i_d,
        P=vds * i_d,
        extra={"Vds": vds, "Id": i_d, "region": region, **_solver_extra(op)},
    )
