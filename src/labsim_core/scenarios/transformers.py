# src/labsim_core/scenarios/transformers.py
"""
Single-phase transformer scenarios: the open-circuit / short-circuit tests and
a transformer under load.
"""
import logging
import math
from typing import Any, Dict

from ..constants import MIN_DENOMINATOR
from ..data_structures import Sample, ScenarioState, SweepRange
from ..parameters import Choice, Number, clamp
from .base import register_scenario

logger = logging.getLogger(__name__)


def efficiency_percent(output_w: float, losses_w: float) -> float:
    """output / (output + losses) * 100, zero when nothing is delivered."""
    total = output_w + losses_w
    if output_w <= 0.0 or total <= MIN_DENOMINATOR:
        return 0.0
    return output_w / total * 100.0


@register_scenario(
    "transformer_ocsc",
    label="Transformer Open-Circuit & Short-Circuit Tests",
    group="Transformers",
    parameters=[
        Choice("mode", ("oc", "sc"), "oc", "Which test is on the bench"),
        Number("Vp", 230.0, 1.0, 100000.0, "V", "Rated primary voltage (OC test voltage)"),
        Number("Np", 1000.0, 1.0, 100000.0, None, "Primary turns"),
        Number("Ns", 500.0, 1.0, 100000.0, None, "Secondary turns"),
        Number("Po", 20.0, 0.01, 1e6, "W", "OC test wattmeter reading"),
        Number("Io", 0.5, 1e-4, 1e4, "A", "OC test no-load current"),
        Number("Vsc", 40.0, 0.01, 100000.0, "V", "SC test voltage"),
        Number("Isc", 10.0, 1e-3, 1e5, "A", "SC test current"),
        Number("Psc", 100.0, 0.01, 1e7, "W", "SC test wattmeter reading"),
        Number("S", 2300.0, 1.0, 1e9, "VA", "Rated apparent power"),
        Number("load", 1.0, 0.0, 1.5, None, "Load as a fraction of rating"),
        Number("pf", 0.8, 0.0, 1.0, None, "Load power factor (lagging)"),
        Number("freq", 50.0, 1.0, 1000.0, "Hz"),
    ],
    columns=["mode", "Rc", "Xm", "Req", "Xeq", "efficiency", "regulation"],
    time_dependent=True,
)
def transformer_ocsc_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Equivalent-circuit parameters from the two standard tests, referred to the
    primary side.

    OC test: cos(phi0) = Po / (Vp*Io), Rc = Vp^2 / Po, Xm = Vp^2 / sqrt((Vp*Io)^2 - Po^2).
    SC test: Req = Psc / Isc^2, Zeq = Vsc / Isc, Xeq = sqrt(Zeq^2 - Req^2).

    Efficiency and voltage regulation are predicted at `load` x rated current and
    power factor `pf`. The traced V and I are those of the active test; P is the
    loss the wattmeter reads in that test.
    """
    vp, io, po = params["Vp"], params["Io"], params["Po"]
    vsc, isc, psc = params["Vsc"], params["Isc"], params["Psc"]
    s_rated, x, pf = params["S"], params["load"], params["pf"]
    mode = params["mode"]

    # --- Open-circuit (core) branch ---
    cos_phi0 = clamp(po / (vp * io), 0.0, 1.0)
    rc = vp * vp / po
    xm_den = math.sqrt(max((vp * io) ** 2 - po * po, 0.0))
    xm = vp * vp / max(xm_den, MIN_DENOMINATOR)

    # --- Short-circuit (series) branch ---
    cos_phisc = clamp(psc / (vsc * isc), 0.0, 1.0)
    req = psc / (isc * isc)
    zeq = vsc / isc
    xeq = math.sqrt(max(zeq * zeq - req * req, 0.0))

    # --- Performance at the requested load ---
    i_rated = s_rated / vp
    full_load_copper = req * i_rated * i_rated
    output = x * s_rated * pf
    losses = po + x * x * full_load_copper
    sin_phi = math.sqrt(max(1.0 - pf * pf, 0.0))
    regulation = x * i_rated * (req * pf + xeq * sin_phi) / vp * 100.0

    w = 2.0 * math.pi * params["freq"]
    t = state.time_s
    if mode == "oc":
        v = vp * math.sin(w * t)
        i = io * math.sin(w * t - math.acos(cos_phi0))
        loss = po
    else:
        v = vsc * math.sin(w * t)
        i = isc * math.sin(w * t - math.acos(cos_phisc))
        loss = psc

    return Sample(
        V=v,
        I=i,
        P=loss,
        extra={
            "mode": mode,
            "turns_ratio": params["Np"] / params["Ns"],
            "Rc": rc,
            "Xm": xm,
            "cos_phi0": cos_phi0,
            "Req": req,
            "Zeq": zeq,
            "Xeq": xeq,
            "cos_phisc": cos_phisc,
            "loss": loss,
            "total_loss": losses,
            "efficiency": efficiency_percent(output, losses),
            "regulation": regulation,
        },
    )


@register_scenario(
    "transformer_load",
    label="Transformer on Load",
    group="Transformers",
    parameters=[
        Number("Vp", 230.0, 10.0, 1000.0, "V", "Primary voltage"),
        Number("Np", 1000.0, 10.0, 5000.0, None, "Primary turns"),
        Number("Ns", 500.0, 10.0, 5000.0, None, "Secondary turns"),
        Number("Pcore", 20.0, 0.1, 100.0, "W", "Core loss"),
        Number("Pcu", 10.0, 0.1, 100.0, "W", "Full-load copper loss"),
        Number("load", 0.8, 0.0, 1.2, None, "Load as a fraction of rating"),
        Number("pf", 0.9, 0.0, 1.0, None, "Load power factor"),
        Number("I2_rated", 10.0, 0.01, 10000.0, "A", "Rated secondary current"),
        Number("freq", 50.0, 1.0, 1000.0, "Hz"),
    ],
    columns=["V_secondary", "I1", "I2", "efficiency", "loss"],
    time_dependent=True,
    default_sweep=SweepRange(param="load", start=0.0, stop=1.2, steps=121, y_field="efficiency"),
)
def transformer_load_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    a = params["Np"] / params["Ns"]
    vs = params["Vp"] / a
    x, pf = params["load"], params["pf"]
    i2 = x * params["I2_rated"]
    i1 = i2 / a
    output = vs * i2 * pf
    loss = params["Pcore"] + params["Pcu"] * x * x

    w = 2.0 * math.pi * params["freq"]
    t = state.time_s
    phi = math.acos(pf)
    return Sample(
        V=params["Vp"] * math.sin(w * t),
        I=i1 * math.sin(w * t - phi),
        P=output,
        extra={
            "turns_ratio": a,
            "V_secondary": vs,
            "V_out": vs * math.sin(w * t),
            "I1": i1,
            "I2": i2,
            "output": output,
            "loss": loss,
            "efficiency": efficiency_percent(output, loss),
        },
    )
