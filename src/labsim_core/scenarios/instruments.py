# src/labsim_core/scenarios/instruments.py
"""
Function generator / oscilloscope scenario.
"""
import logging
import math
from typing import Any, Dict

import numpy as np
from scipy import signal

from ..data_structures import Sample, ScenarioState
from ..parameters import Choice, ExpressionError, Number, compile_waveform_expression
from .base import register_scenario

logger = logging.getLogger(__name__)

WAVEFORM_SHAPES = ("sine", "square", "triangle", "sawtooth", "pulse", "custom")


def waveform_value(shape: str, theta: float, duty: float) -> float:
    """
    Unit-amplitude value of a standard shape at phase angle `theta` (radians).
    Bipolar shapes span [-1, 1]; `pulse` is unipolar and spans [0, 1].
    """
    if shape == "sine":
        return math.sin(theta)
    if shape == "square":
        return float(signal.square(theta, duty=0.5))
    if shape == "triangle":
        return float(signal.sawtooth(theta, width=0.5))
    if shape == "sawtooth":
        return float(signal.sawtooth(theta, width=1.0))
    if shape == "pulse":
        return 0.5 * (float(signal.square(theta, duty=duty)) + 1.0)
    raise ValueError(f"Unknown waveform shape '{shape}'.")


def _custom_value(expression: str, state: ScenarioState, t: float, amp: float, freq: float, phase: float) -> float:
    try:
        fn = compile_waveform_expression(expression)
    except ExpressionError as e:
        if state.memo.get("rejected_expression") != expression:
            state.memo["rejected_expression"] = expression
            logger.warning(str(e))
        return 0.0
    with np.errstate(all="ignore"):
        value = complex(fn(t, amp, freq, phase))
    return value.real if value.imag == 0.0 else math.nan


@register_scenario(
    "waveform",
    label="Function Generator & Oscilloscope",
    group="Instruments",
    parameters=[
        Choice("shape", WAVEFORM_SHAPES, "sine", "Waveform shape"),
        Number("amp", 5.0, 0.0, 1000.0, "V", "Amplitude"),
        Number("freq", 1.0, 0.01, 100000.0, "Hz", "Frequency"),
        Number("phase", 0.0, -360.0, 360.0, "degree", "Phase"),
        Number("offset", 0.0, -1000.0, 1000.0, "V", "DC offset"),
        Number("duty", 0.5, 0.01, 0.99, None, "Pulse duty cycle"),
        Number("noise", 0.0, 0.0, 1000.0, "V", "Peak uniform noise"),
        Number("R_load", 1000.0, 1e-3, 1e9, "ohm", "Load resistance"),
    ],
    columns=["shape", "clean"],
    time_dependent=True,
)
def waveform_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    v(t) = amp * shape(2*pi*freq*t + phase) + offset + noise.

    The `custom` shape evaluates the `expression` parameter, a formula over
    t, amp, freq and phase (radians), e.g. "amp*sin(2*pi*freq*t) + 0.3*amp*sin(6*pi*freq*t)".
    A rejected expression degrades to the offset alone. Noise is drawn uniformly
    from [-noise, noise] using the instance's seeded generator.
    """
    shape = params["shape"]
    amp, freq, offset = params["amp"], params["freq"], params["offset"]
    phase = math.radians(params["phase"])
    t = state.time_s

    if shape == "custom":
        clean = _custom_value(str(params.get("expression") or ""), state, t, amp, freq, phase) + offset
    else:
        clean = amp * waveform_value(shape, 2.0 * math.pi * freq * t + phase, params["duty"]) + offset

    noise = params["noise"]
    v = clean + (state.rng.uniform(-noise, noise) if noise > 0.0 else 0.0)
    i = v / params["R_load"]
    return Sample(V=v, I=i, P=v * i, extra={"shape": shape, "clean": clean, "t": t})
