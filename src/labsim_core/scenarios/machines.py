# src/labsim_core/scenarios/machines.py
"""
Rotating machine scenarios: DC motor under load, induction motor no-load and
blocked-rotor tests, the synchronous motor V-curve, and alternator
synchronization to an infinite bus.
"""
import cmath
import logging
import math
from typing import Any, Dict

from ..constants import MIN_DENOMINATOR
from ..data_structures import Sample, ScenarioState, SweepRange
from ..parameters import Choice, Number, clamp
from .base import register_scenario

logger = logging.getLogger(__name__)

#: Nominal sub-step used when integrating the motor speed.
MAX_SUBSTEP_S = 0.01
#: Upper bound on sub-steps per model call.
MAX_SUBSTEPS = 1000

RAD_S_TO_RPM = 60.0 / (2.0 * math.pi)


def wrap_degrees(angle: float) -> float:
    """Wraps an angle into [-180, 180)."""
    return (angle + 180.0) % 360.0 - 180.0


# --- DC Motor ---

def dc_motor_substep(w: float, dt: float, va: float, ra: float, kt: float,
                     j: float, b: float, load_t: float) -> float:
    """
    One backward-Euler step of the motor speed, solved in closed form.

    The torque law is piecewise linear in w, so the branch is picked from the
    current armature current. In the motoring branch the speed relaxes
    monotonically towards (Kt*Va/Ra - TL) / (Kt^2/Ra + B), which never exceeds
    the no-load speed Va/Kt.
    """
    if va - kt * w >= 0.0:
        drive, damping = kt * va / ra - load_t, kt * kt / ra + b
    else:
        drive, damping = -load_t, b
    return max(0.0, (w + dt * drive / j) / (1.0 + dt * damping / j))


@register_scenario(
    "dc_motor_load",
    label="DC Motor Load Test",
    group="Motors",
    parameters=[
        Number("Va", 220.0, 0.0, 1000.0, "V", "Armature voltage"),
        Number("Ra", 1.2, 0.01, 100.0, "ohm", "Armature resistance"),
        Number("Kt", 0.12, 1e-4, 10.0, "N*m/A", "Torque / back-EMF constant"),
        Number("J", 0.08, 1e-5, 100.0, "kg*m**2", "Rotor inertia"),
        Number("B", 0.01, 0.0, 10.0, "N*m*s", "Viscous friction"),
        Number("loadT", 0.0, 0.0, 1000.0, "N*m", "Load torque"),
        Number("initSpeed", 0.0, 0.0, 10000.0, "rad/s", "Speed when the scenario starts"),
    ],
    columns=["Ia", "speed_rpm", "torque"],
    time_dependent=True,
)
def dc_motor_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Separately excited DC motor:

        Ia = (Va - Kt*w) / Ra
        Te = Kt * max(0, Ia)
        dw/dt = (Te - TL - B*w) / J,  w >= 0

    The elapsed time is split into at most MAX_SUBSTEPS implicit sub-steps of
    nominally MAX_SUBSTEP_S each (see `dc_motor_substep`).
    """
    va, ra, kt = params["Va"], params["Ra"], params["Kt"]
    j, b, load_t = params["J"], params["B"], params["loadT"]

    if not state.memo.get("dc_motor_started"):
        state.motor_speed = params["initSpeed"]
        state.memo["dc_motor_started"] = True

    elapsed = max(0.0, elapsed_s) if math.isfinite(elapsed_s) else 0.0
    # Backward Euler is stable at any step size, so a long gap stretches the
    # sub-step instead of adding work.
    substeps = min(MAX_SUBSTEPS, math.ceil(elapsed / MAX_SUBSTEP_S))
    for _ in range(substeps):
        state.motor_speed = dc_motor_substep(state.motor_speed, elapsed / substeps, va, ra, kt, j, b, load_t)

    w = state.motor_speed
    ia = (va - kt * w) / ra
    i = max(0.0, ia)
    te = kt * i
    p_in = va * i
    p_out = load_t * w
    return Sample(
        V=va,
        I=i,
        P=p_in,
        extra={
            "Ia": ia,
            "omega": w,
            "speed_rpm": w * RAD_S_TO_RPM,
            "torque": te,
            "back_emf": kt * w,
            "output_power": p_out,
            "efficiency": p_out / p_in * 100.0 if p_in > MIN_DENOMINATOR else 0.0,
        },
    )


# --- Induction Motor ---

_INDUCTION_MODES = {
    # mode: (power factor, current scale, slip)
    "no_load": (0.35, 0.1, 0.02),
    "blocked_rotor": (0.5, 1.0, 1.0),
}


@register_scenario(
    "induction_locked",
    label="Induction Motor No-Load & Blocked-Rotor Tests",
    group="Motors",
    parameters=[
        Choice("testMode", ("no_load", "blocked_rotor"), "no_load", "Which test is running"),
        Number("Vs", 230.0, 1.0, 20000.0, "V", "Phase voltage"),
        Number("freq", 50.0, 1.0, 400.0, "Hz", "Supply frequency"),
        Number("R1", 1.2, 0.001, 1000.0, "ohm", "Stator resistance"),
        Number("X1", 2.3, 0.001, 1000.0, "ohm", "Stator leakage reactance"),
        Number("R2", 1.4, 0.001, 1000.0, "ohm", "Rotor resistance (referred)"),
        Number("X2", 2.1, 0.001, 1000.0, "ohm", "Rotor leakage reactance (referred)"),
        Number("poles", 4.0, 2.0, 48.0, None, "Number of poles"),
    ],
    columns=["mode", "slip", "torque", "cos_phi", "rotor_rpm"],
)
def induction_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Per-phase series equivalent circuit Z = (R1+R2) + j(X1+X2).

    No-load: a small magnetizing current at low power factor, slip 0.02, torque
    from the air-gap power. Blocked rotor: full short-circuit current, slip 1,
    torque 3*I^2*R2 / w_sync.
    """
    mode = params["testMode"]
    vs, f = params["Vs"], params["freq"]
    r1, x1, r2, x2 = params["R1"], params["X1"], params["R2"], params["X2"]
    cos_phi, scale, slip = _INDUCTION_MODES[mode]

    z = math.hypot(r1 + r2, x1 + x2)
    i = vs / z * scale
    p = 3.0 * vs * i * cos_phi

    sync_rpm = 120.0 * f / params["poles"]
    w_sync = sync_rpm / RAD_S_TO_RPM
    if mode == "no_load":
        torque = p / w_sync
    else:
        torque = 3.0 * i * i * r2 / w_sync

    return Sample(
        V=vs,
        I=i,
        P=p,
        extra={
            "mode": mode,
            "Z": z,
            "cos_phi": cos_phi,
            "slip": slip,
            "torque": torque,
            "sync_rpm": sync_rpm,
            "rotor_rpm": sync_rpm * (1.0 - slip),
        },
    )


# --- Synchronous Motor V-Curve ---

@register_scenario(
    "synchronous_vcurve",
    label="Synchronous Motor V-Curve",
    group="Motors",
    parameters=[
        Number("Vs", 415.0, 1.0, 20000.0, "V", "Terminal phase voltage"),
        Number("Ra", 0.2, 0.0, 100.0, "ohm", "Armature resistance"),
        Number("Xs", 6.0, 0.01, 1000.0, "ohm", "Synchronous reactance"),
        Number("If", 1.0, 0.0, 10.0, "A", "Field current"),
        Number("Kf", 0.9, 0.01, 10.0, None, "Excitation EMF per ampere of field, as a fraction of Vs"),
        Number("Pload", 5000.0, 0.0, 1e7, "W", "Mechanical load (three-phase)"),
    ],
    columns=["If", "Ia", "pf", "region"],
    default_sweep=SweepRange(param="If", start=0.2, stop=3.0, steps=141),
)
def synchronous_vcurve_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Torque angle from the round-rotor power equation,

        delta = asin(clamp(P * Xs / (3 * V * Ef), -1, 1)),

    then the armature current phasor Ia = (V - Ef/-delta) / (Ra + jXs). Sweeping
    the field current traces the V-curve: lagging when under-excited, leading
    when over-excited.
    """
    vs, ra, xs = params["Vs"], params["Ra"], params["Xs"]
    field = params["If"]
    ef = max(field * params["Kf"] * vs, MIN_DENOMINATOR)
    p_load = params["Pload"]

    ratio = p_load * xs / (3.0 * vs * ef)
    delta = math.asin(clamp(ratio, -1.0, 1.0))

    ia = (vs - cmath.rect(ef, -delta)) / complex(ra, xs)
    angle = cmath.phase(ia) if abs(ia) > MIN_DENOMINATOR else 0.0
    pf = math.cos(angle)
    if abs(angle) < 1e-3:
        region = "Unity"
    elif angle < 0.0:
        region = "Lagging"
    else:
        region = "Leading"

    ia_mag = abs(ia)
    return Sample(
        V=vs,
        I=ia_mag,
        P=3.0 * vs * ia_mag * pf,
        extra={
            "If": field,
            "Ef": ef,
            "delta_deg": math.degrees(delta),
            "Ia": ia_mag,
            "pf": pf,
            "region": region,
            "pull_out": abs(ratio) > 1.0,
        },
    )


# --- Alternator Synchronization ---

SYNC_FREQ_TOLERANCE_HZ = 0.05
SYNC_PHASE_TOLERANCE_DEG = 5.0


@register_scenario(
    "synchronization",
    label="Alternator Synchronization",
    group="Machines",
    parameters=[
        Number("freqBus", 50.0, 1.0, 400.0, "Hz", "Bus frequency"),
        Number("freqAlt", 49.5, 1.0, 400.0, "Hz", "Incoming alternator frequency"),
        Number("phaseOffset", 0.0, -360.0, 360.0, "degree", "Initial phase offset"),
        Number("Vbus", 230.0, 0.0, 20000.0, "V", "Bus voltage amplitude"),
        Number("Valt", 230.0, 0.0, 20000.0, "V", "Alternator voltage amplitude"),
        Number("governor_gain", 0.2, 0.0, 10.0, "1/s", "Rate at which the governor pulls the alternator onto the bus"),
        Number("Zsync", 10.0, 0.01, 1e4, "ohm", "Synchronizing impedance"),
    ],
    columns=["delta_f", "phase", "synced"],
    time_dependent=True,
)
def synchronization_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Synchroscope view of an alternator being paralleled with a bus.

    The phase between the two machines drifts at the slip frequency,
    phase_drift += (fAlt - fBus) * 360 * dt, and the breaker may close
    (synchronized) only when |fBus - fAlt| < 0.05 Hz and |phase| < 5 deg.
    V is the instantaneous voltage across the open breaker; I the circulating
    current once synchronized.
    """
    f_bus = params["freqBus"]
    f_alt = params["freqAlt"]
    freq_diff = f_bus - f_alt
    f_alt += freq_diff * elapsed_s * params["governor_gain"]

    state.phase_drift = wrap_degrees(state.phase_drift + (f_alt - f_bus) * 360.0 * elapsed_s)
    phase = wrap_degrees(params["phaseOffset"] + state.phase_drift)

    t = state.time_s
    v_bus = params["Vbus"] * math.sin(2.0 * math.pi * f_bus * t)
    v_alt = params["Valt"] * math.sin(2.0 * math.pi * f_alt * t + math.radians(phase))
    dv = v_alt - v_bus

    synced = abs(freq_diff) < SYNC_FREQ_TOLERANCE_HZ and abs(phase) < SYNC_PHASE_TOLERANCE_DEG
    i = abs(dv) / params["Zsync"] if synced else 0.0
    return Sample(
        V=dv,
        I=i,
        P=dv * i,
        extra={
            "freqBus": f_bus,
            "freqAlt": f_alt,
            "delta_f": freq_diff,
            "phase": phase,
            "synced": synced,
            "lamp_brightness": abs(math.sin(math.radians(phase) / 2.0)),
        },
    )
