# src/labsim_core/scenarios/energy.py
"""
Real-world energy scenarios: a household carbon-footprint estimator and an
appliance load calculator.

Both report rates rather than electrical quantities, so their V/I/P convention
is documented per model.
"""
import logging
import math
from typing import Any, Dict, List, Mapping

from ..data_structures import Sample, ScenarioState
from ..parameters import Number
from .base import register_scenario

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24.0
HOURS_PER_MONTH = 30.0 * 24.0
HOURS_PER_WEEK = 7.0 * 24.0
HOURS_PER_YEAR = 365.0 * 24.0

#: Assumed cruise speed used to turn flight hours into flown distance.
FLIGHT_SPEED_KM_PER_H = 800.0

DEFAULT_FACTORS: Dict[str, Any] = {
    "car_g_per_km": 180.0,
    "bus_g_per_km": 80.0,
    "train_g_per_km": 45.0,
    "electricity_g_per_kwh": 475.0,
    "heating_g_per_kwh": 250.0,
    "flight_g_per_km": 120.0,
    "diet_kg_per_week": {
        "omnivore": 14.0,
        "vegetarian": 6.0,
        "vegan": 5.0,
        "pescatarian": 8.0,
    },
}

DEFAULT_ACTIVITIES = (
    {"id": "a1", "type": "transport", "subtype": "car", "label": "Daily commute", "value": 30.0},
    {"id": "a2", "type": "electricity", "label": "Electricity", "value": 300.0},
    {"id": "a3", "type": "diet", "subtype": "omnivore", "label": "Diet (omnivore)", "value": 14.0},
)


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def activity_g_per_hour(activity: Mapping[str, Any], factors: Mapping[str, Any]) -> float:
    """
    Instantaneous emission rate of one activity in gCO2e per hour.

    Units of `value` by type: transport km/day, electricity and heating kWh/month,
    flight hours/year, diet kgCO2e/week, other kgCO2e/month. `factorOverride`
    replaces the default factor for the activity's type. Unknown types emit
    nothing.
    """
    kind = activity.get("type")
    value = max(0.0, _as_float(activity.get("value")))
    override = activity.get("factorOverride")
    factor = _as_float(override, math.nan) if override is not None else math.nan

    if kind == "transport":
        vehicle = activity.get("subtype") or "car"
        default = factors.get(f"{vehicle}_g_per_km", factors["train_g_per_km"])
        return value / HOURS_PER_DAY * (factor if math.isfinite(factor) else default)
    if kind in ("electricity", "heating"):
        default = factors[f"{kind}_g_per_kwh"]
        return value / HOURS_PER_MONTH * (factor if math.isfinite(factor) else default)
    if kind == "flight":
        default = factors["flight_g_per_km"] * FLIGHT_SPEED_KM_PER_H
        return value / HOURS_PER_YEAR * (factor if math.isfinite(factor) else default)
    if kind == "diet":
        if activity.get("value") is None:
            value = factors["diet_kg_per_week"].get(activity.get("subtype") or "omnivore", 0.0)
        return value * 1000.0 / HOURS_PER_WEEK
    if kind == "other":
        return value * 1000.0 / HOURS_PER_MONTH
    logger.debug(f"Ignoring activity of unknown type '{kind}'.")
    return 0.0


def _merge_factors(overrides: Any) -> Dict[str, Any]:
    factors = dict(DEFAULT_FACTORS)
    factors["diet_kg_per_week"] = dict(DEFAULT_FACTORS["diet_kg_per_week"])
    if isinstance(overrides, Mapping):
        for key, value in overrides.items():
            if key == "diet_kg_per_week" and isinstance(value, Mapping):
                factors[key].update({k: _as_float(v) for k, v in value.items()})
            elif key in factors:
                factors[key] = _as_float(value, factors[key])
    return factors


@register_scenario(
    "footprint",
    label="Carbon Footprint Calculator",
    group="Energy",
    columns=["g_per_hour", "g_per_second", "kg_per_year"],
)
def footprint_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    Sums the emission rate of every activity in `activities` (a list of dicts
    with `id`, `type`, `subtype`, `value`, optional `factorOverride`) using the
    `factors` overrides merged over DEFAULT_FACTORS.

    Convention: V = total g/h, I = total g/s, P = total kg/yr. The per-activity
    breakdown is reported as `g_per_hour.<id>`. Every tick recomputes the rates
    from the current activities; nothing is integrated over time.
    """
    activities = params.get("activities")
    if not isinstance(activities, (list, tuple)):
        activities = DEFAULT_ACTIVITIES
    factors = _merge_factors(params.get("factors"))

    breakdown: Dict[str, float] = {}
    for n, activity in enumerate(activities, start=1):
        if not isinstance(activity, Mapping):
            continue
        key = str(activity.get("id") or f"activity{n}")
        breakdown[key] = breakdown.get(key, 0.0) + activity_g_per_hour(activity, factors)

    g_per_hour = sum(breakdown.values())
    g_per_second = g_per_hour / 3600.0
    kg_per_year = g_per_hour * HOURS_PER_YEAR / 1000.0

    extra: Dict[str, Any] = {
        "g_per_hour": g_per_hour,
        "g_per_second": g_per_second,
        "kg_per_year": kg_per_year,
    }
    if breakdown:
        extra["top_source"] = max(breakdown, key=breakdown.get)
    extra.update({f"g_per_hour.{key}": value for key, value in breakdown.items()})
    return Sample(V=g_per_hour, I=g_per_second, P=kg_per_year, extra=extra)


DEFAULT_APPLIANCES = (
    {"name": "LED lighting", "baseWatts": 10.0, "quantity": 6, "enabled": True},
    {"name": "Refrigerator", "baseWatts": 150.0, "quantity": 1, "enabled": True},
    {"name": "Television", "baseWatts": 100.0, "quantity": 1, "enabled": True},
    {"name": "Air conditioner", "baseWatts": 1500.0, "quantity": 1, "enabled": False},
)


def appliance_watts(appliances: List[Mapping[str, Any]]) -> float:
    """Total draw of the enabled appliances, baseWatts x quantity each."""
    total = 0.0
    for appliance in appliances:
        if not isinstance(appliance, Mapping) or not appliance.get("enabled", True):
            continue
        quantity = max(0.0, _as_float(appliance.get("quantity"), 1.0))
        total += max(0.0, _as_float(appliance.get("baseWatts"))) * quantity
    return total


@register_scenario(
    "appliance_energy",
    label="Household Appliance Energy",
    group="Energy",
    parameters=[
        Number("Vs", 230.0, 1.0, 1000.0, "V", "Supply voltage"),
        Number("efficiencyFactor", 1.0, 0.5, 1.0, None, "Consumption multiplier (0.8 = 20% savings)"),
    ],
    columns=["kW", "daily_kWh", "monthly_kWh"],
)
def appliance_energy_model(params: Dict[str, Any], state: ScenarioState, elapsed_s: float) -> Sample:
    """
    P = sum(baseWatts x quantity over enabled appliances) x efficiencyFactor,
    drawn from the supply: V = Vs, I = P / Vs.
    """
    appliances = params.get("appliances")
    if not isinstance(appliances, (list, tuple)):
        appliances = DEFAULT_APPLIANCES
    watts = appliance_watts(list(appliances)) * params["efficiencyFactor"]
    vs = params["Vs"]
    kw = watts / 1000.0
    return Sample(
        V=vs,
        I=watts / vs,
        P=watts,
        extra={"kW": kw, "daily_kWh": kw * 24.0, "monthly_kWh": kw * 24.0 * 30.0},
    )
