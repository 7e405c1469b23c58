# tests/conftest.py
import pytest

from labsim_core import LabSession, ScenarioState, StepClock


class ManualTime:
    """A controllable time source for clock-driven tests."""
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def manual_time():
    return ManualTime()


@pytest.fixture
def clock(manual_time):
    return StepClock(min_interval_s=0.06, time_source=manual_time)


@pytest.fixture
def state():
    return ScenarioState.fresh(seed=1234)


@pytest.fixture
def session_factory(manual_time):
    """Builds sessions driven by the shared manual time source."""
    def _make(scenario_id="generic", params=None, **kwargs):
        clock = StepClock(kwargs.pop("min_interval_s", 0.06), time_source=manual_time)
        return LabSession(scenario_id, params, clock=clock, **kwargs)
    return _make


def _run_steps(model, params, state, steps, dt=0.06):
    """Calls a model `steps` times, advancing simulated time like the engine does."""
    sample = None
    for _ in range(steps):
        if model.time_dependent:
            state.time_s += dt
        sample = model(params, state, dt)
    return sample


@pytest.fixture
def run_steps():
    return _run_steps


@pytest.fixture
def bench_scenario():
    """
    Registers a throwaway scenario whose output is controlled through its
    parameters: `bad=1` makes V non-finite, `tag` is copied into the extras.
    """
    from labsim_core import SCENARIO_REGISTRY, Sample, register_scenario
    from labsim_core.parameters import Number

    @register_scenario(
        "test_bench",
        label="Test bench",
        group="Tests",
        parameters=[Number("level", 1.0, 0.0, 10.0), Number("bad", 0.0, 0.0, 1.0)],
        columns=["tag", "maybe"],
        time_dependent=True,
    )
    def bench_model(params, state, elapsed_s):
        v = float("nan") if params["bad"] >= 1.0 else params["level"]
        return Sample(V=v, I=state.time_s, P=0.0, extra={"tag": params.get("tag", "none")})

    yield SCENARIO_REGISTRY["test_bench"]
    SCENARIO_REGISTRY.pop("test_bench", None)
