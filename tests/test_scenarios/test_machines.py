# tests/test_scenarios/test_machines.py
import time

import pytest

from labsim_core import ScenarioState, SweepRange, get_scenario, run_sweep
from labsim_core.scenarios import machines
from labsim_core.scenarios.machines import wrap_degrees


class TestDcMotor:

    def test_speed_rises_towards_no_load_speed(self, state):
        model = get_scenario("dc_motor_load")
        speeds = []
        for _ in range(50):
            state.time_s += 0.1
            speeds.append(model({}, state, 0.1).extra["omega"])
        assert all(b > a for a, b in zip(speeds, speeds[1:]))
        # Steady state: Kt*Va / (Kt^2 + B*Ra) = 1000 rad/s.
        assert speeds[-1] < 1000.0
        assert speeds[-1] > 500.0

    def test_current_falls_as_back_emf_builds(self, state, run_steps):
        model = get_scenario("dc_motor_load")
        first = run_steps(model, {}, state, 1)
        later = run_steps(model, {}, state, 20)
        assert later.I < first.I
        assert later.extra["back_emf"] > first.extra["back_emf"]

    def test_initial_speed_applied_once(self):
        model = get_scenario("dc_motor_load")
        state = ScenarioState.fresh()
        sample = model({"initSpeed": 500.0}, state, 0.0)
        assert sample.extra["omega"] == pytest.approx(500.0)
        model({"initSpeed": 500.0}, state, 0.5)
        assert state.motor_speed != pytest.approx(500.0)

    def test_large_elapsed_is_substepped(self, state):
        sample = get_scenario("dc_motor_load")({}, state, 5.0)
        assert sample.is_finite()
        assert 0.0 < sample.extra["omega"] < 1000.0

    def test_stiff_motor_never_exceeds_no_load_speed(self, state):
        # Mechanical time constant J*Ra/Kt^2 = 10 us, far below the sub-step.
        params = {"Va": 220.0, "Ra": 0.1, "Kt": 1.0, "J": 1e-4, "B": 0.0, "loadT": 0.0}
        model = get_scenario("dc_motor_load")
        speeds = []
        for _ in range(20):
            state.time_s += 0.06
            speeds.append(model(params, state, 0.06).extra["omega"])
        assert max(speeds) <= 220.0 * (1.0 + 1e-9)
        assert speeds[-1] == pytest.approx(220.0, rel=1e-6)

    def test_overspeed_start_decays(self):
        model = get_scenario("dc_motor_load")
        state = ScenarioState.fresh()
        params = {"initSpeed": 5000.0, "Kt": 1.0, "B": 0.5}
        first = model(params, state, 0.1).extra["omega"]
        later = model(params, state, 10.0).extra["omega"]
        assert later < first < 5000.0

    def test_long_gap_has_bounded_substeps(self, state, monkeypatch):
        calls = []
        original = machines.dc_motor_substep

        def counting_substep(*args):
            calls.append(args[1])
            return original(*args)

        monkeypatch.setattr(machines, "dc_motor_substep", counting_substep)
        sample = get_scenario("dc_motor_load")({}, state, 7200.0)
        assert len(calls) <= machines.MAX_SUBSTEPS
        assert sum(calls) == pytest.approx(7200.0)
        # Two hours is many time constants: the motor has settled at Kt*Va / (Kt^2 + B*Ra).
        assert sample.extra["omega"] == pytest.approx(1000.0, rel=1e-6)

    def test_long_gap_step_returns_quickly(self, session_factory):
        session = session_factory("dc_motor_load")
        started = time.perf_counter()
        sample = session.step(7200.0)
        assert time.perf_counter() - started < 0.5
        assert sample.is_finite()

    def test_heavy_load_never_reverses(self, state, run_steps):
        sample = run_steps(get_scenario("dc_motor_load"), {"loadT": 500.0}, state, 10)
        assert sample.extra["omega"] == 0.0


class TestInductionMotor:

    def test_no_load(self, state):
        sample = get_scenario("induction_locked")({}, state, 0.0)
        assert sample.extra["slip"] == pytest.approx(0.02)
        assert sample.extra["sync_rpm"] == pytest.approx(1500.0)
        assert sample.extra["rotor_rpm"] == pytest.approx(1470.0)

    def test_blocked_rotor(self, state):
        no_load = get_scenario("induction_locked")({}, state, 0.0)
        blocked = get_scenario("induction_locked")({"testMode": "blocked_rotor"}, state, 0.0)
        assert blocked.extra["slip"] == 1.0
        assert blocked.extra["rotor_rpm"] == 0.0
        assert blocked.I == pytest.approx(no_load.I * 10.0)
        z = ((1.2 + 1.4) ** 2 + (2.3 + 2.1) ** 2) ** 0.5
        assert blocked.I == pytest.approx(230.0 / z)


class TestSynchronousVCurve:

    @pytest.mark.parametrize("field_current, region", [(0.5, "Lagging"), (3.0, "Leading")])
    def test_region_follows_excitation(self, state, field_current, region):
        sample = get_scenario("synchronous_vcurve")({"If": field_current}, state, 0.0)
        assert sample.extra["region"] == region

    def test_v_curve_has_a_minimum(self):
        model = get_scenario("synchronous_vcurve")
        curve = run_sweep(model, {}, model.default_sweep)
        minimum = min(range(len(curve)), key=lambda n: curve[n].y)
        assert 0 < minimum < len(curve) - 1
        assert curve[0].y > curve[minimum].y < curve[len(curve) - 1].y


class TestSynchronization:

    def test_matched_alternator_is_synced(self, state, run_steps):
        sample = run_steps(get_scenario("synchronization"), {"freqAlt": 50.0}, state, 5)
        assert sample.extra["synced"] is True
        assert sample.extra["phase"] == pytest.approx(0.0)

    def test_slipping_alternator_is_not_synced(self, state, run_steps):
        sample = run_steps(get_scenario("synchronization"), {}, state, 5)
        assert sample.extra["synced"] is False
        assert sample.I == 0.0

    def test_phase_offset_blocks_sync(self, state):
        sample = get_scenario("synchronization")({"freqAlt": 50.0, "phaseOffset": 30.0}, state, 0.06)
        assert sample.extra["synced"] is False

    def test_phase_stays_wrapped(self, state, run_steps):
        model = get_scenario("synchronization")
        for _ in range(200):
            sample = run_steps(model, {"freqAlt": 47.0}, state, 1)
            assert -180.0 <= sample.extra["phase"] < 180.0

    @pytest.mark.parametrize("angle, wrapped", [(0.0, 0.0), (190.0, -170.0), (180.0, -180.0), (-190.0, 170.0), (720.0, 0.0)])
    def test_wrap_degrees(self, angle, wrapped):
        assert wrap_degrees(angle) == pytest.approx(wrapped)
