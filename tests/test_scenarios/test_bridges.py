# tests/test_scenarios/test_bridges.py
import pytest

from labsim_core import get_scenario
from labsim_core.scenarios.bridges import solve_bridge, wien_frequency


class TestWheatstone:

    def test_balanced_bridge_has_no_galvanometer_current(self, state):
        sample = get_scenario("wheatstone")({"R1": 1000, "R2": 1000, "R3": 1000, "Rx": 1000}, state, 0.0)
        assert abs(sample.extra["galvI"]) < 1e-9
        assert sample.extra["balanced"] is True
        assert sample.extra["Rx_calc"] == pytest.approx(1000.0)

    def test_unbalanced_bridge(self, state):
        sample = get_scenario("wheatstone")({}, state, 0.0)
        assert sample.extra["balanced"] is False
        assert sample.I > 0.0
        assert sample.I == pytest.approx(abs(sample.extra["galvI"]))

    def test_galvanometer_current_matches_thevenin(self, state):
        sample = get_scenario("wheatstone")({"Rx": 400, "Rd": 50}, state, 0.0)
        # Left divider at Vs/2; right divider at Vs*Rx/(R3+Rx).
        vth = 5.0 * (1000 * 400 - 1000 * 1000) / (2000 * 1400)
        rth = 500.0 + 1000.0 * 400.0 / 1400.0
        assert sample.extra["Vth"] == pytest.approx(vth)
        assert sample.extra["galvI"] == pytest.approx(vth / (rth + 50.0))

    def test_balance_tolerance(self, state):
        model = get_scenario("wheatstone")
        params = {"R1": 1000, "R2": 1000, "R3": 1000, "Rx": 1000.5}
        assert model(params, state, 0.0).extra["balanced"] is True
        assert model({**params, "tolerance": 1e-6}, state, 0.0).extra["balanced"] is False


class TestMaxwell:

    def test_default_coil_is_balanced(self, state):
        sample = get_scenario("maxwell")({}, state, 0.0)
        assert sample.extra["Lx_calc"] == pytest.approx(50.0)
        assert sample.extra["Rx_calc"] == pytest.approx(500.0)
        assert sample.extra["balanced"] is True
        assert sample.extra["detector_current"] < 1e-12

    def test_mismatched_coil_unbalances(self, state):
        sample = get_scenario("maxwell")({"Lx_coil": 80.0}, state, 0.0)
        assert sample.extra["balanced"] is False
        assert sample.extra["detector_current"] > 0.0

    def test_balance_is_frequency_independent(self, state):
        model = get_scenario("maxwell")
        for freq in (50.0, 1000.0, 20000.0):
            assert model({"freq": freq}, state, 0.0).extra["balanced"] is True


class TestWien:

    def test_balance_at_f0(self, state):
        sample = get_scenario("wien_freq")({}, state, 0.0)
        assert sample.extra["f0"] == pytest.approx(wien_frequency(1e4, 1e4, 1e-7, 1e-7))
        assert sample.extra["freq"] == pytest.approx(sample.extra["f0"])
        assert sample.extra["balanced"] is True

    def test_off_frequency_unbalances(self, state):
        sample = get_scenario("wien_freq")({"freq": 300.0}, state, 0.0)
        assert sample.extra["balanced"] is False
        assert sample.extra["detector_current"] > 0.0

    def test_detector_minimum_near_f0(self):
        from labsim_core import SweepRange, run_sweep
        model = get_scenario("wien_freq")
        curve = run_sweep(model, {}, SweepRange(param="freq", start=10.0, stop=1000.0, steps=991, y_field="detector_current"))
        minimum = min(curve, key=lambda p: p.y)
        assert minimum.x == pytest.approx(wien_frequency(1e4, 1e4, 1e-7, 1e-7), abs=1.0)

    def test_instantaneous_excitation(self, state):
        state.time_s = 1.0 / (4.0 * wien_frequency(1e4, 1e4, 1e-7, 1e-7))
        sample = get_scenario("wien_freq")({}, state, 0.0)
        assert sample.V == pytest.approx(10.0)


class TestSolveBridge:

    def test_degenerate_arms_stay_finite(self):
        reading = solve_bridge(0.0, 0.0, 0.0, 0.0, 5.0, 0.0)
        assert reading.detector_current == 0
        assert reading.balance_error == 0.0
