# tests/test_simulation/test_sweep.py
import math

import numpy as np
import pytest

from labsim_core import Sample, ScenarioState, SimulationRunError, SweepRange, get_scenario, run_sweep
from labsim_core.scenarios.circuits import resonant_frequency
from labsim_core.simulation import SweepConfigError, SweepGenerator, parse_sweep_config, run_sweep_family


class TestRunSweep:

    def test_linear_sweep_is_evenly_spaced(self):
        curve = run_sweep("generic", {}, SweepRange(param="Vs", start=-1.0, stop=1.0, steps=201, y_field="V"))
        assert len(curve) == 201
        x = curve.x
        assert np.all(np.diff(x) > 0)
        np.testing.assert_allclose(np.diff(x), 0.01, atol=1e-12)
        assert x[0] == -1.0 and x[-1] == 1.0
        np.testing.assert_allclose(curve.y, x)

    def test_single_step_sweep(self):
        curve = run_sweep("generic", {}, SweepRange(param="Vs", start=3.0, stop=7.0, steps=1, y_field="V"))
        assert len(curve) == 1
        assert curve[0].x == 3.0

    def test_rlc_peak_within_one_step_of_resonance(self):
        model = get_scenario("rlc_resonance")
        sweep_range = model.default_sweep
        curve = run_sweep(model, model.defaults(), sweep_range)
        f0 = resonant_frequency(10e-3, 0.01e-6)
        step = (sweep_range.stop - sweep_range.start) / (sweep_range.steps - 1)
        peak = curve.peak()
        assert abs(peak.x - f0) <= step

    @pytest.mark.parametrize("inductance_mh, capacitance_uf", [(10.0, 0.01), (100.0, 1.0)])
    def test_rlc_peak_from_one_hertz_to_ten_times_resonance(self, inductance_mh, capacitance_uf):
        f0 = resonant_frequency(inductance_mh * 1e-3, capacitance_uf * 1e-6)
        sweep_range = SweepRange(param="freq", start=1.0, stop=10.0 * f0, steps=201, y_field="I")
        curve = run_sweep("rlc_resonance", {"L": inductance_mh, "C": capacitance_uf}, sweep_range)
        step = (sweep_range.stop - sweep_range.start) / (sweep_range.steps - 1)
        assert len(curve) == 201
        assert abs(curve.peak().x - f0) <= step

    def test_family_values_may_be_numpy_scalars(self):
        curves = run_sweep_family(
            "bjt_output", {}, SweepRange(param="Vcc", start=0.0, stop=10.0, steps=21),
            family_param="Ib", family_values=np.array([1e-5, 2e-5]),
        )
        saturation_currents = [curves[ib].y[-1] for ib in sorted(curves)]
        assert saturation_currents == pytest.approx([1e-3, 2e-3], rel=1e-6)

    def test_non_finite_points_are_skipped(self):
        def partly_undefined(params, state, elapsed_s):
            x = params["x"]
            current = math.nan if x < 0 else x
            return Sample(V=x, I=current, P=0.0)

        curve = run_sweep(partly_undefined, {}, SweepRange(param="x", start=-1.0, stop=1.0, steps=5))
        assert [p.x for p in curve] == [0.0, 0.5, 1.0]

    def test_static_scenarios_hold_time_fixed(self):
        state = ScenarioState.fresh()
        run_sweep("rlc_resonance", {}, SweepRange(param="freq", start=10.0, stop=100.0, steps=5), state=state, time_step_s=0.1)
        assert state.time_s == 0.0

    def test_time_dependent_scenarios_advance_time(self):
        state = ScenarioState.fresh()
        run_sweep("transformer_load", {}, SweepRange(param="load", start=0.0, stop=1.0, steps=5), state=state, time_step_s=0.1)
        assert state.time_s == pytest.approx(0.5)

    def test_extra_field_as_response(self):
        curve = run_sweep("transformer_load", {}, SweepRange(param="load", start=0.1, stop=1.2, steps=12, y_field="efficiency"))
        assert len(curve) == 12
        assert all(0.0 < y < 100.0 for y in curve.y)

    @pytest.mark.parametrize("sweep_range", [
        SweepRange(param="Vs", start=0.0, stop=1.0, steps=0),
        SweepRange(param="", start=0.0, stop=1.0, steps=10),
        SweepRange(param="Vs", start=math.nan, stop=1.0, steps=10),
    ])
    def test_invalid_range_raises_user_facing_error(self, sweep_range):
        with pytest.raises(SimulationRunError, match="Sweep Configuration Error"):
            run_sweep("generic", {}, sweep_range)

    def test_sweep_family(self):
        curves = run_sweep_family(
            "bjt_output", {}, SweepRange(param="Vcc", start=0.0, stop=10.0, steps=21),
            family_param="Ib", family_values=[1e-5, 2e-5, 4e-5],
        )
        assert sorted(curves) == [1e-5, 2e-5, 4e-5]
        saturation_currents = [curves[ib].y[-1] for ib in sorted(curves)]
        assert saturation_currents == pytest.approx([1e-3, 2e-3, 4e-3], rel=1e-6)


class TestSweepGenerator:

    def test_one_point_per_step(self, state):
        generator = SweepGenerator(get_scenario("generic"), {}, SweepRange(param="Vs", start=0.0, stop=4.0, steps=5, y_field="V"))
        for n in range(5):
            assert not generator.done
            point = generator.step(state)
            assert point.x == pytest.approx(float(n))
            assert len(generator.curve()) == n + 1
        assert generator.done
        assert generator.progress == 1.0

    def test_completed_sweep_holds_final_point(self, state):
        generator = SweepGenerator(get_scenario("generic"), {}, SweepRange(param="Vs", start=0.0, stop=1.0, steps=2, y_field="V"))
        generator.step(state)
        generator.step(state)
        for _ in range(3):
            point = generator.step(state)
            assert point.x == 1.0
        assert len(generator.curve()) == 2

    def test_restart(self, state):
        generator = SweepGenerator(get_scenario("generic"), {}, SweepRange(param="Vs", start=0.0, stop=1.0, steps=2))
        generator.step(state)
        generator.restart()
        assert generator.progress == 0.0
        assert len(generator.curve()) == 0

    def test_base_parameters_are_not_mutated(self, state):
        params = {"Vs": 1.0, "load": 2.0}
        generator = SweepGenerator(get_scenario("generic"), params, SweepRange(param="Vs", start=5.0, stop=6.0, steps=2))
        generator.step(state)
        assert params == {"Vs": 1.0, "load": 2.0}


class TestParseSweepConfig:

    def test_quantity_strings_are_converted(self):
        sweep_range = parse_sweep_config({"param": "freq", "start": "1 kHz", "stop": "10 kHz", "steps": 10}, unit="Hz")
        assert sweep_range.start == pytest.approx(1000.0)
        assert sweep_range.stop == pytest.approx(10000.0)
        assert sweep_range.y_field == "I"

    def test_bare_numbers_are_taken_in_target_unit(self):
        sweep_range = parse_sweep_config({"param": "L", "start": 1, "stop": "0.05 H", "steps": 5, "y_field": "V_L"}, unit="mH")
        assert sweep_range.start == 1.0
        assert sweep_range.stop == pytest.approx(50.0)
        assert sweep_range.y_field == "V_L"

    @pytest.mark.parametrize("raw, unit", [
        ({}, None),
        ({"param": "freq", "start": 1, "steps": 10}, "Hz"),
        ({"param": "freq", "start": "1 V", "stop": 10, "steps": 10}, "Hz"),
        ({"param": "freq", "start": "abc", "stop": 10, "steps": 10}, "Hz"),
        ({"param": "freq", "start": 1, "stop": 10, "steps": 0}, "Hz"),
    ])
    def test_invalid_configs(self, raw, unit):
        with pytest.raises(SweepConfigError):
            parse_sweep_config(raw, unit=unit, scenario="rlc_resonance")
