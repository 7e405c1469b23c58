# tests/test_simulation/test_solver.py
import math

import pytest

from labsim_core.simulation.solver import (
    OperatingPoint,
    bisect_root,
    bjt_collector_current,
    default_widened_bracket,
    diode_current,
    mosfet_drain_current,
    solve_bjt_loop,
    solve_diode_loop,
    solve_mosfet_loop,
    thermal_voltage,
)


class TestBisection:

    def test_simple_root(self):
        op = bisect_root(lambda v: v - 1.25, (0.0, 5.0))
        assert isinstance(op, OperatingPoint)
        assert op.converged and op.bracketed
        assert op.value == pytest.approx(1.25, abs=1e-8)

    def test_bracket_order_does_not_matter(self):
        op = bisect_root(lambda v: v - 2.0, (5.0, 0.0))
        assert op.value == pytest.approx(2.0, abs=1e-8)

    def test_widens_once_when_initial_bracket_misses(self):
        op = bisect_root(lambda v: v - 4.0, (0.0, 1.0), widen_to=(-5.0, 10.0))
        assert op.converged and op.bracketed
        assert op.value == pytest.approx(4.0, abs=1e-8)

    def test_reports_missing_bracket(self):
        op = bisect_root(lambda v: v * v + 1.0, (0.0, 1.0), widen_to=(-5.0, 5.0))
        assert not op.converged
        assert not op.bracketed
        assert op.iterations == 0
        assert math.isfinite(op.value) and math.isfinite(op.residual)

    def test_iteration_cap_is_flagged(self):
        op = bisect_root(lambda v: v - 1.0 / 3.0, (0.0, 1.0), max_iter=10, tol=0.0)
        assert op.bracketed
        assert not op.converged
        assert op.iterations == 10
        assert op.value == pytest.approx(1.0 / 3.0, abs=1e-3)

    def test_root_on_endpoint(self):
        op = bisect_root(lambda v: v, (0.0, 3.0))
        assert op.converged
        assert op.value == 0.0

    def test_default_widened_bracket(self):
        assert default_widened_bracket(1.0) == (-5.0, 5.0)
        assert default_widened_bracket(20.0) == (-5.0, 22.0)


class TestDeviceLaws:

    def test_thermal_voltage_at_room_temperature(self):
        assert thermal_voltage(300.0) == pytest.approx(0.025852, rel=1e-4)

    def test_diode_current_exponent_is_clamped(self):
        assert math.isfinite(diode_current(1e6, 1e-9, 1.0))
        assert diode_current(-1e6, 1e-9, 1.0) == pytest.approx(-1e-9)

    def test_bjt_regions(self):
        assert bjt_collector_current(0.0, 1e-5, 100.0, 0.2) == 0.0
        assert bjt_collector_current(0.1, 1e-5, 100.0, 0.2) == pytest.approx(0.5e-3)
        assert bjt_collector_current(5.0, 1e-5, 100.0, 0.2) == pytest.approx(1e-3)

    def test_mosfet_regions(self):
        assert mosfet_drain_current(5.0, 2.0, 2e-3, 2.5) == 0.0
        assert mosfet_drain_current(0.5, 3.5, 2e-3, 2.5) == pytest.approx(2e-3 * (1.0 * 0.5 - 0.125))
        assert mosfet_drain_current(5.0, 3.5, 2e-3, 2.5) == pytest.approx(1e-3)


class TestLoopSolvers:

    def test_diode_loop_residual(self):
        vs, r, i_s, n, t = 5.0, 1000.0, 1e-9, 1.8, 300.0
        op = solve_diode_loop(vs, r, i_s, n, t)
        assert op.converged
        vd = op.value
        residual = vd + r * diode_current(vd, i_s, n, t) - vs
        assert abs(residual) < 1e-6
        assert 0.3 < vd < 1.0

    def test_diode_loop_reverse_bias(self):
        op = solve_diode_loop(-5.0, 1000.0, 1e-9, 1.8, 300.0)
        assert op.converged
        assert op.value == pytest.approx(-5.0, abs=1e-4)

    def test_bjt_loop_active_region(self):
        op = solve_bjt_loop(10.0, 100.0, 1e-5, 100.0, 0.2)
        assert op.converged
        assert op.value == pytest.approx(9.9, abs=1e-6)

    def test_bjt_loop_saturates_with_large_collector_resistor(self):
        op = solve_bjt_loop(5.0, 1e5, 1e-4, 100.0, 0.2)
        assert op.converged
        assert op.value < 0.2

    def test_mosfet_loop_saturation(self):
        op = solve_mosfet_loop(10.0, 100.0, 3.5, 2e-3, 2.5)
        assert op.converged
        assert op.value == pytest.approx(9.9, abs=1e-6)
