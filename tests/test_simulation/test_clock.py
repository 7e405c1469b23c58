# tests/test_simulation/test_clock.py
import pytest

from labsim_core import StepClock


class TestStepClock:

    def test_first_advance_only_establishes_reference(self, clock, manual_time):
        assert clock.advance() is None
        manual_time.advance(0.1)
        assert clock.advance() == pytest.approx(0.1)

    def test_no_step_before_min_interval(self, clock, manual_time):
        clock.advance()
        manual_time.advance(0.02)
        assert clock.advance() is None

    def test_short_deltas_accumulate(self, clock, manual_time):
        clock.advance()
        for _ in range(3):
            manual_time.advance(0.025)
            result = clock.advance()
        # 0.025 + 0.025 did not fire; the third callback sees the carried total.
        assert result == pytest.approx(0.075)

    def test_explicit_now_overrides_time_source(self):
        clock = StepClock(min_interval_s=0.5, time_source=lambda: 0.0)
        assert clock.advance(now=10.0) is None
        assert clock.advance(now=10.4) is None
        assert clock.advance(now=11.0) == pytest.approx(1.0)

    def test_paused_clock_never_fires(self, clock, manual_time):
        clock.advance()
        clock.pause()
        assert clock.paused
        for _ in range(5):
            manual_time.advance(10.0)
            assert clock.advance() is None

    def test_resume_after_long_pause_has_no_catch_up_spike(self, clock, manual_time):
        clock.advance()
        manual_time.advance(0.1)
        assert clock.advance() == pytest.approx(0.1)

        clock.pause()
        manual_time.advance(3600.0)
        clock.resume()
        assert not clock.paused

        manual_time.advance(0.5)
        elapsed = clock.advance()
        assert elapsed is not None
        assert elapsed <= clock.min_interval_s

    def test_resume_without_intermediate_advance_rebases(self, clock, manual_time):
        clock.advance()
        clock.pause()
        manual_time.advance(100.0)
        clock.resume()
        manual_time.advance(0.01)
        assert clock.advance() is None

    def test_backwards_time_rebases(self, clock, manual_time):
        clock.advance()
        manual_time.advance(-5.0)
        assert clock.advance() is None
        manual_time.advance(0.1)
        assert clock.advance() == pytest.approx(0.1)

    def test_reset_forgets_reference(self, clock, manual_time):
        clock.advance()
        manual_time.advance(1.0)
        clock.reset()
        assert clock.advance() is None

    @pytest.mark.parametrize("interval", [0.0, -0.1])
    def test_invalid_interval_rejected(self, interval):
        with pytest.raises(ValueError):
            StepClock(min_interval_s=interval)
