# tests/test_parameters/test_expressions.py
import math

import pytest

from labsim_core.parameters import ExpressionError, compile_waveform_expression


class TestCompileWaveformExpression:

    def test_compiles_and_evaluates(self):
        fn = compile_waveform_expression("amp*sin(2*pi*freq*t + phase) + 0.5")
        assert float(fn(0.25, 2.0, 1.0, 0.0)) == pytest.approx(2.5)

    def test_caret_is_power(self):
        fn = compile_waveform_expression("t^2")
        assert float(fn(3.0, 0.0, 0.0, 0.0)) == pytest.approx(9.0)

    def test_allowed_functions(self):
        fn = compile_waveform_expression("Abs(t) + Max(amp, 1) + exp(0) + sqrt(freq)")
        assert float(fn(-2.0, 3.0, 4.0, 0.0)) == pytest.approx(2.0 + 3.0 + 1.0 + 2.0)

    def test_compiled_functions_are_cached(self):
        assert compile_waveform_expression("sin(t)") is compile_waveform_expression("sin(t)")

    @pytest.mark.parametrize("expression", [
        "",
        "   ",
        "__import__('os')",
        "t.real",
        "(lambda: 1)()",
        "'text'",
        "x + 1",
        "eval('1')",
        "sin(t, phase=1)",
        "[t, amp]",
        "t if amp else freq",
        "sin(t",
        "Symbol('x')",
    ])
    def test_rejected_expressions(self, expression):
        with pytest.raises(ExpressionError):
            compile_waveform_expression(expression)

    def test_error_report_lists_allowed_vocabulary(self):
        with pytest.raises(ExpressionError) as exc_info:
            compile_waveform_expression("os.system('ls')")
        report = exc_info.value.get_diagnostic_report()
        assert "Waveform Expression Error" in report
        assert "t, amp, freq and phase" in report

    def test_numeric_result_is_finite(self):
        fn = compile_waveform_expression("floor(t) + Mod(t, 1)")
        assert math.isclose(float(fn(2.5, 0.0, 0.0, 0.0)), 2.5)
