import math

import pytest

from srlacodec.lpc import (
    ExceedMaxNumSamplesError,
    ExceedMaxOrderError,
    LPCCalculator,
    LPCError,
    WindowType,
    apply_window,
    auto_correlation,
    auto_correlation_by_fft,
    levinson_durbin,
)


def _signal(n, amplitude=0.1):
    return [amplitude * (math.sin(0.1 * i) + 0.3 * math.sin(1.7 * i)) for i in range(n)]


def test_auto_correlation_small_example():
    assert auto_correlation([1.0, 2.0, 3.0], 3) == pytest.approx([14.0, 8.0, 3.0])


def test_auto_correlation_rejects_large_order():
    with pytest.raises(ValueError):
        auto_correlation([1.0, 2.0], 3)


def test_fft_autocorrelation_rejects_empty():
    with pytest.raises(ValueError):
        auto_correlation_by_fft([], 0)


def test_rectangular_window_is_identity():
    data = [1.0, -2.0, 3.5, 0.25]
    assert apply_window(WindowType.RECTANGULAR, data) == data


def test_welch_window_shape():
    out = apply_window(WindowType.WELCH, [1.0] * 8)
    assert out[0] == 0.0 and out[7] == 0.0
    assert all(out[i] == out[7 - i] for i in range(8))
    assert all(0.0 <= w <= 1.0 for w in out)


def test_welch_window_odd_middle_keeps_sample():
    out = apply_window(WindowType.WELCH, [2.0] * 5)
    assert out[2] == 2.0
    assert out[0] == 0.0


def test_sin_window_shape():
    out = apply_window(WindowType.SIN, [1.0] * 9)
    assert out[0] == pytest.approx(0.0, abs=1e-15)
    assert out[4] == pytest.approx(1.0)
    assert all(out[i] == pytest.approx(out[8 - i], abs=1e-12) for i in range(9))


def test_invalid_window_type():
    with pytest.raises(ValueError):
        apply_window(7, [1.0, 2.0])


def test_levinson_durbin_ar1():
    a = 0.5
    r = [1.0, a, a * a, a ** 3]
    a_vecs, parcor, error_vars = levinson_durbin(r, 3)
    assert a_vecs[2][0] == pytest.approx(1.0)
    assert a_vecs[2][1:4] == pytest.approx([-a, 0.0, 0.0], abs=1e-12)
    assert parcor[0] == pytest.approx(a)
    assert parcor[1:] == pytest.approx([0.0, 0.0, 0.0], abs=1e-12)
    assert error_vars[1] == pytest.approx(1.0 - a * a)
    assert error_vars[3] == pytest.approx(error_vars[1])


def test_levinson_durbin_silence():
    a_vecs, parcor, error_vars = levinson_durbin([0.0, 0.0, 0.0], 2)
    assert a_vecs == [[0.0] * 4, [0.0] * 4]
    assert parcor == [0.0, 0.0, 0.0]
    assert error_vars == [0.0, 0.0, 0.0]


def test_levinson_durbin_short_input():
    with pytest.raises(ValueError):
        levinson_durbin([1.0, 0.5], 2)


def test_calculator_invalid_config():
    with pytest.raises(ValueError):
        LPCCalculator(0, 16)
    with pytest.raises(ValueError):
        LPCCalculator(4, 0)


def test_calculator_exceed_order():
    calc = LPCCalculator(4, 64)
    with pytest.raises(ExceedMaxOrderError):
        calc.calculate_coefficients(_signal(16), 5)
    with pytest.raises(LPCError):
        calc.calculate_coefficients(_signal(16), 5)


def test_calculator_exceed_samples():
    calc = LPCCalculator(4, 64)
    with pytest.raises(ExceedMaxNumSamplesError):
        calc.calculate_coefficients(_signal(65), 2)


def test_calculator_rejects_empty_and_zero_order():
    calc = LPCCalculator(4, 64)
    with pytest.raises(ValueError):
        calc.calculate_coefficients([], 2)
    with pytest.raises(ValueError):
        calc.calculate_coefficients(_signal(16), 0)


def test_decaying_signal_coefficients():
    data = [0.9 ** i for i in range(1024)]
    calc = LPCCalculator(4, 1024)
    coef = calc.calculate_coefficients(data, 2, WindowType.RECTANGULAR, 0.0)
    assert coef[0] == pytest.approx(-0.9, abs=1e-6)
    assert coef[1] == pytest.approx(0.0, abs=1e-6)


def test_few_samples_give_zero_coefficients():
    calc = LPCCalculator(8, 64)
    assert calc.calculate_coefficients([1.0, -1.0, 0.5], 8) == [0.0] * 8


def test_silence_gives_zero_coefficients():
    calc = LPCCalculator(4, 64)
    assert calc.calculate_coefficients([0.0] * 64, 4) == [0.0] * 4
    assert calc.estimate_code_length([0.0] * 64, 16, 4) == 0.0


def test_parcor_within_unit_interval():
    calc = LPCCalculator(8, 256)
    calc.calculate_coefficients(_signal(256), 8, WindowType.RECTANGULAR, 0.01)
    assert len(calc.parcor_coef) == 9
    assert all(abs(p) < 1.0 for p in calc.parcor_coef)


def test_multiple_coefficients_consistent():
    calc = LPCCalculator(6, 256)
    data = _signal(256)
    rows, error_vars = calc.calculate_multiple_coefficients(data, 6, WindowType.RECTANGULAR, 0.1)
    single = calc.calculate_coefficients(data, 6, WindowType.RECTANGULAR, 0.1)
    assert len(rows) == 6
    assert all(len(row) == 6 for row in rows)
    assert rows[-1] == single
    assert len(error_vars) == 7
    assert all(later <= earlier for earlier, later in zip(error_vars, error_vars[1:]))


def test_welch_window_coefficients_finite():
    calc = LPCCalculator(4, 256)
    coef = calc.calculate_coefficients(_signal(256), 4, WindowType.WELCH, 0.0)
    assert len(coef) == 4
    assert all(math.isfinite(c) for c in coef)


def test_estimate_code_length_doubling_adds_one_bit():
    calc = LPCCalculator(4, 256)
    data = _signal(256)
    base = calc.estimate_code_length(data, 16, 4)
    doubled = calc.estimate_code_length([2.0 * v for v in data], 16, 4)
    assert base > 1.0
    assert doubled - base == pytest.approx(1.0, abs=1e-9)


def test_estimate_code_length_quiet_input():
    calc = LPCCalculator(4, 64)
    assert calc.estimate_code_length([1e-6] * 64, 1, 2) == 1.0


def test_mdl_of_silence():
    calc = LPCCalculator(4, 64)
    assert calc.calculate_mdl([0.0] * 64, 4) == pytest.approx(4 * math.log(64))


def test_mdl_bounded_by_penalty():
    calc = LPCCalculator(4, 256)
    assert calc.calculate_mdl(_signal(256), 4) <= 4 * math.log(256)