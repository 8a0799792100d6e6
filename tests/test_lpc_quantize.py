import math

import pytest

from srlacodec.lpc import auto_correlation, levinson_durbin
from srlacodec.lpc_quantize import (
    lpc_to_parcor,
    predict,
    quantize_coefficients,
    quantize_coefficients_as_parcor,
    synthesize,
)


def _signal(n=256):
    return [
        math.sin(0.05 * i) + 0.3 * math.sin(0.31 * i + 1.0) + 0.05 * math.cos(1.7 * i)
        for i in range(n)
    ]


def _lpc(order):
    r = auto_correlation(_signal(), order + 1)
    a_vecs, parcor, _ = levinson_durbin(r, order)
    return a_vecs[order - 1][1:order + 1], parcor[:order]


def test_lpc_to_parcor_single_coefficient():
    assert lpc_to_parcor([0.5]) == [-0.5]


@pytest.mark.parametrize("order", [1, 2, 4, 8])
def test_lpc_to_parcor_inverts_levinson_durbin(order):
    coef, parcor = _lpc(order)
    result = lpc_to_parcor(coef)
    assert len(result) == order
    for got, expected in zip(result, parcor):
        assert got == pytest.approx(expected, abs=1e-9)


def test_lpc_to_parcor_rejects_unstable_filter():
    with pytest.raises(ValueError):
        lpc_to_parcor([0.1, 1.5])


def test_parcor_quantization_range_and_value():
    coef, _ = _lpc(8)
    q = quantize_coefficients_as_parcor(coef, 8)
    assert len(q) == 8
    assert all(-128 <= v <= 127 for v in q)
    assert quantize_coefficients_as_parcor([0.5], 8) == [-64]


def test_parcor_quantization_rejects_zero_precision():
    with pytest.raises(ValueError):
        quantize_coefficients_as_parcor([0.5], 0)


def test_quantize_tiny_coefficients_are_zero():
    q, shift = quantize_coefficients([1e-6, -1e-7, 0.0], 8, 15)
    assert q == [0, 0, 0]
    assert shift == 8


def test_quantize_reconstructs_coefficients():
    coef, _ = _lpc(8)
    q, shift = quantize_coefficients(coef, 16, 31)
    assert len(q) == len(coef)
    assert all(-(1 << 15) <= v < (1 << 15) for v in q)
    # The error carried across coefficients keeps the sum accurate.
    assert sum(q) / 2.0 ** shift == pytest.approx(sum(coef), abs=2.0 ** -shift)
    for value, original in zip(q, coef):
        assert value / 2.0 ** shift == pytest.approx(original, abs=2.0 ** (1 - shift))


def test_quantize_shift_is_limited_by_max_bits():
    q, shift = quantize_coefficients([0.01, 0.02], 16, 4)
    assert shift == 3
    assert all(-(1 << 15) <= v < (1 << 15) for v in q)


def test_quantize_rejects_invalid_arguments():
    with pytest.raises(ValueError):
        quantize_coefficients([0.5], 0, 15)
    with pytest.raises(ValueError):
        quantize_coefficients([0.5], 8, 0)
    with pytest.raises(ValueError):
        quantize_coefficients([1e6], 4, 15)


def test_predict_with_zero_coefficients_keeps_data():
    data = [5, -3, 7, 0, 12, -8]
    assert predict(data, [0, 0, 0], 4) == data


@pytest.mark.parametrize("order", [1, 3, 8])
def test_predict_synthesize_round_trip(order):
    coef, _ = _lpc(order)
    q, shift = quantize_coefficients(coef, 12, 15)
    data = [round(20000 * v) for v in _signal(200)]
    residual = predict(data, q, shift)
    assert residual[0] == data[0]
    assert synthesize(residual, q, shift) == data


def test_prediction_shrinks_residual_energy():
    coef, _ = _lpc(4)
    q, shift = quantize_coefficients(coef, 14, 15)
    data = [round(20000 * v) for v in _signal(256)]
    residual = predict(data, q, shift)
    assert sum(abs(v) for v in residual) < sum(abs(v) for v in data)


def test_short_data_round_trip():
    data = [3, -1]
    coef = [100, -20, 7, 1]
    assert synthesize(predict(data, coef, 6), coef, 6) == data


def test_predict_and_synthesize_reject_zero_shift():
    with pytest.raises(ValueError):
        predict([1, 2, 3], [1], 0)
    with pytest.raises(ValueError):
        synthesize([1, 2, 3], [1], 0)