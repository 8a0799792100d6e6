"""LPC coefficients refined by support vector regression on the residual."""

from __future__ import annotations

import math
from collections.abc import Sequence

from .lpc import ExceedMaxOrderError, LPCCalculator, WindowType
from .lpc_af import SingularMatrixError, cholesky_decomposition, solve_by_cholesky

_FLT_MAX = 3.4028234663852886e38
# Root of (x - 1)^2 + ln(2) x ln(x) = 0, as used for the Golomb parameter.
_OPTX = 0.5127629514
# Convergence threshold on the objective value.
_OBJ_EPSILON = 1e-8
# Sample width assumed when scaling the mean absolute residual.
_BITS_PER_SAMPLE = 16


def covariance_matrix(data: Sequence[float], dim: int) -> list[list[float]]:
    """Return the ``dim`` x ``dim`` covariance matrix of sliding windows over ``data``.

    Entry ``(i, j)`` sums ``data[s + i] * data[s + j]`` for ``s`` in
    ``0 .. len(data) - dim - 1``.
    """
    samples = [float(v) for v in data]
    if dim < 0:
        raise ValueError(f"dimension must not be negative: {dim}")
    if len(samples) < dim:
        raise ValueError(f"need at least {dim} samples: {len(samples)}")
    cov = [[0.0] * dim for _ in range(dim)]
    for start in range(len(samples) - dim):
        window = samples[start:start + dim]
        for i, s in enumerate(window):
            row = cov[i]
            for j in range(i, dim):
                row[j] += s * window[j]
    for i in range(dim):
        for j in range(i + 1, dim):
            cov[j][i] = cov[i][j]
    return cov


def rgr_mean_code_length(mean_abs_error: float, bits_per_sample: int) -> float:
    """Return the mean recursive Golomb-Rice code length for a given mean absolute error.

    The error is first scaled to an integer amplitude of ``bits_per_sample`` bits.
    """
    intmean = mean_abs_error * (1 << bits_per_sample)
    rho = 1.0 / (1.0 + intmean)
    base = 1.0 - rho
    if base <= 0.0:
        k2 = 0
    else:
        ratio = math.log(_OPTX) / math.log(base)
        k2 = int(max(0.0, math.log2(ratio))) if ratio > 0.0 else 0
    k1 = k2 + 1
    k1factor = base ** float(1 << k1)
    k2factor = base ** float(1 << k2)
    return (1.0 + k1) * (1.0 - k1factor) + (1.0 + k2 + 1.0 / (1.0 - k2factor)) * k1factor


def _soft_threshold(value: float, epsilon: float) -> float:
    sign = (value > 0) - (value < 0)
    return sign * max(abs(value) - epsilon, 0.0)


def calculate_coefficients_svr(
    calculator: LPCCalculator,
    data: Sequence[float],
    coef: Sequence[float],
    max_num_iteration: int,
    window_type: WindowType | int = WindowType.RECTANGULAR,
    regular_term: float = 0.0,
    margin_list: Sequence[float] = (0.0,),
) -> list[float]:
    """Refine the LPC coefficients ``coef`` for the shortest estimated code length.

    For each margin the residual is soft-thresholded and the coefficients are
    updated by solving the regularised normal equations; the coefficients with
    the smallest estimated code length over all margins are returned.
    """
    WindowType(window_type)
    margins = [float(m) for m in margin_list]
    if not margins:
        raise ValueError("margin list must not be empty")
    init_coef = [float(c) for c in coef]
    order = len(init_coef)
    if order > calculator.max_order:
        raise ExceedMaxOrderError(f"order {order} exceeds maximum {calculator.max_order}")
    if max_num_iteration < 0:
        raise ValueError(f"iteration count must not be negative: {max_num_iteration}")
    if max_num_iteration == 0:
        return init_coef
    samples = [float(v) for v in data]
    num_samples = len(samples)
    if num_samples == 0 or num_samples < order:
        raise ValueError(f"need at least {max(order, 1)} samples: {num_samples}")

    cov = covariance_matrix(samples, order)
    for i in range(order):
        cov[i][i] *= 1.0 + regular_term
    try:
        lower, inv_diag = cholesky_decomposition(cov)
    except SingularMatrixError:
        # Only an all-zero input makes the matrix singular.
        return [0.0] * order

    best_coef = list(init_coef)
    min_obj_value = _FLT_MAX
    for margin in margins:
        prev_obj_value = _FLT_MAX
        current = list(init_coef)
        for _ in range(max_num_iteration):
            mabse = 0.0
            r_vec = [0.0] * order
            for smpl in range(order, num_samples):
                past = [samples[smpl - i - 1] for i in range(order)]
                residual = samples[smpl] + sum(c * p for c, p in zip(current, past))
                mabse += abs(residual)
                residual = _soft_threshold(residual, margin)
                for i, p in enumerate(past):
                    r_vec[i] += residual * p
            obj_value = rgr_mean_code_length(mabse / num_samples, _BITS_PER_SAMPLE)
            delta = solve_by_cholesky(lower, inv_diag, r_vec)
            if obj_value < min_obj_value:
                best_coef = list(current)
                min_obj_value = obj_value
            if prev_obj_value < obj_value or abs(prev_obj_value - obj_value) < _OBJ_EPSILON:
                break
            current = [c + d for c, d in zip(current, delta)]
            prev_obj_value = obj_value

    return best_coef