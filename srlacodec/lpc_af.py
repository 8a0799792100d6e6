"""LPC coefficients by the auxiliary-function (L1 residual) method and by Burg's method."""

from __future__ import annotations

from collections.abc import Sequence

from .lpc import (
    ExceedMaxOrderError,
    LPCCalculator,
    LPCError,
    WindowType,
    auto_correlation,
)

_FLT_EPSILON = 1.1920928955078125e-07
_FLT_MAX = 3.4028234663852886e38
# Smallest residual magnitude used as a weight denominator.
_RESIDUAL_EPSILON = 1e-6
# Convergence threshold on the objective value.
_OBJ_EPSILON = 1e-8


class SingularMatrixError(LPCError):
    """Raised when a matrix is not positive definite."""


def cholesky_decomposition(
    matrix: Sequence[Sequence[float]],
) -> tuple[list[list[float]], list[float]]:
    """Decompose a symmetric positive definite matrix.

    Returns ``(lower, inv_diag)``: the entries of ``lower`` below the diagonal
    hold the off-diagonal part of the Cholesky factor, and ``inv_diag`` the
    reciprocals of its diagonal. The input is left unchanged.
    """
    a = [[float(v) for v in row] for row in matrix]
    dim = len(a)
    if any(len(row) != dim for row in a):
        raise ValueError("matrix must be square")
    inv_diag = [0.0] * dim
    for i in range(dim):
        total = a[i][i]
        for k in range(i - 1, -1, -1):
            total -= a[i][k] * a[i][k]
        if total <= 0.0:
            raise SingularMatrixError(f"matrix is not positive definite (pivot {i})")
        inv_diag[i] = total ** -0.5
        for j in range(i + 1, dim):
            total = a[i][j]
            for k in range(i - 1, -1, -1):
                total -= a[i][k] * a[j][k]
            a[j][i] = total * inv_diag[i]
    return a, inv_diag


def solve_by_cholesky(
    lower: Sequence[Sequence[float]],
    inv_diag: Sequence[float],
    bvec: Sequence[float],
) -> list[float]:
    """Solve ``A x = b`` given the factorisation from :func:`cholesky_decomposition`."""
    dim = len(inv_diag)
    if len(bvec) != dim or len(lower) != dim:
        raise ValueError("dimensions of the factor and the right-hand side differ")
    x = [0.0] * dim
    for i in range(dim):
        total = float(bvec[i])
        for j in range(i - 1, -1, -1):
            total -= lower[i][j] * x[j]
        x[i] = total * inv_diag[i]
    for i in range(dim - 1, -1, -1):
        total = x[i]
        for j in range(i + 1, dim):
            total -= lower[j][i] * x[j]
        x[i] = total * inv_diag[i]
    return x


def _af_system(
    data: Sequence[float], a_vec: Sequence[float], order: int
) -> tuple[list[list[float]], list[float], float]:
    """Build the weighted normal equations for the current coefficients."""
    r_vec = [0.0] * order
    r_mat = [[0.0] * order for _ in range(order)]
    obj_value = 0.0
    for smpl in range(order, len(data)):
        past = [data[smpl - i - 1] for i in range(order)]
        residual = data[smpl]
        for a, p in zip(a_vec, past):
            residual += a * p
        residual = abs(residual)
        obj_value += residual
        inv_residual = 1.0 / max(residual, _RESIDUAL_EPSILON)
        for i, pi in enumerate(past):
            r_vec[i] -= data[smpl] * pi * inv_residual
            row = r_mat[i]
            for j in range(i, order):
                row[j] += pi * past[j] * inv_residual
    for i in range(order):
        for j in range(i + 1, order):
            r_mat[j][i] = r_mat[i][j]
    return r_mat, r_vec, obj_value / (len(data) - order)


def calculate_coefficients_af(
    calculator: LPCCalculator,
    data: Sequence[float],
    coef_order: int,
    max_num_iteration: int,
    window_type: WindowType | int = WindowType.RECTANGULAR,
    regular_term: float = 0.0,
) -> list[float]:
    """Return LPC coefficients minimising the mean absolute forward residual.

    The Levinson-Durbin solution is refined by iteratively reweighted least
    squares for at most ``max_num_iteration`` steps.
    """
    if max_num_iteration < 0:
        raise ValueError(f"iteration count must not be negative: {max_num_iteration}")
    samples = [float(v) for v in data]
    coef = calculator.calculate_coefficients(samples, coef_order, window_type, regular_term)

    # Almost no signal power: predict a silent system.
    if abs(calculator.auto_corr[0]) < _FLT_EPSILON:
        return [0.0] * coef_order
    if max_num_iteration > 0 and len(samples) <= coef_order:
        raise ValueError(
            f"need more than {coef_order} samples for order {coef_order}: {len(samples)}"
        )

    prev_obj_value = _FLT_MAX
    for _ in range(max_num_iteration):
        r_mat, r_vec, obj_value = _af_system(samples, coef, coef_order)
        try:
            lower, inv_diag = cholesky_decomposition(r_mat)
        except SingularMatrixError:
            return [0.0] * coef_order
        coef = solve_by_cholesky(lower, inv_diag, r_vec)
        if abs(prev_obj_value - obj_value) < _OBJ_EPSILON:
            break
        prev_obj_value = obj_value
    return coef


def calculate_coefficients_burg(
    calculator: LPCCalculator, data: Sequence[float], coef_order: int
) -> list[float]:
    """Return LPC coefficients estimated with Burg's method."""
    if coef_order < 1:
        raise ValueError(f"coefficient order must be at least 1: {coef_order}")
    if coef_order > calculator.max_order:
        raise ExceedMaxOrderError(f"order {coef_order} exceeds maximum {calculator.max_order}")
    samples = [float(v) for v in data]
    n = len(samples)
    if n < coef_order + 1:
        raise ValueError(f"need at least {coef_order + 1} samples: {n}")

    size = coef_order + 1
    cov = [[0.0] * size for _ in range(size)]
    for i in range(size):
        for lag, value in enumerate(auto_correlation(samples[:n - i], size - i)):
            cov[i][i + lag] = value
            cov[i + lag][i] = value

    a_vec = [0.0] * size
    a_vec[0] = 1.0
    for k in range(coef_order):
        fk_plus_bk = 0.0
        cross = 0.0
        for i in range(k + 1):
            fk_plus_bk += a_vec[i] * a_vec[i] * (cov[i][i] + cov[k + 1 - i][k + 1 - i])
            for j in range(i + 1, k + 1):
                cross += a_vec[i] * a_vec[j] * (cov[i][j] + cov[k + 1 - i][k + 1 - j])
        fk_plus_bk += 2.0 * cross
        ck = 0.0
        for i in range(k + 1):
            for j in range(k + 1):
                ck += a_vec[i] * a_vec[j] * cov[i][k + 1 - j]
        # No remaining error power: nothing more to predict.
        mu = -2.0 * ck / fk_plus_bk if fk_plus_bk != 0.0 else 0.0
        for i in range((k + 1) // 2 + 1):
            tmp1 = a_vec[i]
            tmp2 = a_vec[k + 1 - i]
            a_vec[i] = tmp1 + mu * tmp2
            a_vec[k + 1 - i] = mu * tmp1 + tmp2
    return a_vec[1:]