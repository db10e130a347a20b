"""Kalman Filter (KF) implementation."""
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

import numpy as np
from scipy import linalg as sla

from ..errors import DimensionMismatchError, SingularMatrixError
from .common import (
    GaussianBelief, check_covariance, joseph_update, matrix_scale,
    standard_update, symmetrize, validate_lgssm, validate_vector,
)

LOG_2PI = np.log(2.0 * np.pi)


def _solve_lu(S, B):
    """Solve S @ X = B using LU factorization (np.linalg.solve)."""
    return np.linalg.solve(S, B)


def _solve_cholesky(S, B):
    """Solve S @ X = B using Cholesky factorization (assumes S is SPD)."""
    L = sla.cholesky(S, lower=True)
    return sla.cho_solve((L, True), B)


def _solve_inv(S, B):
    """Solve S @ X = B using explicit matrix inversion (least stable)."""
    return np.linalg.inv(S) @ B


SOLVERS = {
    'lu': _solve_lu,
    'cholesky': _solve_cholesky,
    'inv': _solve_inv,
}


def gaussian_surprise(v, S):
    """
    Negative log-density of innovation v under N(0, S).

    Parameters
    ----------
    v : ndarray [n_y]
        Innovation
    S : ndarray [n_y, n_y]
        Innovation covariance (SPD)

    Returns
    -------
    float
        0.5 * (n_y log(2 pi) + log|S| + v' S^{-1} v)
    """
    L = sla.cholesky(S, lower=True)
    z = sla.solve_triangular(L, v, lower=True)
    log_det = 2.0 * np.sum(np.log(np.diag(L)))
    return 0.5 * (len(v) * LOG_2PI + log_det + z @ z)


class UpdateResult(NamedTuple):
    """Output of a single measurement update."""
    mean: np.ndarray
    cov: np.ndarray
    innovation: np.ndarray
    S: np.ndarray
    gain: np.ndarray
    surprise: float


@dataclass
class FilterResult:
    """Filtered and predicted moments for every time step.

    Index t refers to the t-th observation (0-based). `m_pred[t]`,
    `V_pred[t]` are the moments before ys[t] is absorbed and `m_filt[t]`,
    `V_filt[t]` the moments after.
    """
    m_filt: np.ndarray
    V_filt: np.ndarray
    m_pred: np.ndarray = field(repr=False)
    V_pred: np.ndarray = field(repr=False)
    innovations: np.ndarray = field(repr=False)
    S: np.ndarray = field(repr=False)
    surprise: np.ndarray = field(repr=False)
    cond_nums: np.ndarray = field(repr=False)
    A: np.ndarray = field(repr=False)
    prior: Optional[GaussianBelief] = field(default=None, repr=False)

    @property
    def T(self):
        return self.m_filt.shape[0]

    @property
    def free_energy(self):
        """Negative log marginal likelihood -log p(y_1:T)."""
        return float(np.sum(self.surprise))

    def beliefs(self) -> List[GaussianBelief]:
        """Filtered beliefs, one per time step."""
        return [GaussianBelief(m, V) for m, V in zip(self.m_filt, self.V_filt)]

    def predicted_beliefs(self) -> List[GaussianBelief]:
        """One-step-ahead predicted beliefs, one per time step."""
        return [GaussianBelief(m, V) for m, V in zip(self.m_pred, self.V_pred)]


def kf_predict(m, V, A, Q):
    """
    KF prediction step.

    Parameters
    ----------
    m : ndarray [n_x]
        Previous posterior mean
    V : ndarray [n_x, n_x]
        Previous posterior covariance
    A : ndarray [n_x, n_x]
        State transition matrix
    Q : ndarray [n_x, n_x]
        Process noise covariance

    Returns
    -------
    m_pred : ndarray [n_x]
    V_pred : ndarray [n_x, n_x]
    """
    m_pred = A @ m
    V_pred = symmetrize(A @ V @ A.T + Q)
    return m_pred, V_pred


def kf_update(m_pred, V_pred, y, B, P, joseph=False, solver='cholesky',
              singular_tol=1e-10, psd_tol=1e-9, step=None, ref_scale=None):
    """
    KF update step.

    Parameters
    ----------
    m_pred : ndarray [n_x]
        Predicted mean
    V_pred : ndarray [n_x, n_x]
        Predicted covariance
    y : ndarray [n_y]
        Observation
    B : ndarray [n_y, n_x]
        Observation matrix
    P : ndarray [n_y, n_y]
        Observation noise covariance
    joseph : bool
        Use Joseph stabilized covariance update (default: False)
    solver : str
        Solver for Kalman gain: 'lu', 'cholesky', or 'inv' (default: 'cholesky')
    singular_tol : float
        S is singular if its smallest eigenvalue is below singular_tol times
        its largest. If its largest is below singular_tol * ref_scale, S is
        treated as vanishing: the gain is zero, and the innovation must
        vanish too (relative to sqrt(singular_tol) * max(|y|, |B m_pred|)).
    psd_tol : float
        Tolerance of the PSD check on the updated covariance
    step : int, optional
        Time step reported with errors
    ref_scale : float, optional
        Magnitude of the model's covariances in observation space. Without
        it only an exactly zero S counts as vanishing.

    Returns
    -------
    UpdateResult

    Raises
    ------
    SingularMatrixError
        If S is not invertible within singular_tol, or S vanishes but the
        observation contradicts the prediction.
    NonPositiveSemiDefiniteError
        If the updated covariance fails the PSD check.
    """
    if solver not in SOLVERS:
        raise ValueError(f"solver must be one of {sorted(SOLVERS)}, got '{solver}'")
    n_x, n_y = V_pred.shape[0], B.shape[0]

    S = symmetrize(B @ V_pred @ B.T + P)
    y_pred = B @ m_pred
    innov = y - y_pred
    where = f"at step {step}" if step is not None else "in update"

    scale = matrix_scale(S)
    if scale <= singular_tol * (ref_scale or 0.0):
        # Predicted belief is already certain in observation space
        innov_tol = np.sqrt(singular_tol) * max(np.linalg.norm(y), np.linalg.norm(y_pred))
        if np.linalg.norm(innov) > innov_tol:
            raise SingularMatrixError(
                f"Innovation covariance vanishes {where} but the observation "
                f"deviates from the prediction by {np.linalg.norm(innov):.3e}", step
            )
        K = np.zeros((n_x, n_y))
        surprise = 0.0
    else:
        min_eig = np.linalg.eigvalsh(S).min()
        if min_eig <= singular_tol * scale:
            raise SingularMatrixError(
                f"Innovation covariance is singular {where} "
                f"(eigenvalue ratio {min_eig / scale:.3e} <= {singular_tol:.1e})", step
            )
        try:
            # K = V_pred B' S^{-1}
            K = SOLVERS[solver](S.T, B @ V_pred.T).T
            surprise = gaussian_surprise(innov, S)
        except np.linalg.LinAlgError as e:
            raise SingularMatrixError(f"Innovation covariance is singular {where}: {e}", step) from e

    m = m_pred + K @ innov
    V = joseph_update(V_pred, K, B, P) if joseph else standard_update(V_pred, K, B)
    V = symmetrize(V)
    check_covariance(V, 'Filtered covariance', psd_tol, step)

    return UpdateResult(m, V, innov, S, K, float(surprise))


def _condition_number(V):
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.linalg.cond(V)


def kalman_filter(ys, A, B, Q, P, prior, joseph=False, solver='cholesky',
                  singular_tol=1e-10, psd_tol=1e-9):
    """
    Kalman Filter for Linear Gaussian SSM.

    Parameters
    ----------
    ys : ndarray [T, n_y]
        Observations
    A : ndarray [n_x, n_x]
        State transition matrix
    B : ndarray [n_y, n_x]
        Observation matrix
    Q : ndarray [n_x, n_x]
        Process noise covariance
    P : ndarray [n_y, n_y]
        Observation noise covariance
    prior : GaussianBelief or tuple (m0, V0)
        Belief over the state preceding ys[0]
    joseph : bool
        Use Joseph stabilized covariance update (default: False)
    solver : str
        Solver for Kalman gain: 'lu', 'cholesky', or 'inv' (default: 'cholesky')
    singular_tol : float
        Tolerance for the innovation covariance singularity check
    psd_tol : float
        Tolerance for the covariance PSD checks

    Returns
    -------
    FilterResult
        Filtered/predicted moments, innovations, per-step surprise and
        condition numbers of the filtered covariances.

    Raises
    ------
    DimensionMismatchError
        If any input shape is inconsistent (before filtering starts).
    SingularMatrixError
        If an innovation covariance is singular; `step` holds the index.
    """
    A, B, Q, P = validate_lgssm(A, B, Q, P, psd_tol)
    n_x, n_y = A.shape[0], B.shape[0]

    ys = np.asarray(ys, dtype=float)
    if ys.ndim != 2 or ys.shape[1] != n_y:
        raise DimensionMismatchError(
            f"ys must have shape (T, {n_y}), got {ys.shape}"
        )
    m0, V0 = prior
    m = validate_vector(m0, n_x, 'prior mean')
    V = np.asarray(V0, dtype=float)
    if V.shape != (n_x, n_x):
        raise DimensionMismatchError(
            f"prior covariance must have shape {(n_x, n_x)}, got {V.shape}"
        )
    check_covariance(V, 'Prior covariance', psd_tol)
    if solver not in SOLVERS:
        raise ValueError(f"solver must be one of {sorted(SOLVERS)}, got '{solver}'")

    # Covariance magnitude in observation space that S is compared against
    ref_scale = max(matrix_scale(B @ V @ B.T), matrix_scale(B @ Q @ B.T), matrix_scale(P))

    T = ys.shape[0]
    m_filt = np.zeros((T, n_x))
    V_filt = np.zeros((T, n_x, n_x))
    m_pred = np.zeros((T, n_x))
    V_pred = np.zeros((T, n_x, n_x))
    innovations = np.zeros((T, n_y))
    S = np.zeros((T, n_y, n_y))
    surprise = np.zeros(T)
    cond_nums = np.zeros(T)

    for t in range(T):
        m_pred[t], V_pred[t] = kf_predict(m, V, A, Q)
        upd = kf_update(m_pred[t], V_pred[t], ys[t], B, P, joseph=joseph, solver=solver,
                        singular_tol=singular_tol, psd_tol=psd_tol, step=t,
                        ref_scale=ref_scale)
        m, V = upd.mean, upd.cov

        m_filt[t], V_filt[t] = m, V
        innovations[t], S[t], surprise[t] = upd.innovation, upd.S, upd.surprise
        cond_nums[t] = _condition_number(V)

    return FilterResult(
        m_filt=m_filt, V_filt=V_filt, m_pred=m_pred, V_pred=V_pred,
        innovations=innovations, S=S, surprise=surprise, cond_nums=cond_nums,
        A=A, prior=GaussianBelief(np.asarray(m0, dtype=float), np.asarray(V0, dtype=float)),
    )
