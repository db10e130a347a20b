"""Rauch-Tung-Striebel (RTS) fixed-interval smoother."""
from dataclasses import dataclass, field
from typing import List

import numpy as np
from scipy import linalg as sla

from ..errors import DimensionMismatchError
from .common import GaussianBelief, check_covariance, matrix_scale, symmetrize


@dataclass
class SmootherResult:
    """Smoothed moments p(x_t | y_1:T) and the backward gains."""
    m_smooth: np.ndarray
    V_smooth: np.ndarray
    gains: np.ndarray = field(repr=False)

    @property
    def T(self):
        return self.m_smooth.shape[0]

    def beliefs(self) -> List[GaussianBelief]:
        """Smoothed beliefs, one per time step."""
        return [GaussianBelief(m, V) for m, V in zip(self.m_smooth, self.V_smooth)]


def smoother_gain(V_filt, A, V_pred_next, singular_tol=1e-10, ref_scale=None):
    """
    Compute the RTS gain G = V_filt A' V_pred_next^{-1}.

    A vanishing V_pred_next (largest eigenvalue below singular_tol * ref_scale)
    gives a zero gain. If V_pred_next cannot be Cholesky-factored, the
    pseudo-inverse is used instead.

    Parameters
    ----------
    V_filt : ndarray [n_x, n_x]
        Filtered covariance at t
    A : ndarray [n_x, n_x]
        State transition matrix
    V_pred_next : ndarray [n_x, n_x]
        Predicted covariance at t+1
    singular_tol : float
        Relative scale below which V_pred_next is treated as zero
    ref_scale : float, optional
        Magnitude of the predicted covariances over the run. Without it only
        an exactly zero V_pred_next counts as vanishing.

    Returns
    -------
    ndarray [n_x, n_x]
    """
    cross = V_filt @ A.T
    if matrix_scale(V_pred_next) <= singular_tol * (ref_scale or 0.0):
        return np.zeros_like(cross)
    try:
        L = sla.cholesky(V_pred_next, lower=True)
        return sla.cho_solve((L, True), cross.T).T
    except np.linalg.LinAlgError:
        return cross @ sla.pinvh(V_pred_next)


def rts_smooth_step(m_filt, V_filt, m_pred_next, V_pred_next, m_smooth_next, V_smooth_next,
                    A, singular_tol=1e-10, ref_scale=None):
    """
    One backward step of the RTS smoother.

    Returns
    -------
    m_smooth : ndarray [n_x]
    V_smooth : ndarray [n_x, n_x]
    G : ndarray [n_x, n_x]
    """
    G = smoother_gain(V_filt, A, V_pred_next, singular_tol, ref_scale)
    m_smooth = m_filt + G @ (m_smooth_next - m_pred_next)
    V_smooth = symmetrize(V_filt + G @ (V_smooth_next - V_pred_next) @ G.T)
    return m_smooth, V_smooth, G


def rts_smoother(result, A=None, singular_tol=1e-10, psd_tol=1e-9):
    """
    Rauch-Tung-Striebel smoother over a Kalman filter pass.

    Parameters
    ----------
    result : FilterResult
        Output of kalman_filter (filtered and predicted moments)
    A : ndarray [n_x, n_x], optional
        State transition matrix. Defaults to the one stored in `result`.
    singular_tol : float
        Relative scale below which a predicted covariance is treated as zero
    psd_tol : float
        Tolerance of the PSD check on smoothed covariances

    Returns
    -------
    SmootherResult
        Smoothed moments. The last step equals the last filtered belief.
    """
    A = result.A if A is None else np.asarray(A, dtype=float)
    T, n_x = result.m_filt.shape
    if A.shape != (n_x, n_x):
        raise DimensionMismatchError(f"A must have shape {(n_x, n_x)}, got {A.shape}")

    m_smooth = result.m_filt.copy()
    V_smooth = result.V_filt.copy()
    gains = np.zeros((max(T - 1, 0), n_x, n_x))
    ref_scale = max((matrix_scale(V) for V in result.V_pred), default=0.0)

    for t in range(T - 2, -1, -1):
        m_smooth[t], V_smooth[t], gains[t] = rts_smooth_step(
            result.m_filt[t], result.V_filt[t],
            result.m_pred[t + 1], result.V_pred[t + 1],
            m_smooth[t + 1], V_smooth[t + 1],
            A, singular_tol, ref_scale,
        )
        check_covariance(V_smooth[t], 'Smoothed covariance', psd_tol, t)

    return SmootherResult(m_smooth=m_smooth, V_smooth=V_smooth, gains=gains)
