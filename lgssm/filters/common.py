"""Common utilities for the Kalman filter and smoother."""
from typing import NamedTuple

import numpy as np

from ..errors import DimensionMismatchError, NonPositiveSemiDefiniteError


class GaussianBelief(NamedTuple):
    """Gaussian marginal over a state vector."""
    mean: np.ndarray
    cov: np.ndarray


def joseph_update(V_pred, K, B, P):
    """
    Compute Joseph-stabilized covariance update.

    Parameters
    ----------
    V_pred : ndarray [n_x, n_x]
        Predicted covariance
    K : ndarray [n_x, n_y]
        Kalman gain
    B : ndarray [n_y, n_x]
        Observation matrix
    P : ndarray [n_y, n_y]
        Observation noise covariance

    Returns
    -------
    ndarray [n_x, n_x]
        Updated covariance
    """
    n_x = V_pred.shape[0]
    I = np.eye(n_x)
    IKB = I - K @ B
    return IKB @ V_pred @ IKB.T + K @ P @ K.T


def standard_update(V_pred, K, B):
    """
    Compute standard covariance update: V = (I - KB) V_pred.

    Parameters
    ----------
    V_pred : ndarray [n_x, n_x]
        Predicted covariance
    K : ndarray [n_x, n_y]
        Kalman gain
    B : ndarray [n_y, n_x]
        Observation matrix

    Returns
    -------
    ndarray [n_x, n_x]
        Updated covariance
    """
    n_x = V_pred.shape[0]
    I = np.eye(n_x)
    return (I - K @ B) @ V_pred


def symmetrize(M):
    """Return the symmetric part (M + M') / 2."""
    return 0.5 * (M + M.T)


def matrix_scale(M):
    """Largest absolute eigenvalue of a symmetric matrix (0 for empty)."""
    if M.size == 0:
        return 0.0
    return float(np.max(np.abs(np.linalg.eigvalsh(M))))


def check_covariance(V, name='covariance', tol=1e-9, step=None):
    """
    Raise if V is not symmetric positive semi-definite.

    Both checks are relative to max(1, largest |eigenvalue|) so that
    round-off on large covariances is tolerated.

    Parameters
    ----------
    V : ndarray [n, n]
        Matrix to check
    name : str
        Name used in the error message
    tol : float
        Relative tolerance
    step : int, optional
        Time step reported with the error

    Raises
    ------
    NonPositiveSemiDefiniteError
    """
    if V.size == 0:
        return
    where = f" at step {step}" if step is not None else ""
    scale = max(1.0, float(np.max(np.abs(V))))
    if not np.all(np.isfinite(V)):
        raise NonPositiveSemiDefiniteError(f"{name} has non-finite entries{where}", step)
    if np.max(np.abs(V - V.T)) > tol * scale:
        raise NonPositiveSemiDefiniteError(f"{name} is not symmetric{where}", step)
    min_eig = np.linalg.eigvalsh(symmetrize(V)).min()
    if min_eig < -tol * scale:
        raise NonPositiveSemiDefiniteError(
            f"{name} is not positive semi-definite{where} (min eigenvalue {min_eig:.3e})", step
        )


def _as_matrix(M, name):
    M = np.asarray(M, dtype=float)
    if M.ndim != 2:
        raise DimensionMismatchError(f"{name} must be a 2-D matrix, got shape {M.shape}")
    return M


def validate_lgssm(A, B, Q, P, psd_tol=1e-9):
    """
    Validate the shapes and covariances of a linear-Gaussian SSM.

    Parameters
    ----------
    A : array_like [n_x, n_x]
        State transition matrix
    B : array_like [n_y, n_x]
        Observation matrix
    Q : array_like [n_x, n_x]
        Process noise covariance
    P : array_like [n_y, n_y]
        Observation noise covariance
    psd_tol : float
        Tolerance for the covariance checks

    Returns
    -------
    A, B, Q, P : ndarray
        Float copies of the inputs

    Raises
    ------
    DimensionMismatchError
        If any shape is inconsistent with A and B.
    NonPositiveSemiDefiniteError
        If Q or P is not symmetric PSD.
    """
    A, B = _as_matrix(A, 'A'), _as_matrix(B, 'B')
    Q, P = _as_matrix(Q, 'Q'), _as_matrix(P, 'P')

    n_x = A.shape[0]
    if A.shape != (n_x, n_x):
        raise DimensionMismatchError(f"A must be square, got shape {A.shape}")
    if B.shape[1] != n_x:
        raise DimensionMismatchError(
            f"B has shape {B.shape} but the state dimension is {n_x}"
        )
    n_y = B.shape[0]
    if Q.shape != (n_x, n_x):
        raise DimensionMismatchError(f"Q must have shape {(n_x, n_x)}, got {Q.shape}")
    if P.shape != (n_y, n_y):
        raise DimensionMismatchError(f"P must have shape {(n_y, n_y)}, got {P.shape}")

    check_covariance(Q, 'Q', psd_tol)
    check_covariance(P, 'P', psd_tol)
    return A, B, Q, P


def validate_vector(x, n, name):
    """Return x as a float vector of length n or raise DimensionMismatchError."""
    x = np.asarray(x, dtype=float)
    if x.shape != (n,):
        raise DimensionMismatchError(f"{name} must have shape {(n,)}, got {x.shape}")
    return x
