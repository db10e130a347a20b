"""
Metrics for evaluating filter and smoother performance.
"""
import numpy as np


def compute_mse(estimated, true):
    """
    Compute Mean Squared Error.

    Parameters
    ----------
    estimated : ndarray
        Estimated values
    true : ndarray
        True values

    Returns
    -------
    float
        Mean squared error
    """
    return np.mean((estimated - true)**2)


def compute_rmse(estimated, true):
    """Root Mean Squared Error, sqrt(compute_mse)."""
    return np.sqrt(compute_mse(estimated, true))


def compute_nees(means, covs, xs, regularize=1e-8):
    """
    Compute Normalized Estimation Error Squared (NEES).

    NEES = (x - m)' V^{-1} (x - m)

    For a consistent estimator, NEES follows a chi-squared(n_x) distribution.

    Parameters
    ----------
    means : ndarray [T, n_x]
        Filtered or smoothed means
    covs : ndarray [T, n_x, n_x]
        Filtered or smoothed covariances
    xs : ndarray [T, n_x]
        True states
    regularize : float
        Small value added to diagonal for numerical stability

    Returns
    -------
    ndarray [T]
        NEES values at each time step
    """
    T, n_x = means.shape
    nees = np.zeros(T)

    for t in range(T):
        error = xs[t] - means[t]
        V_reg = covs[t] + regularize * np.eye(n_x)
        try:
            nees[t] = error @ np.linalg.solve(V_reg, error)
        except np.linalg.LinAlgError:
            # Pseudo-inverse for singular matrices
            nees[t] = error @ np.linalg.lstsq(V_reg, error, rcond=None)[0]

    return nees


def compute_nis(innovations, S_innov):
    """
    Compute Normalized Innovation Squared (NIS).

    NIS = v' S^{-1} v

    Parameters
    ----------
    innovations : ndarray [T, n_y]
        Innovation vectors (y - B m_pred)
    S_innov : ndarray [T, n_y, n_y]
        Innovation covariances

    Returns
    -------
    ndarray [T]
        NIS values at each time step
    """
    T = innovations.shape[0]
    nis = np.zeros(T)
    for t in range(T):
        v = innovations[t]
        nis[t] = v @ np.linalg.solve(S_innov[t], v)
    return nis


def compute_symmetry_error(covs):
    """
    Compute symmetry error ||V - V'||_F / ||V||_F over all time steps.

    Parameters
    ----------
    covs : ndarray [T, n_x, n_x]
        Covariance matrices

    Returns
    -------
    ndarray [T]
        Relative symmetry error at each time step (0 for zero matrices)
    """
    norms = np.linalg.norm(covs, 'fro', axis=(1, 2))
    diffs = np.linalg.norm(covs - np.swapaxes(covs, 1, 2), 'fro', axis=(1, 2))
    return np.divide(diffs, norms, out=np.zeros_like(diffs), where=norms > 0)


def compute_min_eigenvalues(covs):
    """
    Minimum eigenvalue of each covariance.

    Negative values indicate loss of positive semi-definiteness.

    Parameters
    ----------
    covs : ndarray [T, n_x, n_x]

    Returns
    -------
    ndarray [T]
    """
    return np.array([np.linalg.eigvalsh(V).min() for V in covs])


def steady_state_step(covs, rtol=1e-2):
    """
    First step from which every covariance stays within rtol of the last one.

    Parameters
    ----------
    covs : ndarray [T, n_x, n_x]
        Covariance sequence
    rtol : float
        Relative tolerance in Frobenius norm

    Returns
    -------
    int
        Index of the first step in the converged tail (T - 1 at worst)
    """
    final = covs[-1]
    ref = max(np.linalg.norm(final, 'fro'), np.finfo(float).tiny)
    dist = np.linalg.norm(covs - final, 'fro', axis=(1, 2)) / ref
    outside = np.nonzero(dist > rtol)[0]
    return 0 if outside.size == 0 else int(outside[-1]) + 1


def stability_summary(cond_nums, mse=None, free_energy=None):
    """
    Generate summary statistics for numerical stability metrics.

    Parameters
    ----------
    cond_nums : ndarray
        Condition numbers
    mse : float, optional
        Mean squared error
    free_energy : float, optional
        Free energy of the filter pass

    Returns
    -------
    dict
        Summary statistics
    """
    summary = {
        'mean_cond': np.mean(cond_nums),
        'max_cond': np.max(cond_nums),
    }
    if mse is not None:
        summary['mse'] = mse
    if free_energy is not None:
        summary['free_energy'] = free_energy
    return summary
