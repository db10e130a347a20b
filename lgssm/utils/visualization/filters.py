"""
Visualization functions for Kalman filter and smoother results.
"""
import os

import numpy as np
import matplotlib.pyplot as plt


def _finish(save_path):
    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"  Saved: {os.path.basename(save_path)}")
        plt.close()
    else:
        plt.show()


def plot_kalman_filter(T, xs, ys, m_filt, V_filt, m_smooth=None, V_smooth=None,
                       save_path=None, title="Kalman Filter"):
    """
    Plot Kalman filter (and optionally smoother) results per state dimension.

    Parameters
    ----------
    T : int
        Number of time steps
    xs : ndarray [T, n_x]
        True states
    ys : ndarray [T, n_y] or None
        Observations. Drawn on state panel i when n_y == n_x.
    m_filt : ndarray [T, n_x]
        Filtered means
    V_filt : ndarray [T, n_x, n_x]
        Filtered covariances
    m_smooth : ndarray [T, n_x], optional
        Smoothed means
    V_smooth : ndarray [T, n_x, n_x], optional
        Smoothed covariances
    save_path : str, optional
        Path to save figure
    title : str
        Plot title
    """
    t = np.arange(T)
    xs = xs.reshape(T, -1)
    m_filt = m_filt.reshape(T, -1)
    n_x = xs.shape[1]
    show_obs = ys is not None and ys.reshape(T, -1).shape[1] == n_x

    fig, axes = plt.subplots(n_x, 1, figsize=(12, 4*n_x), squeeze=False)

    for i in range(n_x):
        ax = axes[i, 0]
        std_filt = np.sqrt(V_filt[:, i, i])

        if show_obs:
            ax.plot(t, ys.reshape(T, -1)[:, i], 'k.', markersize=3, label='Observations', alpha=0.4)
        ax.plot(t, xs[:, i], 'k-', linewidth=2, label='True State', alpha=0.8)
        ax.plot(t, m_filt[:, i], 'b--', linewidth=1.5, label='Filter Mean', alpha=0.8)
        ax.fill_between(t, m_filt[:, i] - 2*std_filt, m_filt[:, i] + 2*std_filt,
                        alpha=0.2, color='blue', label='Filter +/-2sigma')

        if m_smooth is not None:
            ax.plot(t, m_smooth[:, i], 'r-', linewidth=1.5, label='Smoother Mean', alpha=0.8)
            if V_smooth is not None:
                std_smooth = np.sqrt(V_smooth[:, i, i])
                ax.fill_between(t, m_smooth[:, i] - 2*std_smooth, m_smooth[:, i] + 2*std_smooth,
                                alpha=0.2, color='red', label='Smoother +/-2sigma')

        ax.set_xlabel('Time')
        ax.set_ylabel(f'State {i+1}')
        ax.set_title(f'{title} - State {i+1}')
        ax.legend()
        ax.grid(True, alpha=0.3)

    _finish(save_path)


def plot_filter_estimate_with_bands(t, xs_true, means, covs, filter_name,
                                    state_idx=0, n_sigma=1.0,
                                    diagnostic_data=None,
                                    diagnostic_label='Absolute Error',
                                    diagnostic_log_scale=True,
                                    save_path=None, figsize=(12, 8)):
    """
    Plot estimates with uncertainty bands and a diagnostic subplot.

    Parameters
    ----------
    t : ndarray [T]
        Time array
    xs_true : ndarray [T] or [T, n_x]
        True state(s)
    means : ndarray [T, n_x]
        Filtered or smoothed means
    covs : ndarray [T, n_x, n_x]
        Filtered or smoothed covariances
    filter_name : str
        Name for title/legend
    state_idx : int
        Which state dimension to plot (default: 0)
    n_sigma : float
        Number of standard deviations for bands (default: 1.0)
    diagnostic_data : ndarray [T], optional
        Data for diagnostic subplot (e.g., condition number, surprise).
        Defaults to the absolute error.
    diagnostic_label : str
        Y-axis label for diagnostic subplot
    diagnostic_log_scale : bool
        Use log scale for diagnostic subplot
    save_path : str, optional
        Path to save figure
    figsize : tuple
        Figure size
    """
    xs = xs_true if xs_true.ndim == 1 else xs_true[:, state_idx]
    x_est = means[:, state_idx]
    std = np.sqrt(covs[:, state_idx, state_idx])

    fig, axes = plt.subplots(2, 1, figsize=figsize)

    ax1 = axes[0]
    ax1.plot(t, xs, 'b+', markersize=6, label='True State', alpha=0.8)
    ax1.plot(t, x_est, 'r-', linewidth=2, label='Mean')
    ax1.fill_between(t, x_est - n_sigma * std, x_est + n_sigma * std,
                     alpha=0.3, color='red', label=f'+/- {n_sigma} S.D.')
    ax1.set_xlabel('Time')
    ax1.set_ylabel('State')
    ax1.set_title(f'{filter_name} Estimate')
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    ax2 = axes[1]
    if diagnostic_data is None:
        diagnostic_data = np.abs(x_est - xs)
        diagnostic_label = 'Absolute Error'
    ax2.plot(t, diagnostic_data, 'b-', linewidth=2)
    if diagnostic_log_scale:
        ax2.set_yscale('log')
    ax2.set_xlabel('Time')
    ax2.set_ylabel(diagnostic_label)
    ax2.set_title(f'{filter_name} Diagnostics')
    ax2.grid(True, alpha=0.3)

    _finish(save_path)


def plot_stability_analysis(T, xs, m_joseph, m_std, cond_joseph, cond_std,
                            save_path=None):
    """
    Plot stability analysis comparing Joseph vs standard covariance update.

    Parameters
    ----------
    T : int
        Number of time steps
    xs : ndarray [T, n_x]
        True states
    m_joseph, m_std : ndarray [T, n_x]
        Filtered means (Joseph and standard)
    cond_joseph, cond_std : ndarray [T]
        Condition numbers
    save_path : str, optional
        Path to save figure
    """
    t = np.arange(T)

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))

    ax1 = axes[0]
    ax1.semilogy(t, cond_joseph, 'b-', linewidth=1.5, label='Joseph', alpha=0.8)
    ax1.semilogy(t, cond_std, 'r--', linewidth=1.5, label='Standard', alpha=0.8)
    ax1.set_xlabel('Time')
    ax1.set_ylabel('Condition Number')
    ax1.set_title('Condition Number Over Time')
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    ax2 = axes[1]
    ax2.plot(t, np.linalg.norm(m_joseph - xs, axis=1), 'b-', linewidth=1.5, label='Joseph', alpha=0.8)
    ax2.plot(t, np.linalg.norm(m_std - xs, axis=1), 'r--', linewidth=1.5, label='Standard', alpha=0.8)
    ax2.set_xlabel('Time')
    ax2.set_ylabel('Estimation Error (2-norm)')
    ax2.set_title('Estimation Error Over Time')
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    plt.suptitle('Stability Analysis: Joseph vs Standard Covariance Update',
                 fontsize=14, fontweight='bold')
    _finish(save_path)


def plot_free_energy(surprise, save_path=None, title="Free Energy"):
    """
    Plot per-step surprise and its running sum (the free energy).

    Parameters
    ----------
    surprise : ndarray [T]
        Per-step negative log marginal likelihood
    save_path : str, optional
        Path to save figure
    title : str
        Plot title
    """
    t = np.arange(len(surprise))

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))

    axes[0].plot(t, surprise, 'b-', lw=1.5)
    axes[0].set_ylabel('Surprise  -log p(y_t | y_1:t-1)')
    axes[0].set_title('Per-step Surprise')

    axes[1].plot(t, np.cumsum(surprise), 'r-', lw=1.5)
    axes[1].set_ylabel('Cumulative Free Energy')
    axes[1].set_title(f'Total = {np.sum(surprise):.2f}')

    for ax in axes:
        ax.set_xlabel('Time')
        ax.grid(True, alpha=0.3)

    plt.suptitle(title, fontsize=14, fontweight='bold')
    _finish(save_path)
