"""
Visualization utilities for 2-D trajectories and Gaussian beliefs.

Functions for plotting:
- Covariance ellipses of beliefs along a trajectory
- True vs estimated 2-D trajectories
- Estimation error over time
"""
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Ellipse

DEFAULT_COLORS = ['#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd']


def plot_covariance_ellipse(
    ax: plt.Axes,
    mean: np.ndarray,
    cov: np.ndarray,
    n_std: float = 2.0,
    **kwargs
) -> Ellipse:
    """
    Plot covariance ellipse on given axis.

    Parameters
    ----------
    ax : matplotlib.axes.Axes
        Axis to plot on
    mean : ndarray [2]
        Center of ellipse (x, y)
    cov : ndarray [2, 2]
        2x2 covariance matrix
    n_std : float
        Number of standard deviations for ellipse size
    **kwargs
        Additional arguments passed to matplotlib.patches.Ellipse

    Returns
    -------
    ellipse : matplotlib.patches.Ellipse
    """
    eigenvalues, eigenvectors = np.linalg.eigh(cov)

    # Largest first
    order = eigenvalues.argsort()[::-1]
    eigenvalues = np.clip(eigenvalues[order], 0.0, None)
    eigenvectors = eigenvectors[:, order]

    angle = np.degrees(np.arctan2(eigenvectors[1, 0], eigenvectors[0, 0]))
    width = 2 * n_std * np.sqrt(eigenvalues[0])
    height = 2 * n_std * np.sqrt(eigenvalues[1])

    ellipse = Ellipse(mean, width, height, angle=angle, **kwargs)
    ax.add_patch(ellipse)
    return ellipse


def plot_belief_ellipses(
    ax: plt.Axes,
    means: np.ndarray,
    covs: np.ndarray,
    every: int = 10,
    n_std: float = 2.0,
    dims: tuple = (0, 1),
    color: str = 'blue',
    alpha: float = 0.3,
) -> list:
    """
    Draw covariance ellipses for every `every`-th belief of a sequence.

    Parameters
    ----------
    ax : matplotlib.axes.Axes
        Axis to plot on
    means : ndarray [T, n_x]
        Belief means
    covs : ndarray [T, n_x, n_x]
        Belief covariances
    every : int
        Stride between drawn ellipses
    n_std : float
        Number of standard deviations
    dims : tuple of int
        State dimensions to project onto
    color : str
        Ellipse edge color
    alpha : float
        Transparency

    Returns
    -------
    list of Ellipse
    """
    ix, iy = dims
    sub = np.ix_([ix, iy], [ix, iy])
    ellipses = []
    for t in range(0, len(means), max(1, every)):
        ellipses.append(plot_covariance_ellipse(
            ax, means[t, [ix, iy]], covs[t][sub], n_std=n_std,
            fill=False, edgecolor=color, alpha=alpha,
        ))
    return ellipses


def plot_trajectory_comparison(
    ax: plt.Axes,
    xs_true: np.ndarray,
    estimates: dict,
    pos_indices: tuple = (0, 1),
    observations: Optional[np.ndarray] = None,
    colors: Optional[dict] = None,
    show_mse: bool = True,
    true_label: str = 'True',
) -> None:
    """
    Plot 2-D trajectory comparison between true and estimated paths.

    Parameters
    ----------
    ax : matplotlib.axes.Axes
        Axis to plot on
    xs_true : ndarray [T, n_x]
        True states
    estimates : dict
        Mapping of method names to estimated states [T, n_x]
    pos_indices : tuple of int
        Indices of the two plotted state components
    observations : ndarray [T, 2], optional
        Observations to scatter underneath
    colors : dict, optional
        Color mapping for methods
    show_mse : bool
        Show MSE in legend labels
    true_label : str
        Label for true trajectory
    """
    colors = colors or {}
    ix, iy = pos_indices
    true_pos = xs_true[:, [ix, iy]]

    if observations is not None:
        ax.scatter(observations[:, 0], observations[:, 1], s=8, c='gray',
                   alpha=0.4, label='Observations')

    ax.plot(true_pos[:, 0], true_pos[:, 1], color='black', linewidth=2,
            label=true_label, alpha=0.8)
    ax.scatter(true_pos[0, 0], true_pos[0, 1], color='black', marker='o', s=80, zorder=10)
    ax.scatter(true_pos[-1, 0], true_pos[-1, 1], color='black', marker='x', s=80, zorder=10)

    for idx, (name, est) in enumerate(estimates.items()):
        est_pos = est[:, [ix, iy]]
        color = colors.get(name, DEFAULT_COLORS[idx % len(DEFAULT_COLORS)])
        label = f'{name} (MSE={np.mean((est_pos - true_pos)**2):.2f})' if show_mse else name
        ax.plot(est_pos[:, 0], est_pos[:, 1], color=color, linestyle='--',
                linewidth=1.5, label=label, alpha=0.8)

    ax.set_xlabel(f'State {ix + 1}')
    ax.set_ylabel(f'State {iy + 1}')
    ax.legend(loc='best', fontsize=8)
    ax.grid(True, alpha=0.3)
    ax.set_aspect('equal', adjustable='datalim')


def plot_error_over_time(
    ax: plt.Axes,
    t: np.ndarray,
    xs_true: np.ndarray,
    estimates: dict,
    colors: Optional[dict] = None,
    ylabel: str = 'Estimation Error',
) -> None:
    """
    Plot Euclidean state error over time for several estimates.

    Parameters
    ----------
    ax : matplotlib.axes.Axes
        Axis to plot on
    t : ndarray [T]
        Time array
    xs_true : ndarray [T, n_x]
        True states
    estimates : dict
        Mapping of method names to estimated states [T, n_x]
    colors : dict, optional
        Color mapping
    ylabel : str
        Y-axis label
    """
    colors = colors or {}
    for idx, (name, est) in enumerate(estimates.items()):
        error = np.linalg.norm(est - xs_true, axis=1)
        color = colors.get(name, DEFAULT_COLORS[idx % len(DEFAULT_COLORS)])
        ax.plot(t, error, color=color, linewidth=1.5, label=name, alpha=0.8)

    ax.set_xlabel('Time')
    ax.set_ylabel(ylabel)
    ax.legend(loc='best', fontsize=8)
    ax.grid(True, alpha=0.3)
