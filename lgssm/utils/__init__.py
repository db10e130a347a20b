"""
Utility Functions.

This module contains utility functions for:
- Metrics computation
- Visualization (organized in visualization/ subfolder)
- Experiment logging
- Runtime profiling
"""
from .metrics import (
    compute_mse,
    compute_rmse,
    compute_nees,
    compute_nis,
    compute_symmetry_error,
    compute_min_eigenvalues,
    steady_state_step,
    stability_summary,
)
from .experiment_logger import ExperimentLogger
from .profiling import profile, time_callable, ProfileResult

# Visualization imports from subfolder
from .visualization import (
    # filters
    plot_kalman_filter,
    plot_stability_analysis,
    plot_free_energy,
    # tracking
    plot_covariance_ellipse,
    plot_belief_ellipses,
    plot_trajectory_comparison,
    # tables
    save_metrics_table,
    format_runtime,
    metrics_to_latex,
)

__all__ = [
    # metrics
    'compute_mse',
    'compute_rmse',
    'compute_nees',
    'compute_nis',
    'compute_symmetry_error',
    'compute_min_eigenvalues',
    'steady_state_step',
    'stability_summary',
    # experiment logger
    'ExperimentLogger',
    # profiling
    'profile',
    'time_callable',
    'ProfileResult',
    # visualization - filters
    'plot_kalman_filter',
    'plot_stability_analysis',
    'plot_free_energy',
    # visualization - tracking
    'plot_covariance_ellipse',
    'plot_belief_ellipses',
    'plot_trajectory_comparison',
    # visualization - tables
    'save_metrics_table',
    'format_runtime',
    'metrics_to_latex',
]
