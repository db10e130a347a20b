"""
Visualization utilities for linear-Gaussian filtering and smoothing.

This module provides plotting functions organized by domain:
- filters: state estimates with uncertainty bands, stability, free energy
- tracking: 2-D trajectories, covariance ellipses, error over time
- tables: metrics tables and summaries
"""
from .filters import (
    plot_kalman_filter,
    plot_filter_estimate_with_bands,
    plot_stability_analysis,
    plot_free_energy,
)

from .tracking import (
    plot_covariance_ellipse,
    plot_belief_ellipses,
    plot_trajectory_comparison,
    plot_error_over_time,
    DEFAULT_COLORS,
)

from .tables import (
    render_metrics_table,
    save_metrics_table,
    format_runtime,
    metrics_to_latex,
)

__all__ = [
    # filters
    'plot_kalman_filter',
    'plot_filter_estimate_with_bands',
    'plot_stability_analysis',
    'plot_free_energy',
    # tracking
    'plot_covariance_ellipse',
    'plot_belief_ellipses',
    'plot_trajectory_comparison',
    'plot_error_over_time',
    'DEFAULT_COLORS',
    # tables
    'render_metrics_table',
    'save_metrics_table',
    'format_runtime',
    'metrics_to_latex',
]
