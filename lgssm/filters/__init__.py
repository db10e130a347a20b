"""Filtering and smoothing algorithm implementations."""
from .kf import kalman_filter, kf_predict, kf_update, FilterResult, UpdateResult, gaussian_surprise
from .smoother import rts_smoother, rts_smooth_step, smoother_gain, SmootherResult
from .common import (
    GaussianBelief,
    joseph_update,
    standard_update,
    symmetrize,
    check_covariance,
    validate_lgssm,
)

__all__ = [
    # Main passes
    'kalman_filter',
    'rts_smoother',
    # KF components
    'kf_predict',
    'kf_update',
    'gaussian_surprise',
    # Smoother components
    'rts_smooth_step',
    'smoother_gain',
    # Results
    'GaussianBelief',
    'FilterResult',
    'UpdateResult',
    'SmootherResult',
    # Utilities
    'joseph_update',
    'standard_update',
    'symmetrize',
    'check_covariance',
    'validate_lgssm',
]
