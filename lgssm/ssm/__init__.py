"""State Space Model implementations."""
from .linear_gaussian import (
    linear_gaussian_ssm,
    generate,
    rotation_matrix,
    default_initial_state,
    LinearGaussianSSM,
)

__all__ = [
    'linear_gaussian_ssm',
    'generate',
    'rotation_matrix',
    'default_initial_state',
    'LinearGaussianSSM',
]
