"""Exceptions raised by the generator, filter and smoother."""
import numpy as np


class DimensionMismatchError(ValueError):
    """Matrix or vector shapes supplied by the caller are inconsistent."""


class SingularMatrixError(np.linalg.LinAlgError):
    """A matrix that must be inverted is singular within tolerance."""

    def __init__(self, message, step=None):
        super().__init__(message)
        self.step = step


class NonPositiveSemiDefiniteError(np.linalg.LinAlgError):
    """A covariance matrix is not symmetric positive semi-definite."""

    def __init__(self, message, step=None):
        super().__init__(message)
        self.step = step
