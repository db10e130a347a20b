"""Shared pytest fixtures for unit tests."""

import numpy as np
import pytest

from lgssm.filters import GaussianBelief
from lgssm.ssm import LinearGaussianSSM


@pytest.fixture
def rng():
    """Seeded random number generator."""
    return np.random.default_rng(42)


@pytest.fixture
def kf_system():
    """2D state observed through its first component (A, B, Q, P, prior)."""
    A = np.array([[1.0, 0.1], [0.0, 0.95]])
    B = np.array([[1.0, 0.0]])
    Q = np.diag([0.01, 0.01])
    P = np.array([[0.01]])
    prior = GaussianBelief(np.zeros(2), np.eye(2))
    return A, B, Q, P, prior


@pytest.fixture
def rotation_model():
    """Rotation by pi/35 with B = I, Q = I, P = 25 I and prior N(0, 100 I)."""
    return LinearGaussianSSM.rotation()


@pytest.fixture
def rotation_data(rotation_model):
    """300-step trajectory of the rotation model."""
    xs, ys = rotation_model.simulate(300, np.random.default_rng(42))
    return rotation_model, xs, ys


def check_psd(matrix, tol=1e-10):
    """Check if matrix is positive semi-definite."""
    return np.all(np.linalg.eigvalsh(matrix) >= -tol)


def check_symmetric(matrix, tol=1e-12):
    """Check if matrix equals its transpose."""
    return np.allclose(matrix, matrix.T, atol=tol, rtol=0)
