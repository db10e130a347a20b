"""Unit tests for shared filter helpers and model validation."""

import numpy as np
import pytest

from lgssm.errors import DimensionMismatchError, NonPositiveSemiDefiniteError
from lgssm.filters.common import (
    check_covariance, joseph_update, standard_update, symmetrize, validate_lgssm,
    validate_vector,
)


class TestCovarianceUpdates:

    def test_joseph_equals_standard_at_optimal_gain(self):
        """Both forms agree when K is the optimal gain."""
        V_pred = np.array([[2.0, 0.3], [0.3, 1.0]])
        B = np.array([[1.0, 0.0]])
        P = np.array([[0.5]])
        K = V_pred @ B.T @ np.linalg.inv(B @ V_pred @ B.T + P)

        np.testing.assert_allclose(joseph_update(V_pred, K, B, P),
                                   standard_update(V_pred, K, B), atol=1e-12)

    def test_joseph_psd_for_suboptimal_gain(self):
        """Joseph form stays PSD for an arbitrary gain."""
        V_pred = np.eye(2)
        B = np.eye(2)
        P = 0.1 * np.eye(2)
        K = 3.0 * np.eye(2)

        V = joseph_update(V_pred, K, B, P)

        assert np.linalg.eigvalsh(V).min() >= 0

    def test_symmetrize(self):
        M = np.array([[1.0, 2.0], [0.0, 1.0]])
        np.testing.assert_array_equal(symmetrize(M), [[1.0, 1.0], [1.0, 1.0]])


class TestCheckCovariance:

    def test_accepts_psd(self):
        check_covariance(np.diag([1.0, 0.0]))
        check_covariance(np.zeros((3, 3)))
        check_covariance(np.zeros((0, 0)))

    def test_tolerates_roundoff(self):
        """Tiny negative eigenvalues from rounding are accepted."""
        check_covariance(np.diag([1e6, -1e-6]))

    def test_rejects_indefinite(self):
        with pytest.raises(NonPositiveSemiDefiniteError, match="positive semi-definite"):
            check_covariance(np.diag([1.0, -0.5]))

    def test_rejects_asymmetric(self):
        with pytest.raises(NonPositiveSemiDefiniteError, match="symmetric"):
            check_covariance(np.array([[1.0, 0.5], [0.0, 1.0]]))

    def test_rejects_nan(self):
        with pytest.raises(NonPositiveSemiDefiniteError):
            check_covariance(np.array([[np.nan, 0.0], [0.0, 1.0]]))

    def test_reports_step(self):
        """The failing step is carried on the exception."""
        with pytest.raises(NonPositiveSemiDefiniteError) as exc_info:
            check_covariance(-np.eye(2), name='V_filt', step=7)

        assert exc_info.value.step == 7
        assert "step 7" in str(exc_info.value)
        assert isinstance(exc_info.value, np.linalg.LinAlgError)


class TestValidateLGSSM:

    def test_returns_float_arrays(self):
        A, B, Q, P = validate_lgssm([[1]], [[1]], [[0]], [[1]])

        for M in (A, B, Q, P):
            assert M.dtype == np.float64
            assert M.shape == (1, 1)

    def test_non_square_observation(self):
        """B may have fewer rows than the state dimension."""
        A, B, Q, P = validate_lgssm(np.eye(3), np.ones((1, 3)), np.eye(3), np.eye(1))
        assert B.shape == (1, 3)

    def test_rejects_vector_matrix(self):
        with pytest.raises(DimensionMismatchError, match="2-D"):
            validate_lgssm(np.eye(2), np.ones(2), np.eye(2), np.eye(1))

    def test_rejects_wrong_observation_noise(self):
        with pytest.raises(DimensionMismatchError, match="P must have shape"):
            validate_lgssm(np.eye(2), np.ones((1, 2)), np.eye(2), np.eye(2))

    def test_rejects_indefinite_observation_noise(self):
        with pytest.raises(NonPositiveSemiDefiniteError):
            validate_lgssm(np.eye(2), np.eye(2), np.eye(2), -np.eye(2))

    def test_dimension_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_lgssm(np.ones((2, 3)), np.eye(2), np.eye(2), np.eye(2))


class TestValidateVector:

    def test_accepts_list(self):
        np.testing.assert_array_equal(validate_vector([1, 2], 2, 'm0'), [1.0, 2.0])

    def test_rejects_wrong_length(self):
        with pytest.raises(DimensionMismatchError, match="m0"):
            validate_vector(np.zeros(3), 2, 'm0')


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
