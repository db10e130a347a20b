"""Linear Gaussian State Space Model (LGSSM)."""
import numpy as np

from ..errors import DimensionMismatchError
from ..filters.common import GaussianBelief, check_covariance, validate_lgssm, validate_vector


def default_initial_state(n_x):
    """Alternating initial state [10, -10, 10, ...] of length n_x."""
    return 10.0 * (-1.0) ** np.arange(n_x)


def linear_gaussian_ssm(A, B, Q, P, T, rng, x0=None):
    """
    Simulate Linear Gaussian SSM.

    x_t ~ N(A x_{t-1}, Q),  y_t ~ N(B x_t, P),  t = 1..T

    Parameters
    ----------
    A : ndarray [n_x, n_x]
        State transition matrix
    B : ndarray [n_y, n_x]
        Observation matrix
    Q : ndarray [n_x, n_x]
        Process noise covariance
    P : ndarray [n_y, n_y]
        Observation noise covariance
    T : int
        Number of time steps
    rng : numpy.random.Generator
        Random number generator
    x0 : ndarray [n_x], optional
        Fixed state preceding the first step. Defaults to [10, -10, ...].

    Returns
    -------
    xs : ndarray [T, n_x]
        Latent states
    ys : ndarray [T, n_y]
        Observations

    Raises
    ------
    DimensionMismatchError
        If the matrices or x0 have inconsistent shapes (before sampling).
    """
    A, B, Q, P = validate_lgssm(A, B, Q, P)
    n_x, n_y = A.shape[0], B.shape[0]
    x = validate_vector(default_initial_state(n_x) if x0 is None else x0, n_x, 'x0')
    if int(T) != T or T < 0:
        raise ValueError(f"T must be a non-negative integer, got {T}")
    T = int(T)

    xs = np.zeros((T, n_x))
    ys = np.zeros((T, n_y))

    for t in range(T):
        x = rng.multivariate_normal(A @ x, Q)
        y = rng.multivariate_normal(B @ x, P)
        xs[t], ys[t] = x, y

    return xs, ys


def generate(seed, A, B, Q, P, n, x0=None):
    """Simulate n steps with a generator seeded by `seed`; see linear_gaussian_ssm."""
    rng = np.random.default_rng(seed)
    return linear_gaussian_ssm(A, B, Q, P, n, rng, x0=x0)


def rotation_matrix(theta):
    """2-D rotation by angle theta (radians)."""
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s], [s, c]])


class LinearGaussianSSM:
    """Time-invariant linear-Gaussian state space model.

    State: x_t = A x_{t-1} + q_t,  q_t ~ N(0, Q)
    Observations: y_t = B x_t + p_t,  p_t ~ N(0, P)

    Parameters
    ----------
    A : ndarray [n_x, n_x]
        State transition matrix
    B : ndarray [n_y, n_x]
        Observation matrix
    Q : ndarray [n_x, n_x]
        Process noise covariance
    P : ndarray [n_y, n_y]
        Observation noise covariance
    x0 : ndarray [n_x], optional
        State preceding the first step of a simulation
    m0, V0 : ndarray, optional
        Prior belief over the initial state used for filtering.
        Defaults to N(0, 100 I).
    """

    def __init__(self, A, B, Q, P, x0=None, m0=None, V0=None):
        """Initialize and validate the model."""
        self.A, self.B, self.Q, self.P = validate_lgssm(A, B, Q, P)
        n_x = self.n_x
        self.x0 = validate_vector(default_initial_state(n_x) if x0 is None else x0, n_x, 'x0')
        self.set_initial(np.zeros(n_x) if m0 is None else m0,
                         100.0 * np.eye(n_x) if V0 is None else V0)

    @classmethod
    def rotation(cls, theta=np.pi / 35, q=1.0, p=25.0, prior_var=100.0):
        """2-D rotating-state model: A = R(theta), B = I, Q = q I, P = p I."""
        return cls(
            A=rotation_matrix(theta),
            B=np.eye(2),
            Q=q * np.eye(2),
            P=p * np.eye(2),
            x0=np.array([10.0, -10.0]),
            m0=np.zeros(2),
            V0=prior_var * np.eye(2),
        )

    @property
    def n_x(self):
        return self.A.shape[0]

    @property
    def n_y(self):
        return self.B.shape[0]

    @property
    def prior(self):
        """Prior belief (mean, covariance) over the initial state."""
        return GaussianBelief(self.m0, self.V0)

    def set_initial(self, m0, V0):
        """Set the prior belief over the initial state."""
        self.m0 = validate_vector(m0, self.n_x, 'm0')
        V0 = np.asarray(V0, dtype=float)
        if V0.shape != (self.n_x, self.n_x):
            raise DimensionMismatchError(
                f"V0 must have shape {(self.n_x, self.n_x)}, got {V0.shape}"
            )
        check_covariance(V0, 'V0')
        self.V0 = V0

    def simulate(self, T, rng):
        """Generate states and observations.

        Parameters
        ----------
        T : int
            Number of time steps
        rng : numpy.random.Generator
            Random number generator

        Returns
        -------
        xs : ndarray [T, n_x]
            True states
        ys : ndarray [T, n_y]
            Observations
        """
        return linear_gaussian_ssm(self.A, self.B, self.Q, self.P, T, rng, x0=self.x0)

    def as_dict(self):
        """Model matrices keyed by name, for filter calls: kalman_filter(ys, **model.as_dict())."""
        return {'A': self.A, 'B': self.B, 'Q': self.Q, 'P': self.P,
                'prior': self.prior}
