import enum
import logging
import numpy as np
from collections import OrderedDict

from .errors import ParamBoundsError, GensysError
from .transforms import Untransformed

logger = logging.getLogger(__name__)


class Parameter:
    def __init__(self, name, value, value_bounds=(1e-20, 1e5), fixed=False,
                 transform=Untransformed, description="", tex_label="", scaling=None, prior=None):
        self.name = name
        self.raw_value = value
        self.value_bounds = value_bounds
        self.fixed = fixed
        self.transform = transform
        self.description = description
        self.tex_label = tex_label
        self.scaling = scaling
        self.prior = prior

    @property
    def value(self):
        if self.scaling:
            return self.scaling(self.raw_value)
        return self.raw_value

    @value.setter
    def value(self, val):
        self.raw_value = val

    def in_bounds(self, val=None):
        val = self.raw_value if val is None else val
        a, b = self.value_bounds
        return a <= val <= b

    def __repr__(self):
        flag = " (fixed)" if self.fixed else ""
        return f"Parameter({self.name}={self.raw_value}{flag})"


class SolveOutcome(enum.Enum):
    SOLVED = "solved"
    BOUNDS_VIOLATION = "bounds_violation"
    NO_SOLUTION = "no_solution"

    @property
    def ok(self):
        return self is SolveOutcome.SOLVED


class AbstractModel:
    def __init__(self, seed=None):
        self.parameters = OrderedDict()
        self.steady_state = OrderedDict()
        self.endogenous_states = OrderedDict()
        self.exogenous_shocks = OrderedDict()
        self.expected_shocks = OrderedDict()
        self.equilibrium_conditions = OrderedDict()
        self.observables = OrderedDict()
        self.rng = np.random.default_rng(seed)

    def add_parameter(self, param):
        self.parameters[param.name] = param

    def __getitem__(self, key):
        if key in self.parameters:
            return self.parameters[key].value
        if key in self.steady_state:
            return self.steady_state[key]
        if hasattr(self, key):
            return getattr(self, key)
        raise KeyError(key)

    @property
    def n_parameters(self):
        return len(self.parameters)

    @property
    def n_parameters_free(self):
        return sum(1 for p in self.parameters.values() if not p.fixed)

    @property
    def n_states(self):
        return len(self.endogenous_states)

    @property
    def n_shocks_exogenous(self):
        return len(self.exogenous_shocks)

    @property
    def n_shocks_expectational(self):
        return len(self.expected_shocks)

    @property
    def n_observables(self):
        return len(self.observables)

    def parameter_values(self):
        return np.array([p.raw_value for p in self.parameters.values()], dtype=float)

    def update(self, values):
        """
        Installs a full vector of model-space values. Fixed parameters keep
        their current value. Bounds are not checked here, see check_bounds.
        """
        values = np.asarray(values, dtype=float)
        if values.shape != (self.n_parameters,):
            raise ValueError(f"Expected {self.n_parameters} parameter values, got shape {values.shape}")

        for param, val in zip(self.parameters.values(), values):
            if not param.fixed:
                param.raw_value = float(val)
        self.steadystate()

    def check_bounds(self):
        for param in self.parameters.values():
            if not param.fixed and not param.in_bounds():
                raise ParamBoundsError(param.name, param.raw_value, param.value_bounds)

    def eqcond(self):
        raise NotImplementedError

    def measurement(self, TTT, RRR, CCC):
        raise NotImplementedError

    def steadystate(self):
        # Models without steady-state quantities have nothing to recompute
        pass

    def solve(self):
        """
        Solves the model for its state-space transition matrices.

        Raises ParamBoundsError if a free parameter is out of bounds and
        GensysError if there is no unique stable solution.
        """
        from .solvers.gensys import gensys

        self.check_bounds()
        gamma0, gamma1, c, psi, pi = self.eqcond()
        TTT, CCC, RRR = gensys(gamma0, gamma1, c, psi, pi)
        return TTT, RRR, CCC

    def try_solve(self, values=None):
        """
        Optionally installs `values`, then solves. Known solve failures are
        reported as a SolveOutcome; anything else propagates.
        """
        try:
            if values is not None:
                self.update(values)
            self.solve()
        except ParamBoundsError as err:
            logger.debug("Rejected parameters: %s", err)
            return SolveOutcome.BOUNDS_VIOLATION
        except GensysError as err:
            logger.debug("Model does not solve: %s", err)
            return SolveOutcome.NO_SOLUTION
        return SolveOutcome.SOLVED

    def likelihood(self, data):
        return self.filter(data, outputs=['loglh'])

    def filter(self, data, outputs=['loglh', 'states', 'variances']):
        """
        Runs the Kalman Filter and returns requested outputs.
        """
        from .solvers.kalman import kalman_filter

        TTT, RRR, CCC = self.solve()
        ZZ, DD, QQ, EE = self.measurement(TTT, RRR, CCC)
        s0, P0 = self.init_stationary_states(TTT, RRR, QQ)
        return kalman_filter(data, TTT, RRR, QQ, ZZ, DD, EE, s0, P0, outputs=outputs)

    def init_stationary_states(self, TTT, RRR, QQ):
        """
        Solves the discrete Lyapunov equation for the initial variance P0.
        P = T P T' + R Q R'
        """
        from scipy.linalg import solve_discrete_lyapunov
        n_states = TTT.shape[0]
        s0 = np.zeros(n_states)

        Q_sigma = RRR @ QQ @ RRR.T

        try:
            P0 = solve_discrete_lyapunov(TTT, Q_sigma)
        except np.linalg.LinAlgError:
            # Non-stationary transition, start from a diffuse-ish variance
            P0 = np.eye(n_states) * 10.0

        return s0, P0

    def init_model_indices(self):
        raise NotImplementedError("Subclasses must implement init_model_indices")
