import numpy as np
import pytest

from dsgeopt.errors import GensysError
from dsgeopt.model import AbstractModel, Parameter
from dsgeopt.priors import Uniform
from dsgeopt.transforms import Untransformed


class QuadraticModel(AbstractModel):
    """
    Log-likelihood -sum(weights * (theta - targets)**2). The model fails to
    solve when theta_0 exceeds no_solve_above.
    """
    def __init__(self, targets, values=None, fixed=(), bounds=(-10.0, 10.0),
                 transform=Untransformed, weights=None, seed=0):
        super().__init__(seed=seed)
        self.targets = np.asarray(targets, dtype=float)
        self.weights = np.ones(len(self.targets)) if weights is None else np.asarray(weights, dtype=float)
        self.no_solve_above = np.inf
        self.n_solves = 0
        self.n_likelihood = 0

        values = np.zeros(len(self.targets)) if values is None else values
        for i, val in enumerate(values):
            self.add_parameter(Parameter(f"theta_{i}", float(val), bounds, fixed=i in fixed,
                                         transform=transform, prior=Uniform(*bounds)))

    def solve(self):
        self.n_solves += 1
        self.check_bounds()
        if self["theta_0"] > self.no_solve_above:
            raise GensysError("No stable solution", eu=[0, 1])
        return None, None, None

    def likelihood(self, data):
        self.n_likelihood += 1
        self.solve()
        theta = self.parameter_values()
        return -np.sum(self.weights * (theta - self.targets)**2)


@pytest.fixture
def make_model():
    return QuadraticModel


@pytest.fixture
def three_param_model():
    # theta_2 is fixed away from its target
    return QuadraticModel(targets=[1.0, -2.0, 0.0], values=[0.0, 0.0, 0.5], fixed=(2,))


@pytest.fixture
def data():
    return np.zeros((1, 1))
