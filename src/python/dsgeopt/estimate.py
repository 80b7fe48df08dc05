import logging
from contextlib import contextmanager

import numpy as np

from .errors import ProposalError, UnsupportedMethodError
from .optimizers.csminwel import csminwel
from .optimizers.simulated_annealing import simulated_annealing
from .posterior import posterior
from .priors import sample_prior
from .transforms import (transform_to_real_line, transform_to_model_space,
                         transform_to_model_space_inplace)

logger = logging.getLogger(__name__)

OPTIMIZERS = {
    "csminwel": csminwel,
    "simulated_annealing": simulated_annealing,
}

VERBOSITY = {
    "none": logging.WARNING,
    "low": logging.INFO,
    "high": logging.DEBUG,
}


def get_optimizer(method):
    try:
        return OPTIMIZERS[method]
    except KeyError as e:
        raise UnsupportedMethodError(
            f"Method {method!r} is not supported. Available: {tuple(OPTIMIZERS)}"
        ) from e


@contextmanager
def _verbosity(verbose):
    pkg_logger = logging.getLogger("dsgeopt")
    previous = pkg_logger.level
    pkg_logger.setLevel(VERBOSITY[verbose])
    try:
        yield
    finally:
        pkg_logger.setLevel(previous)


def free_indices(model):
    """
    Positions of the non-fixed parameters in model.parameters.
    """
    return np.array([i for i, p in enumerate(model.parameters.values()) if not p.fixed], dtype=int)


class PosteriorObjective:
    """
    Negative log-posterior as a function of the free parameters on the real line.

    Holds the full real-line parameter vector; each call overwrites its free
    entries, installs the result in the model and evaluates the posterior
    with errors caught. Calls mutate the model's parameters.
    """
    def __init__(self, model, data):
        self.model = model
        self.data = data
        self.free_indices = free_indices(model)
        self.x_full = transform_to_real_line(model.parameters)
        self.n_calls = 0

    @property
    def x0(self):
        return self.x_full[self.free_indices].copy()

    def expand(self, x_opt):
        x = self.x_full.copy()
        x[self.free_indices] = x_opt
        return x

    def __call__(self, x_opt):
        self.n_calls += 1
        self.x_full[self.free_indices] = x_opt
        transform_to_model_space_inplace(self.model, self.x_full)
        return -posterior(self.model, self.data, catch_errors=True)


class NeighborProposal:
    """
    Step proposals for simulated annealing that only return points at which
    the model solves.

    Each free parameter takes a step in model space of
    ((b - a) * U(0,1) + a) * cc * var_i, where (a, b) are its bounds and
    var_i its prior variance estimated from n_prior_draws prior draws. Draws
    at which the model is out of bounds or has no solution are redrawn.

    max_attempts caps the number of redraws (unbounded by default) and
    refresh_prior_cov=False estimates the prior variances only once.
    """
    def __init__(self, objective, rng, cc=0.01, n_prior_draws=10000,
                 max_attempts=None, refresh_prior_cov=True):
        self.objective = objective
        self.rng = rng
        self.cc = cc
        self.n_prior_draws = n_prior_draws
        self.max_attempts = max_attempts
        self.refresh_prior_cov = refresh_prior_cov
        self._prior_var = None

    def prior_variances(self):
        if self._prior_var is None or self.refresh_prior_cov:
            prior_draws = sample_prior(self.objective.model, self.n_prior_draws, self.rng)
            prior_cov = np.atleast_2d(np.cov(prior_draws, rowvar=False))
            self._prior_var = np.diag(prior_cov).copy()
        return self._prior_var

    def __call__(self, x, x_proposal):
        model = self.objective.model
        free = self.objective.free_indices
        if np.shape(x) != np.shape(x_proposal) or len(x) != len(free):
            raise ValueError(f"x and x_proposal must both have length {len(free)}, "
                             f"got {np.shape(x)} and {np.shape(x_proposal)}")

        params = list(model.parameters.values())
        prior_var = self.prior_variances()
        x_model = transform_to_model_space(params, self.objective.expand(x))

        attempts = 0
        while True:
            candidate = x_model.copy()
            for i in free:
                a, b = params[i].value_bounds
                candidate[i] = x_model[i] + ((b - a) * self.rng.random() + a) * self.cc * prior_var[i]

            outcome = model.try_solve(candidate)
            if outcome.ok:
                break

            attempts += 1
            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise ProposalError(f"No solvable proposal after {attempts} attempts")

        if attempts:
            logger.debug("Proposal accepted after %d rejected draws", attempts)
        x_proposal[:] = transform_to_real_line(params, candidate)[free]


def reconstruct_result(objective, result, H_):
    """
    Lifts a free-parameter result to the full parameter vector.

    result.minimum becomes the full real-line vector and the model is left
    at that point. Returns the full Hessian, zero in fixed rows and columns.
    """
    model = objective.model
    free = objective.free_indices

    objective.x_full[free] = result.minimum
    transform_to_model_space_inplace(model, objective.x_full)
    result.minimum = objective.x_full.copy()

    n = model.n_parameters
    H = np.zeros((n, n))
    for row_free, row_full in enumerate(free):
        H[row_full, free] = H_[row_free, :]

    return H


def optimize(model, data, method="csminwel", xtol=1e-32, ftol=1e-14, grtol=1e-8,
             iterations=1000, store_trace=False, show_trace=False, extended_trace=False,
             verbose="none", H0=None, neighbor_options=None):
    """
    Finds the posterior mode of `model` given `data` [n_obs, T].

    Args:
        model: The DSGE model instance. Its fixed parameters are held at
            their current values; it is left at the mode on return.
        data: The dataset (n_obs, T)
        method: "csminwel" or "simulated_annealing"
        xtol, ftol, grtol, iterations: Backend stopping criteria (grtol is
            used by csminwel only)
        store_trace, show_trace, extended_trace: Per-iteration trace options
        verbose: "none", "low" or "high"
        H0: Initial inverse Hessian over the free parameters
            (default 1e-4 * I)
        neighbor_options: Keyword arguments for NeighborProposal

    Returns:
        (result, H): result.minimum is the full real-line parameter vector
        and H the full Hessian estimate with zero rows and columns for
        fixed parameters.
    """
    optimizer = get_optimizer(method)
    if verbose not in VERBOSITY:
        raise ValueError(f"verbose must be one of {tuple(VERBOSITY)}, got {verbose!r}")

    objective = PosteriorObjective(model, data)
    x_opt = objective.x0
    n_free = len(x_opt)

    if H0 is None:
        H0 = 1e-4 * np.eye(n_free)

    options = dict(xtol=xtol, ftol=ftol, iterations=iterations,
                   store_trace=store_trace, show_trace=show_trace,
                   extended_trace=extended_trace, verbose=verbose, rng=model.rng)
    if method == "simulated_annealing":
        options["neighbor"] = NeighborProposal(objective, model.rng, **(neighbor_options or {}))
    else:
        options["grtol"] = grtol

    with _verbosity(verbose):
        logger.info("Optimizing %d of %d parameters with %s", n_free, model.n_parameters, method)
        result, H_ = optimizer(objective, x_opt, H0, **options)
        H = reconstruct_result(objective, result, H_)

    return result, H
