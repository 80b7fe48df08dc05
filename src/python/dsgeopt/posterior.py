import logging
import numpy as np

from .errors import ParamBoundsError, GensysError

logger = logging.getLogger(__name__)

# Log-posterior reported for points where evaluation cannot be completed.
# Must stay finite.
POSTERIOR_FLOOR = -1e10


def likelihood(m, data):
    """
    Computes the log-likelihood of the model given the data [n_obs, T].
    """
    return m.likelihood(data)


def prior(m):
    """
    Computes the log-prior of the free model parameters.
    """
    log_prior = 0.0
    for param in m.parameters.values():
        if not param.fixed and param.prior:
            log_prior += float(param.prior.logpdf(param.raw_value))
    return log_prior


def posterior(m, data, catch_errors=False):
    """
    Computes the log-posterior (likelihood + prior) at the model's current
    parameters.

    With catch_errors=True, out-of-bounds parameters, a model that does not
    solve, or a non-finite value give POSTERIOR_FLOOR instead. Other errors
    always propagate.
    """
    try:
        m.check_bounds()
        log_prior = prior(m)
        if catch_errors and not np.isfinite(log_prior):
            return POSTERIOR_FLOOR
        log_post = likelihood(m, data) + log_prior
    except (ParamBoundsError, GensysError) as err:
        if not catch_errors:
            raise
        logger.debug("Posterior evaluation failed: %s", err)
        return POSTERIOR_FLOOR

    if catch_errors and not np.isfinite(log_post):
        return POSTERIOR_FLOOR
    return log_post
