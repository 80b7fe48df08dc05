import logging
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def load_csv_data(filepath, model):
    """
    Loads data from a CSV file into an [n_obs, T] matrix.
    The CSV should have a header row with observable names (e.g., obs_gdp, obs_cpi...).
    Observables missing from the file are filled with NaNs.
    """
    df = pd.read_csv(filepath)

    missing = [obs for obs in model.observables.keys() if obs not in df.columns]
    if missing:
        logger.warning("Missing observables in %s: %s. Filling with NaNs.", filepath, missing)
        for m in missing:
            df[m] = np.nan

    # Reorder columns to match model.observables
    return df[list(model.observables.keys())].to_numpy(dtype=float).T


def simulate_data(model, T, rng=None, burn_in=100):
    """
    Simulates T periods of observables from the model at its current
    parameters, starting from the steady state and discarding burn_in periods.
    """
    rng = model.rng if rng is None else rng

    TTT, RRR, CCC = model.solve()
    ZZ, DD, QQ, EE = model.measurement(TTT, RRR, CCC)

    n_states = TTT.shape[0]
    n_shocks = RRR.shape[1]
    n_obs = ZZ.shape[0]

    shocks = rng.multivariate_normal(np.zeros(n_shocks), QQ, size=burn_in + T)
    errors = rng.multivariate_normal(np.zeros(n_obs), EE, size=T)

    s = np.zeros(n_states)
    data = np.empty((n_obs, T))
    for t in range(burn_in + T):
        s = TTT @ s + RRR @ shocks[t] + CCC
        if t >= burn_in:
            data[:, t - burn_in] = ZZ @ s + DD + errors[t - burn_in]
    return data
