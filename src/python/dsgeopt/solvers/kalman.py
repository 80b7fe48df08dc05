import logging
import numpy as np
from scipy.linalg import solve

logger = logging.getLogger(__name__)


def kalman_filter(data, TTT, RRR, QQ, ZZ, DD, EE, s0, P0, outputs=['loglh']):
    """
    Python implementation of Kalman Filter for DSGE.
    Returns loglh by default, or a dict if multiple outputs requested.
    A numerically failing update gives a log-likelihood of -inf.
    """
    n_obs, T = data.shape

    s_filt_history = []
    P_filt_history = []

    s_filt = s0.copy()
    P_filt = P0.copy()

    loglh = 0.0
    RQR = RRR @ QQ @ RRR.T

    for t in range(T):
        y_t = data[:, t]

        # 1. Predict
        s_pred = TTT @ s_filt
        P_pred = TTT @ P_filt @ TTT.T + RQR

        # Missing observations are skipped
        non_missing = ~np.isnan(y_t)
        if not np.any(non_missing):
            s_filt = s_pred
            P_filt = P_pred
        else:
            y_t_sub = y_t[non_missing]
            ZZ_t = ZZ[non_missing, :]
            DD_t = DD[non_missing]
            EE_t = EE[non_missing][:, non_missing]

            # 2. Innovation
            v_t = y_t_sub - ZZ_t @ s_pred - DD_t
            F_t = ZZ_t @ P_pred @ ZZ_t.T + EE_t

            # 3. Update
            try:
                F_inv_v = solve(F_t, v_t, assume_a='pos')
                F_inv_ZZ_P = solve(F_t, ZZ_t @ P_pred, assume_a='pos')
            except np.linalg.LinAlgError as err:
                logger.warning("Kalman filter update failed at t=%d: %s", t, err)
                loglh = -np.inf
                break

            s_filt = s_pred + (P_pred @ ZZ_t.T) @ F_inv_v
            P_filt = P_pred - (P_pred @ ZZ_t.T) @ F_inv_ZZ_P

            # 4. Likelihood
            _, logdet = np.linalg.slogdet(F_t)
            loglh += -0.5 * (len(v_t) * np.log(2 * np.pi) + logdet + v_t @ F_inv_v)

        s_filt_history.append(s_filt.copy())
        P_filt_history.append(P_filt.copy())

    results = {}
    if 'loglh' in outputs: results['loglh'] = loglh
    if 'states' in outputs: results['states'] = np.array(s_filt_history).T
    if 'variances' in outputs: results['variances'] = np.array(P_filt_history)

    return results if len(outputs) > 1 else results[outputs[0]]
