import numpy as np
from scipy.linalg import ordqz

from ..errors import GensysError

REALSMALL = 1e-6


def gensys(g0, g1, c, psi, pi, div=1.01):
    """
    Python implementation of Sims (2002) gensys solver.
    g0*y(t) = g1*y(t-1) + c + psi*z(t) + pi*eta(t)

    Returns (G1, C, impact) with y(t) = G1*y(t-1) + C + impact*z(t).
    Raises GensysError if the solution does not exist or is not unique.
    """
    n = g0.shape[0]
    n_eta = pi.shape[1]

    # select[i] = !(abs(b[i, i]) > div * abs(a[i, i]))
    def select_stable(alpha, beta):
        return np.abs(beta) <= div * np.abs(alpha)

    # Generalized Schur, stable roots first
    S, T, alpha, beta, Q, Z = ordqz(g0, g1, sort=select_stable, output='complex')

    if np.any((np.abs(alpha) < REALSMALL) & (np.abs(beta) < REALSMALL)):
        raise GensysError("Coincident zeros in the QZ decomposition", eu=[-2, -2])

    nstable = int(np.sum(select_stable(alpha, beta)))
    nunstab = n - nstable

    # One expectational error per unstable root
    eu = [int(nunstab <= n_eta), int(nunstab >= n_eta)]
    if eu != [1, 1]:
        raise GensysError(f"{nunstab} unstable roots for {n_eta} expectational errors", eu=eu)

    if nstable == 0:
        return np.zeros((n, n)), np.zeros(n), np.zeros((n, psi.shape[1]))

    S11 = S[:nstable, :nstable]
    T11 = T[:nstable, :nstable]
    Z1 = Z[:, :nstable]
    Q1 = Q.conj().T[:nstable, :]

    try:
        X, _, _, _ = np.linalg.lstsq(S11, T11, rcond=None)
        G1 = Z1 @ X @ Z1.conj().T

        # impact = Z11 * S11^-1 * Q1' * psi
        impact_part, _, _, _ = np.linalg.lstsq(S11, Q1 @ psi, rcond=None)
        impact = Z1 @ impact_part

        # C = Z11 * (S11 - T11)^-1 * Q1' * c
        C_part, _, _, _ = np.linalg.lstsq(S11 - T11, Q1 @ c, rcond=None)
        C = Z1 @ C_part
    except np.linalg.LinAlgError as err:
        raise GensysError(f"Stable block could not be solved: {err}", eu=[-3, -3]) from err

    return np.real(G1), np.real(C), np.real(impact)
