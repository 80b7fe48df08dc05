import numpy as np
import pytest

from dsgeopt.data import load_csv_data, simulate_data
from dsgeopt.errors import GensysError
from dsgeopt.estimate import PosteriorObjective, optimize
from dsgeopt.model import SolveOutcome
from dsgeopt.models.an_schorfheide import AnSchorfheide
from dsgeopt.posterior import POSTERIOR_FLOOR, posterior


def test_anschorfheide():
    print("Initializing AnSchorfheide...")
    m = AnSchorfheide(seed=0)
    assert m.n_parameters == 16
    assert m.n_parameters_free == 13

    print("Solving model...")
    TTT, RRR, CCC = m.solve()
    print(f"Model solved! TTT shape: {TTT.shape}")
    assert TTT.shape == (m.n_states, m.n_states)
    assert RRR.shape == (m.n_states, m.n_shocks_exogenous)

    print("Evaluating Likelihood...")
    data = simulate_data(m, T=40)
    assert data.shape == (m.n_observables, 40)
    loglh = m.likelihood(data)
    print(f"Log-Likelihood: {loglh:.6f}")
    assert np.isfinite(loglh)
    assert np.isfinite(posterior(m, data))


def test_indeterminacy_is_a_solve_failure():
    m = AnSchorfheide()
    m.parameters["psi_1"].value = 0.5

    with pytest.raises(GensysError):
        m.solve()
    assert m.try_solve() is SolveOutcome.NO_SOLUTION


def test_out_of_bounds_is_a_solve_failure():
    m = AnSchorfheide()
    values = m.parameter_values()
    values[list(m.parameters).index("kappa")] = 1.5

    assert m.try_solve(values) is SolveOutcome.BOUNDS_VIOLATION


def test_objective_at_indeterminate_point():
    m = AnSchorfheide(seed=0)
    data = simulate_data(m, T=20)
    objective = PosteriorObjective(m, data)

    i = list(objective.free_indices).index(list(m.parameters).index("psi_1"))
    x = objective.x0
    x[i] = np.log(0.5)
    assert objective(x) == -POSTERIOR_FLOOR


def test_mode_finding_short_run():
    m = AnSchorfheide(seed=1)
    data = simulate_data(m, T=50)

    for p in m.parameters.values():
        p.fixed = True
    m.parameters["rho_R"].fixed = False
    m.parameters["sigma_R"].fixed = False
    m.parameters["rho_R"].value = 0.6

    f0 = -posterior(m, data)
    res, H = optimize(m, data, method="csminwel", iterations=10)

    print(f"f: {f0:.4f} -> {res.f_minimum:.4f}")
    assert res.f_minimum <= f0
    assert res.minimum.shape == (m.n_parameters,)
    assert H.shape == (m.n_parameters, m.n_parameters)

    free = [list(m.parameters).index("rho_R"), list(m.parameters).index("sigma_R")]
    mask = np.ones(m.n_parameters, dtype=bool)
    mask[free] = False
    assert np.all(H[mask, :] == 0) and np.all(H[:, mask] == 0)
    assert 0.0 < m.parameters["rho_R"].value < 1.0


def test_annealing_short_run():
    m = AnSchorfheide(seed=2)
    data = simulate_data(m, T=30)

    for p in m.parameters.values():
        p.fixed = True
    for name in ["rho_R", "rho_g"]:
        m.parameters[name].fixed = False

    f0 = -posterior(m, data)
    res, _ = optimize(m, data, method="simulated_annealing", iterations=10,
                      neighbor_options={"n_prior_draws": 500})

    assert res.f_minimum <= f0
    assert res.f_calls == 11
    assert m.try_solve() is SolveOutcome.SOLVED


def test_load_csv_data(tmp_path):
    m = AnSchorfheide()
    path = tmp_path / "data.csv"
    path.write_text("date,obs_cpi,obs_gdp\n2000-03-31,1.0,2.0\n2000-06-30,3.0,4.0\n")

    data = load_csv_data(path, m)

    assert data.shape == (3, 2)
    np.testing.assert_array_equal(data[0], [2.0, 4.0])
    np.testing.assert_array_equal(data[1], [1.0, 3.0])
    assert np.all(np.isnan(data[2]))


if __name__ == "__main__":
    test_anschorfheide()
