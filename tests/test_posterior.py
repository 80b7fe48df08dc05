import numpy as np
import pytest

from dsgeopt.errors import GensysError, ParamBoundsError
from dsgeopt.model import Parameter
from dsgeopt.posterior import POSTERIOR_FLOOR, posterior, prior
from dsgeopt.priors import Gamma, Normal, RootInverseGamma, Uniform, sample_prior


def test_posterior_is_likelihood_plus_prior(three_param_model, data):
    expected = -(1.0 + 4.0 + 0.25) - 2 * np.log(20.0)
    assert posterior(three_param_model, data) == pytest.approx(expected)


def test_prior_ignores_fixed_parameters(make_model):
    m = make_model(targets=[0.0, 0.0], fixed=(1,))
    assert prior(m) == pytest.approx(-np.log(20.0))


def test_posterior_errors_without_catch(three_param_model, data):
    three_param_model.parameters["theta_0"].value = 20.0
    with pytest.raises(ParamBoundsError):
        posterior(three_param_model, data)

    three_param_model.parameters["theta_0"].value = 1.0
    three_param_model.no_solve_above = 0.0
    with pytest.raises(GensysError):
        posterior(three_param_model, data)


def test_posterior_catch_errors(three_param_model, data):
    three_param_model.no_solve_above = 0.0
    three_param_model.parameters["theta_0"].value = 1.0
    assert posterior(three_param_model, data, catch_errors=True) == POSTERIOR_FLOOR


def test_posterior_non_finite_prior(data, make_model):
    m = make_model(targets=[1.0])
    m.parameters["theta_0"].prior = Gamma(2.0, 1.0)
    m.parameters["theta_0"].value = -1.0

    assert posterior(m, data) == -np.inf
    assert posterior(m, data, catch_errors=True) == POSTERIOR_FLOOR


def test_gamma_from_moments():
    g = Gamma.from_moments(2.0, 0.5)
    assert g.dist.mean() == pytest.approx(2.0)
    assert g.dist.std() == pytest.approx(0.5)


def test_root_inverse_gamma():
    p = RootInverseGamma(4.0, 0.4)
    draws = p.rvs(size=2000, rng=np.random.default_rng(0))
    assert np.all(draws > 0)
    assert p.logpdf(-1.0) == -np.inf
    assert np.isfinite(p.logpdf(0.4))


def test_sample_prior(make_model):
    m = make_model(targets=[0.0, 0.0, 0.0], values=[0.0, 3.0, 0.0], fixed=(1,))
    m.parameters["theta_2"].prior = Normal(5.0, 0.1)

    draws = sample_prior(m, 1000, np.random.default_rng(0))

    assert draws.shape == (1000, 3)
    assert np.all(draws[:, 1] == 3.0)
    assert np.all((draws[:, 0] >= -10.0) & (draws[:, 0] <= 10.0))
    assert draws[:, 2].mean() == pytest.approx(5.0, abs=0.05)


def test_sample_prior_is_reproducible(make_model):
    m = make_model(targets=[0.0, 0.0])
    a = sample_prior(m, 10, np.random.default_rng(7))
    b = sample_prior(m, 10, np.random.default_rng(7))
    np.testing.assert_array_equal(a, b)


def test_sample_prior_needs_priors(make_model):
    m = make_model(targets=[0.0, 0.0])
    m.parameters["theta_1"].prior = None
    with pytest.raises(ValueError, match="theta_1"):
        sample_prior(m, 10, np.random.default_rng(0))


def test_parameter_bounds():
    p = Parameter("rho", 0.5, (0.0, 1.0), prior=Uniform(0.0, 1.0))
    assert p.in_bounds()
    assert not p.in_bounds(1.5)
