import numpy as np
import scipy.stats as stats


class AbstractPrior:
    """
    Base class for priors backed by a frozen scipy.stats distribution.
    Subclasses set self.dist.
    """
    dist = None

    def logpdf(self, x):
        return self.dist.logpdf(x)

    def pdf(self, x):
        return np.exp(self.logpdf(x))

    def rvs(self, size=None, rng=None):
        return self.dist.rvs(size=size, random_state=rng)


class Normal(AbstractPrior):
    """
    Normal distribution prior.
    params: mu (mean), sigma (std)
    """
    def __init__(self, mu, sigma):
        self.mu = mu
        self.sigma = sigma
        self.dist = stats.norm(loc=mu, scale=sigma)

    def __repr__(self):
        return f"Normal(mu={self.mu}, sigma={self.sigma})"


class Gamma(AbstractPrior):
    """
    Gamma distribution prior.
    params: a (shape, alpha), b (scale, theta = 1/beta)
    """
    def __init__(self, a, b):
        self.a = a
        self.b = b
        self.dist = stats.gamma(a=a, scale=b)

    @classmethod
    def from_moments(cls, mean, std):
        """
        Gamma prior with the given mean and standard deviation.
        """
        return cls(mean**2 / std**2, std**2 / mean)

    def __repr__(self):
        return f"Gamma(a={self.a}, b={self.b})"


class Beta(AbstractPrior):
    """
    Beta distribution prior.
    params: a (alpha), b (beta)
    """
    def __init__(self, a, b):
        self.a = a
        self.b = b
        self.dist = stats.beta(a, b)

    def __repr__(self):
        return f"Beta(a={self.a}, b={self.b})"


class InverseGamma(AbstractPrior):
    """
    Inverse Gamma distribution prior, with scipy's shape 'a' and 'scale'.
    """
    def __init__(self, a, scale):
        self.a = a
        self.scale = scale
        self.dist = stats.invgamma(a=a, scale=scale)

    def __repr__(self):
        return f"InverseGamma(a={self.a}, scale={self.scale})"


class RootInverseGamma(AbstractPrior):
    """
    Prior on a standard deviation sigma whose square is inverse gamma:
    sigma^2 ~ IG(nu/2, nu*tau^2/2). Common for shock standard deviations.
    """
    def __init__(self, nu, tau):
        self.nu = nu
        self.tau = tau
        self.dist = stats.invgamma(a=nu / 2.0, scale=nu * tau**2 / 2.0)

    def logpdf(self, x):
        x = np.asarray(x, dtype=float)
        with np.errstate(divide="ignore"):
            return np.where(x > 0, self.dist.logpdf(x**2) + np.log(2.0 * np.abs(x)), -np.inf)

    def rvs(self, size=None, rng=None):
        return np.sqrt(self.dist.rvs(size=size, random_state=rng))

    def __repr__(self):
        return f"RootInverseGamma(nu={self.nu}, tau={self.tau})"


class Uniform(AbstractPrior):
    """
    Uniform distribution prior.
    params: a (min), b (max)
    """
    def __init__(self, a, b):
        self.a = a
        self.b = b
        self.dist = stats.uniform(loc=a, scale=b - a)

    def __repr__(self):
        return f"Uniform(a={self.a}, b={self.b})"


def sample_prior(model, n_draws, rng):
    """
    Draws n_draws parameter vectors from the model's priors.

    Returns an (n_draws, n_parameters) array ordered like model.parameters.
    Fixed parameters are held at their current value.
    """
    draws = np.empty((n_draws, model.n_parameters))
    for j, param in enumerate(model.parameters.values()):
        if param.fixed:
            draws[:, j] = param.raw_value
        elif param.prior is None:
            raise ValueError(f"Free parameter {param.name} has no prior to sample from")
        else:
            draws[:, j] = param.prior.rvs(size=n_draws, rng=rng)
    return draws
