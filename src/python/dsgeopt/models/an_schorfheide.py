import numpy as np
from ..model import AbstractModel, Parameter
from ..priors import Gamma, Normal, RootInverseGamma, Uniform
from ..transforms import Exponential, SquareRoot, Untransformed

POSITIVE = (1e-20, 1e5)
UNIT = (1e-20, 1 - 1e-7)


class AnSchorfheide(AbstractModel):
    """
    Small-scale New Keynesian model of An and Schorfheide (2007), observed
    through output growth, inflation and the nominal interest rate.
    """
    def __init__(self, seed=None):
        super().__init__(seed=seed)
        self.init_parameters()
        self.init_model_indices()

    def init_parameters(self):
        P = Parameter
        self.add_parameter(P("tau", 1.9937, POSITIVE, transform=Exponential,
                             prior=Gamma.from_moments(2.0, 0.5), tex_label="\\tau",
                             description="Inverse intertemporal elasticity of substitution"))
        self.add_parameter(P("kappa", 0.7306, UNIT, transform=SquareRoot,
                             prior=Uniform(0.0, 1.0), tex_label="\\kappa",
                             description="Slope of the Phillips curve"))
        self.add_parameter(P("psi_1", 1.1434, POSITIVE, transform=Exponential,
                             prior=Gamma.from_moments(1.5, 0.25), tex_label="\\psi_1",
                             description="Policy response to inflation"))
        self.add_parameter(P("psi_2", 0.4536, POSITIVE, transform=Exponential,
                             prior=Gamma.from_moments(0.5, 0.25), tex_label="\\psi_2",
                             description="Policy response to the output gap"))
        self.add_parameter(P("rA", 0.0313, POSITIVE, transform=Exponential,
                             prior=Gamma.from_moments(0.5, 0.5), tex_label="rA",
                             description="Annualized steady-state real rate"))
        self.add_parameter(P("pi_star", 8.1508, POSITIVE, transform=Exponential,
                             prior=Gamma.from_moments(7.0, 2.0), tex_label="\\pi*",
                             description="Annualized steady-state inflation"))
        self.add_parameter(P("gamma_Q", 1.5, (-1e5, 1e5), transform=Untransformed,
                             prior=Normal(0.4, 0.2), tex_label="\\gamma_Q",
                             description="Steady-state quarterly output growth"))
        self.add_parameter(P("rho_R", 0.3847, UNIT, transform=SquareRoot,
                             prior=Uniform(0.0, 1.0), tex_label="\\rho_R"))
        self.add_parameter(P("rho_g", 0.3777, UNIT, transform=SquareRoot,
                             prior=Uniform(0.0, 1.0), tex_label="\\rho_g"))
        self.add_parameter(P("rho_z", 0.9579, UNIT, transform=SquareRoot,
                             prior=Uniform(0.0, 1.0), tex_label="\\rho_z"))
        self.add_parameter(P("sigma_R", 0.4900, POSITIVE, transform=Exponential,
                             prior=RootInverseGamma(4.0, 0.4), tex_label="\\sigma_R"))
        self.add_parameter(P("sigma_g", 1.4594, POSITIVE, transform=Exponential,
                             prior=RootInverseGamma(4.0, 1.0), tex_label="\\sigma_g"))
        self.add_parameter(P("sigma_z", 0.9247, POSITIVE, transform=Exponential,
                             prior=RootInverseGamma(4.0, 0.5), tex_label="\\sigma_z"))

        # Measurement error standard deviations are calibrated
        self.add_parameter(P("e_y", 0.20*0.579923, fixed=True, tex_label="e_y"))
        self.add_parameter(P("e_pi", 0.20*1.470832, fixed=True, tex_label="e_\\pi"))
        self.add_parameter(P("e_R", 0.20*2.237937, fixed=True, tex_label="e_R"))

    def init_model_indices(self):
        index_groups = [
            (self.endogenous_states, ["y_t", "pi_t", "R_t", "y_t1", "g_t", "z_t", "Ey_t", "Epi_t"]),
            (self.exogenous_shocks, ["z_sh", "g_sh", "rm_sh"]),
            (self.expected_shocks, ["Ey_sh", "Epi_sh"]),
            (self.equilibrium_conditions, ["eq_euler", "eq_phillips", "eq_mp", "eq_y_t1",
                                           "eq_g", "eq_z", "eq_Ey", "eq_Epi"]),
            (self.observables, ["obs_gdp", "obs_cpi", "obs_nominalrate"]),
        ]
        for index, names in index_groups:
            for i, name in enumerate(names):
                index[name] = i

    def eqcond(self):
        endo = self.endogenous_states
        exo  = self.exogenous_shocks
        ex   = self.expected_shocks
        eq   = self.equilibrium_conditions

        n = self.n_states
        gamma0 = np.zeros((n, n))
        gamma1 = np.zeros((n, n))
        c = np.zeros(n)
        psi = np.zeros((n, self.n_shocks_exogenous))
        pi = np.zeros((n, self.n_shocks_expectational))

        tau, kappa = self["tau"], self["kappa"]
        rho_R, rho_g, rho_z = self["rho_R"], self["rho_g"], self["rho_z"]

        # Consumption Euler equation
        row = eq["eq_euler"]
        gamma0[row, endo["y_t"]] = 1.0
        gamma0[row, endo["R_t"]] = 1.0 / tau
        gamma0[row, endo["g_t"]] = -(1.0 - rho_g)
        gamma0[row, endo["z_t"]] = -rho_z / tau
        gamma0[row, endo["Ey_t"]] = -1.0
        gamma0[row, endo["Epi_t"]] = -1.0 / tau

        # NK Phillips curve
        row = eq["eq_phillips"]
        gamma0[row, endo["y_t"]] = -kappa
        gamma0[row, endo["pi_t"]] = 1.0
        gamma0[row, endo["g_t"]] = kappa
        gamma0[row, endo["Epi_t"]] = -1.0 / (1.0 + self["rA"] / 400.0)

        # Monetary policy rule
        row = eq["eq_mp"]
        gamma0[row, endo["y_t"]] = -(1.0 - rho_R) * self["psi_2"]
        gamma0[row, endo["pi_t"]] = -(1.0 - rho_R) * self["psi_1"]
        gamma0[row, endo["R_t"]] = 1.0
        gamma0[row, endo["g_t"]] = (1.0 - rho_R) * self["psi_2"]
        gamma1[row, endo["R_t"]] = rho_R
        psi[row, exo["rm_sh"]] = 1.0

        # Output lag
        gamma0[eq["eq_y_t1"], endo["y_t1"]] = 1.0
        gamma1[eq["eq_y_t1"], endo["y_t"]] = 1.0

        # Government spending and technology processes
        for eq_name, state, shock, rho in [("eq_g", "g_t", "g_sh", rho_g),
                                           ("eq_z", "z_t", "z_sh", rho_z)]:
            gamma0[eq[eq_name], endo[state]] = 1.0
            gamma1[eq[eq_name], endo[state]] = rho
            psi[eq[eq_name], exo[shock]] = 1.0

        # Expectational errors for output and inflation
        for eq_name, state, e_state, shock in [("eq_Ey", "y_t", "Ey_t", "Ey_sh"),
                                               ("eq_Epi", "pi_t", "Epi_t", "Epi_sh")]:
            gamma0[eq[eq_name], endo[state]] = 1.0
            gamma1[eq[eq_name], endo[e_state]] = 1.0
            pi[eq[eq_name], ex[shock]] = 1.0

        return gamma0, gamma1, c, psi, pi

    def measurement(self, TTT, RRR, CCC):
        endo = self.endogenous_states
        exo  = self.exogenous_shocks
        obs  = self.observables

        zz = np.zeros((self.n_observables, self.n_states))
        dd = np.zeros(self.n_observables)
        ee = np.zeros((self.n_observables, self.n_observables))
        qq = np.zeros((self.n_shocks_exogenous, self.n_shocks_exogenous))

        ## Output growth
        zz[obs["obs_gdp"], endo["y_t"]]  = 1.0
        zz[obs["obs_gdp"], endo["y_t1"]] = -1.0
        zz[obs["obs_gdp"], endo["z_t"]]  = 1.0
        dd[obs["obs_gdp"]]              = self["gamma_Q"]

        ## Inflation
        zz[obs["obs_cpi"], endo["pi_t"]] = 4.0
        dd[obs["obs_cpi"]]             = self["pi_star"]

        ## Federal Funds Rate
        zz[obs["obs_nominalrate"], endo["R_t"]] = 4.0
        dd[obs["obs_nominalrate"]]             = self["pi_star"] + self["rA"] + 4.0*self["gamma_Q"]

        # Measurement error
        for o, e in [("obs_gdp", "e_y"), ("obs_cpi", "e_pi"), ("obs_nominalrate", "e_R")]:
            ee[obs[o], obs[o]] = self[e]**2

        # Variance of innovations
        for shock, sigma in [("z_sh", "sigma_z"), ("g_sh", "sigma_g"), ("rm_sh", "sigma_R")]:
            qq[exo[shock], exo[shock]] = self[sigma]**2

        return zz, dd, qq, ee
