import logging
import numpy as np
import pandas as pd
from dsgeopt.models.an_schorfheide import AnSchorfheide
from dsgeopt.data import simulate_data
from dsgeopt.estimate import optimize
from dsgeopt.posterior import posterior
from dsgeopt.transforms import transform_to_model_space


def run_pipeline():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    # 1. Initialize
    print("Step 1: Initializing Model...")
    m = AnSchorfheide(seed=42)

    # 2. Data
    print("\nStep 2: Simulating Data...")
    data = simulate_data(m, T=80)
    print(f"Data: {data.shape}")

    # 3. Estimation (Mode Finding)
    print("\nStep 3: Finding Posterior Mode...")
    # Fix the steady-state parameters to make the demo fast
    for name in ["rA", "pi_star", "gamma_Q"]:
        m.parameters[name].fixed = True
    print(f"Initial Log-Posterior: {posterior(m, data):.4f}")

    res, H = optimize(m, data, method="csminwel", iterations=50, store_trace=True, verbose="low")
    print(f"csminwel: {res.iterations} iterations, converged={res.converged}")
    print(f"Log-Posterior at mode: {-res.f_minimum:.4f}")

    mode = transform_to_model_space(m.parameters, res.minimum)
    df = pd.DataFrame({"mode": mode, "fixed": [p.fixed for p in m.parameters.values()]},
                      index=list(m.parameters.keys()))
    print(df)

    fixed_rows = [i for i, p in enumerate(m.parameters.values()) if p.fixed]
    print(f"Hessian {H.shape}, zero rows at fixed parameters: {np.all(H[fixed_rows] == 0)}")

    # 4. Stochastic search from the mode
    print("\nStep 4: Simulated Annealing...")
    res_sa, _ = optimize(m, data, method="simulated_annealing", iterations=100,
                         neighbor_options={"n_prior_draws": 2000})
    print(f"Best Log-Posterior found: {-res_sa.f_minimum:.4f}")

    print("\nPipeline complete!")


if __name__ == "__main__":
    run_pipeline()
