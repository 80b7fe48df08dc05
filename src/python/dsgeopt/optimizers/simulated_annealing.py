import logging
import numpy as np
from tqdm import tqdm

from .results import OptimizationResult, trace_entry, format_trace_entry

logger = logging.getLogger(__name__)


def log_temperature(t):
    return np.inf if t <= 1 else 1.0 / np.log(t)


def default_neighbor(rng):
    def neighbor(x, x_proposal):
        x_proposal[:] = x + rng.standard_normal(len(x))
    return neighbor


def simulated_annealing(fcn, x0, H0, neighbor=None, temperature=log_temperature,
                        xtol=1e-32, ftol=1e-14, iterations=1000,
                        store_trace=False, show_trace=False, extended_trace=False,
                        verbose="none", rng=None):
    """
    Minimizes fcn by simulated annealing.

    neighbor(x, x_proposal) writes a candidate step from x into x_proposal.
    A worse candidate is accepted with probability exp(-(f_new - f)/T) at
    temperature T = temperature(t). Runs for `iterations` steps and reports
    the best point seen; xtol and ftol only set the convergence flags of the
    last step.

    Returns (OptimizationResult, H0): annealing produces no curvature
    estimate, so the initial matrix is passed back unchanged.
    """
    rng = np.random.default_rng() if rng is None else rng
    neighbor = default_neighbor(rng) if neighbor is None else neighbor

    x = np.array(x0, dtype=float)
    x_proposal = x.copy()
    f_x = fcn(x)
    f_calls = 1

    best_x = x.copy()
    best_f_x = f_x

    trace = []

    def record(iteration, t):
        extended = {"x": x.copy(), "temperature": t} if extended_trace else None
        entry = trace_entry(iteration, f_x, extended=extended)
        if store_trace:
            trace.append(entry)
        if show_trace:
            print(format_trace_entry(entry))

    if show_trace:
        print("  Iter     Function value    Gradient norm")
    record(0, np.inf)

    x_converged = f_converged = False
    steps = tqdm(range(1, iterations + 1), desc="simulated annealing",
                 disable=(verbose == "none" or show_trace), leave=False)

    for iteration in steps:
        t = temperature(iteration)
        x_previous, f_previous = x.copy(), f_x

        neighbor(x, x_proposal)
        f_proposal = fcn(x_proposal)
        f_calls += 1

        if f_proposal <= f_x:
            x[:] = x_proposal
            f_x = f_proposal
            if f_proposal < best_f_x:
                best_f_x = f_proposal
                best_x[:] = x_proposal
        else:
            p = np.exp(-(f_proposal - f_x) / t)
            if rng.random() <= p:
                x[:] = x_proposal
                f_x = f_proposal

        x_converged = bool(np.max(np.abs(x - x_previous), initial=0.0) < xtol)
        f_converged = abs(f_x - f_previous) < ftol
        record(iteration, t)

    logger.info("Simulated annealing finished after %d iterations with best f = %.9g",
                iterations, best_f_x)

    result = OptimizationResult(
        method="simulated_annealing",
        initial_x=np.array(x0, dtype=float),
        minimum=best_x,
        f_minimum=best_f_x,
        iterations=iterations,
        iteration_converged=True,
        x_converged=x_converged,
        f_converged=f_converged,
        f_calls=f_calls,
        trace=trace,
    )
    return result, np.array(H0, dtype=float)
