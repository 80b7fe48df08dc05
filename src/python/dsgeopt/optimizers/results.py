from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd


@dataclass
class OptimizationResult:
    """
    Outcome of a backend run. `minimum` is in the optimizer's coordinates
    until the driver lifts it back to the full parameter vector.
    """
    method: str
    initial_x: np.ndarray
    minimum: np.ndarray
    f_minimum: float
    iterations: int
    iteration_converged: bool = False
    x_converged: bool = False
    f_converged: bool = False
    gr_converged: bool = False
    f_calls: int = 0
    g_calls: int = 0
    trace: List[Dict[str, Any]] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def converged(self):
        return self.x_converged or self.f_converged or self.gr_converged


def trace_entry(iteration, value, gradnorm=np.nan, extended=None):
    entry = {"iteration": iteration, "value": value, "gradnorm": gradnorm}
    if extended:
        entry.update(extended)
    return entry


def format_trace_entry(entry):
    return f"{entry['iteration']:6d}   {entry['value']:14e}   {entry['gradnorm']:14e}"


def trace_to_frame(result):
    """
    Per-iteration trace of a run as a DataFrame indexed by iteration.
    Extended trace columns (x, gradients, matrices) are kept as objects.
    """
    df = pd.DataFrame(result.trace)
    if df.empty:
        return pd.DataFrame(columns=["value", "gradnorm"])
    return df.set_index("iteration")
