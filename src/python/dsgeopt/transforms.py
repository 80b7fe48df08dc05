"""
Transformations between model space, where parameters live inside their
value bounds, and the real line, where optimizers can move freely.

Each transform maps a scalar given the parameter's bounds (a, b). Fixed
parameters are passed through untouched in both directions.
"""
import numpy as np


class Untransformed:
    @staticmethod
    def to_real(x, bounds):
        return x

    @staticmethod
    def to_model(y, bounds):
        return y


class SquareRoot:
    """
    Maps (a, b) onto the real line. Values on the bounds map to +/- inf.
    """
    @staticmethod
    def to_real(x, bounds):
        a, b = bounds
        cx = 2.0 * (x - (a + b) / 2.0) / (b - a)
        return cx / np.sqrt(1.0 - cx**2)

    @staticmethod
    def to_model(y, bounds):
        a, b = bounds
        return (a + b) / 2.0 + (b - a) / 2.0 * y / np.sqrt(1.0 + y**2)


class Exponential:
    """
    Maps (a, inf) onto the real line.
    """
    @staticmethod
    def to_real(x, bounds):
        a, _ = bounds
        return np.log(x - a)

    @staticmethod
    def to_model(y, bounds):
        a, _ = bounds
        return a + np.exp(y)


def _param_list(parameters):
    if hasattr(parameters, "values"):
        return list(parameters.values())
    return list(parameters)


def transform_to_real_line(parameters, values=None):
    """
    Returns the real-line image of the model-space vector `values`
    (the parameters' current raw values if None).
    """
    params = _param_list(parameters)
    if values is None:
        values = [p.raw_value for p in params]

    x = np.empty(len(params))
    for i, (p, val) in enumerate(zip(params, values)):
        x[i] = val if p.fixed else p.transform.to_real(val, p.value_bounds)
    return x


def transform_to_model_space(parameters, x):
    params = _param_list(parameters)
    if len(x) != len(params):
        raise ValueError(f"Expected a vector of length {len(params)}, got {len(x)}")

    values = np.empty(len(params))
    for i, (p, y) in enumerate(zip(params, x)):
        values[i] = p.raw_value if p.fixed else p.transform.to_model(y, p.value_bounds)
    return values


def transform_to_model_space_inplace(model, x):
    """
    Maps `x` into model space and installs it in `model`.
    """
    values = transform_to_model_space(model.parameters, x)
    model.update(values)
    return values
