import numpy as np
import pytest

from dsgeopt.model import Parameter
from dsgeopt.transforms import (Exponential, SquareRoot, Untransformed, transform_to_model_space,
                                transform_to_model_space_inplace, transform_to_real_line)


@pytest.mark.parametrize("transform, bounds, values", [
    (Untransformed, (-1e5, 1e5), [-3.0, 0.0, 12.5]),
    (SquareRoot, (1e-20, 1 - 1e-7), [0.01, 0.5, 0.9579]),
    (SquareRoot, (-2.0, 3.0), [-1.9, 0.0, 2.5]),
    (Exponential, (1e-20, 1e5), [1e-3, 1.9937, 250.0]),
])
def test_round_trip(transform, bounds, values):
    params = [Parameter(f"p{i}", v, bounds, transform=transform) for i, v in enumerate(values)]

    x = transform_to_real_line(params)
    assert np.all(np.isfinite(x))
    np.testing.assert_allclose(transform_to_model_space(params, x), values, rtol=1e-10)


def test_fixed_parameters_pass_through():
    params = [
        Parameter("free", 0.5, (0.0, 1.0), transform=SquareRoot),
        Parameter("fixed", 7.0, (0.0, 1.0), fixed=True, transform=SquareRoot),
    ]
    x = transform_to_real_line(params)
    assert x[0] == pytest.approx(0.0)
    assert x[1] == 7.0

    # Whatever sits in a fixed slot, the fixed value comes back
    values = transform_to_model_space(params, np.array([0.0, -123.0]))
    assert values[1] == 7.0


def test_square_root_stays_inside_bounds():
    bounds = (0.0, 1.0)
    for y in [-1e6, -3.0, 0.0, 3.0, 1e6]:
        assert 0.0 <= SquareRoot.to_model(y, bounds) <= 1.0


def test_length_mismatch_raises():
    params = [Parameter("a", 1.0), Parameter("b", 2.0)]
    with pytest.raises(ValueError):
        transform_to_model_space(params, np.zeros(3))


def test_inplace_installs_into_model(make_model):
    m = make_model(targets=[0.0, 0.0, 0.0], values=[1.0, 2.0, 3.0], fixed=(1,))
    values = transform_to_model_space_inplace(m, np.array([-1.0, 99.0, -3.0]))

    np.testing.assert_array_equal(values, [-1.0, 2.0, -3.0])
    np.testing.assert_array_equal(m.parameter_values(), [-1.0, 2.0, -3.0])
