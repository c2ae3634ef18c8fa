import numpy as np
import pytest

from backpropnets.core import activations
from backpropnets.core.activations import Linear, Relu, Sigmoid, Softmax, Tanh
from backpropnets.core.errors import OperationNotPermittedError


def test_sigmoid_values_and_derivative():
    act = Sigmoid()
    act.peek(np.array([0.0, 2.0]))
    assert act.value(0) == pytest.approx(0.5)
    v = 1.0 / (1.0 + np.exp(-2.0))
    assert act.value(1) == pytest.approx(v)
    assert act.derivative(1) == pytest.approx(v * (1 - v))
    assert act.derivative(0, 1) == 0.0
    assert not act.is_interdependent()


def test_relu_derivative_is_zero_at_origin():
    act = Relu()
    out = act.output(np.array([-1.0, 0.0, 3.0]))
    np.testing.assert_allclose(out, [0.0, 0.0, 3.0])
    np.testing.assert_allclose(act.diagonal_derivatives(), [0.0, 0.0, 1.0])


def test_softmax_sums_to_one_and_has_full_jacobian():
    act = Softmax()
    out = act.output(np.array([1.0, 2.0, 3.0]))
    assert out.sum() == pytest.approx(1.0)
    assert act.is_interdependent()
    for i in range(3):
        for j in range(3):
            expected = out[i] * ((1.0 if i == j else 0.0) - out[j])
            assert act.derivative(i, j) == pytest.approx(expected)


def test_tanh_and_linear():
    tanh = Tanh()
    tanh.peek([0.5])
    assert tanh.derivative(0) == pytest.approx(1 - np.tanh(0.5) ** 2)
    linear = Linear()
    np.testing.assert_allclose(linear.output([-2.0, 4.0]), [-2.0, 4.0])
    np.testing.assert_allclose(linear.diagonal_derivatives(), [1.0, 1.0])


def test_query_before_peek_is_rejected():
    with pytest.raises(OperationNotPermittedError):
        Sigmoid().value(0)


def test_registry_returns_fresh_instances():
    first = activations.get("sigmoid")
    second = activations.get("Sigmoid")
    assert isinstance(first, Sigmoid)
    assert first is not second
    assert "softmax" in activations.names()
    with pytest.raises(KeyError, match="Available activations"):
        activations.get("swish")
