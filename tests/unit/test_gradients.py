import numpy as np
import pytest

from backpropnets.core.activations import Linear, Sigmoid
from backpropnets.core.errors import DimensionMismatchError
from backpropnets.core.gradients import DenseGradient, GradientArena
from backpropnets.core.network import FeedForwardNetwork
from backpropnets.training.losses import SquaredError
from backpropnets.training.regularisers import L2


def _network(seed=3):
    network = FeedForwardNetwork(2, 1).add_hidden_layer(2, Sigmoid()).add_output_layer(Sigmoid())
    rng = np.random.default_rng(seed)
    for layer in network.layers:
        layer.weights = rng.uniform(-1.0, 1.0, size=layer.weight_shape)
    return network


def _loss(network, x, target):
    return SquaredError().error(network.get_output(x), target)


def test_backprop_matches_central_finite_differences():
    network = _network()
    x, target = np.array([0.4, -0.9]), np.array([0.8])
    arena = GradientArena.for_network(network)
    network.input = x
    arena.backpropagate(network, target, SquaredError())

    eps = 1e-6
    for layer, gradient in zip(network.layers, arena):
        base = layer.weights.copy()
        numeric = np.zeros_like(base)
        for idx in np.ndindex(base.shape):
            plus, minus = base.copy(), base.copy()
            plus[idx] += eps
            minus[idx] -= eps
            layer.weights = plus
            loss_plus = _loss(network, x, target)
            layer.weights = minus
            loss_minus = _loss(network, x, target)
            numeric[idx] = (loss_plus - loss_minus) / (2 * eps)
        layer.weights = base
        np.testing.assert_allclose(gradient.weight_deltas, numeric, rtol=1e-4, atol=1e-9)


def test_input_error_derivatives_skip_bias_column():
    network = FeedForwardNetwork(2, 1).add_output_layer(Linear())
    layer = network.layers[0]
    layer.weights = [[10.0, 2.0, 3.0]]
    arena = GradientArena.for_network(network)
    network.input = [1.0, 1.0]
    arena.backpropagate(network, [0.0], SquaredError())
    # output 15, error derivative 15
    np.testing.assert_allclose(arena[0].input_error_derivatives, [30.0, 45.0])


def test_deltas_accumulate_across_points_and_reset_after_apply():
    network = _network()
    arena = GradientArena.for_network(network)
    network.input = [0.1, 0.2]
    arena.backpropagate(network, [1.0], SquaredError())
    single = arena[1].weight_deltas.copy()
    arena.backpropagate(network, [1.0], SquaredError())
    np.testing.assert_allclose(arena[1].weight_deltas, 2 * single)

    before = network.layers[1].weights.copy()
    arena.apply_deltas(network, [0.5, 0.5])
    np.testing.assert_allclose(network.layers[1].weights, before - 0.5 * 2 * single)
    for gradient in arena:
        assert not gradient.weight_deltas.any()
        assert not gradient.input_error_derivatives.any()
        assert not gradient.output_error_derivatives.any()


def test_apply_deltas_accepts_rate_matrix_of_weight_shape():
    network = FeedForwardNetwork(1, 1).add_output_layer(Linear())
    layer = network.layers[0]
    layer.weights = [[0.0, 0.0]]
    gradient = layer.make_gradient()
    network.input = [1.0]
    gradient.backpropagate_output(layer, [1.0], SquaredError())
    gradient.apply_deltas(layer, np.array([[1.0, 0.0]]))
    # deltas are [-1, -1]; only the bias weight moves
    np.testing.assert_allclose(layer.weights, [[1.0, 0.0]])

    gradient.backpropagate_output(layer, [1.0], SquaredError())
    with pytest.raises(DimensionMismatchError):
        gradient.apply_deltas(layer, np.ones((2, 2)))


def test_regulariser_derivative_is_added_to_deltas():
    network = FeedForwardNetwork(1, 1).add_output_layer(Linear())
    layer = network.layers[0]
    layer.weights = [[0.5, -2.0]]
    plain, penalised = DenseGradient(1, 1), DenseGradient(1, 1)
    network.input = [1.0]
    plain.backpropagate_output(layer, [0.0], SquaredError())
    penalised.backpropagate_output(layer, [0.0], SquaredError(), [L2(0.1)])
    np.testing.assert_allclose(
        penalised.weight_deltas - plain.weight_deltas, 0.1 * layer.weights
    )


def test_gradient_rejects_mismatched_layer():
    network = _network()
    gradient = DenseGradient(3, 3)
    with pytest.raises(DimensionMismatchError):
        gradient.apply_deltas(network.layers[0], 0.1)
