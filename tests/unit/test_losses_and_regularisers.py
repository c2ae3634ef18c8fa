import numpy as np
import pytest

from backpropnets.core.activations import Linear
from backpropnets.core.errors import DimensionMismatchError
from backpropnets.core.network import FeedForwardNetwork
from backpropnets.training import losses, regularisers


def test_squared_error_is_half_squared_distance():
    loss = losses.SquaredError()
    assert loss.error([1.0, 2.0], [0.0, 0.0]) == pytest.approx(2.5)
    np.testing.assert_allclose(loss.error_derivatives([1.0, 2.0], [0.0, 1.0]), [1.0, 1.0])
    assert loss.error_derivative([1.0, 2.0], [0.0, 1.0], 1) == pytest.approx(1.0)


def test_negative_log_prob():
    loss = losses.NegativeLogProb()
    assert loss.error([0.25, 0.75], [0.0, 1.0]) == pytest.approx(-np.log(0.75))
    np.testing.assert_allclose(
        loss.error_derivatives([0.25, 0.75], [0.0, 1.0]), [0.0, -1.0 / 0.75]
    )


def test_cross_entropy_single_output_only():
    loss = losses.CrossEntropy()
    assert loss.error([0.8], [1.0]) == pytest.approx(-np.log(0.8))
    assert loss.error_derivative([0.8], [1.0], 0) == pytest.approx(-1.0 / 0.8)
    assert loss.error_derivative([0.8], [0.0], 0) == pytest.approx(1.0 / 0.2)
    with pytest.raises(ValueError):
        loss.error_derivative([0.8], [1.0], 1)
    with pytest.raises(ValueError):
        loss.error([0.2, 0.8], [0.0, 1.0])


def test_losses_check_lengths():
    with pytest.raises(DimensionMismatchError):
        losses.SquaredError().error([1.0, 2.0], [1.0])


def test_registry_resolves_aliases_and_lists_choices():
    assert isinstance(losses.REGISTRY.resolve("nll"), losses.NegativeLogProb)
    assert losses.REGISTRY.resolve("squared") is losses.REGISTRY.resolve("squared_error")
    with pytest.raises(KeyError, match="Available losses"):
        losses.REGISTRY.resolve("hinge")


def test_regularisers_sum_over_every_layer():
    network = FeedForwardNetwork(1, 1).add_hidden_layer(1, Linear()).add_output_layer(Linear())
    network.layers[0].weights = [[1.0, -2.0]]
    network.layers[1].weights = [[3.0, 0.0]]
    assert regularisers.L2(0.5).loss(network) == pytest.approx(0.5 * 0.5 * 14.0)
    assert regularisers.L1(0.1).loss(network) == pytest.approx(0.6)
    np.testing.assert_allclose(regularisers.L1(2.0).loss_derivative([[-3.0, 0.0, 4.0]]), [[-2.0, 0.0, 2.0]])
    with pytest.raises(KeyError):
        regularisers.build("elastic", 0.1)
