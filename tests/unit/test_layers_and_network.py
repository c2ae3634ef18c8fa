import numpy as np
import pytest

from backpropnets.core.activations import Linear, Sigmoid
from backpropnets.core.errors import DimensionMismatchError, OperationNotPermittedError
from backpropnets.core.layers import DenseLayer, SparseLayer
from backpropnets.core.network import FeedForwardNetwork


def test_dense_layer_folds_bias_into_column_zero():
    layer = DenseLayer(2, 1, Linear())
    layer.weights = np.array([[0.5, 2.0, -1.0]])
    out = layer.forward([3.0, 4.0])
    # 0.5 * 1 + 2 * 3 - 1 * 4
    np.testing.assert_allclose(out, [2.5])
    np.testing.assert_allclose(layer.processed_input, [1.0, 3.0, 4.0])


def test_dense_layer_rejects_wrong_input_length():
    layer = DenseLayer(2, 3, Sigmoid())
    with pytest.raises(DimensionMismatchError):
        layer.input = [1.0, 2.0, 3.0]


def test_dense_layer_rejects_wrong_weight_shape():
    layer = DenseLayer(2, 3, Sigmoid())
    with pytest.raises(DimensionMismatchError):
        layer.weights = np.zeros((3, 2))


def test_output_cache_tracks_weight_changes():
    layer = DenseLayer(1, 1, Linear())
    layer.weights = [[0.0, 1.0]]
    layer.input = [2.0]
    assert layer.output[0] == pytest.approx(2.0)
    assert layer.is_output_current
    layer.weights = [[1.0, 1.0]]
    assert not layer.is_output_current
    assert layer.output[0] == pytest.approx(3.0)


def test_cached_arrays_are_read_only():
    layer = DenseLayer(1, 1, Linear())
    layer.input = [1.0]
    with pytest.raises(ValueError):
        layer.output[0] = 5.0
    with pytest.raises(ValueError):
        layer.weights[0, 0] = 5.0


def test_sparse_layer_is_not_implemented():
    layer = SparseLayer(2, 2, Sigmoid())
    with pytest.raises(NotImplementedError):
        layer.make_gradient()
    with pytest.raises(NotImplementedError):
        layer.forward([1.0, 2.0])
    with pytest.raises(NotImplementedError):
        layer.input = [1.0, 2.0]
    with pytest.raises(NotImplementedError):
        layer.input
    with pytest.raises(NotImplementedError):
        layer.processed_input
    assert layer.version == 0
    assert layer.rate_index_rank == 1


def test_network_chaining_and_validation():
    network = FeedForwardNetwork(2, 1).add_hidden_layer(4, Sigmoid()).add_output_layer(Sigmoid())
    assert network.is_complete
    assert [layer.inputs for layer in network.layers] == [2, 4]
    assert network.parameter_count() == 4 * 3 + 1 * 5
    with pytest.raises(OperationNotPermittedError):
        network.add_hidden_layer(3, Sigmoid())

    broken = FeedForwardNetwork(2, 1).add_hidden_layer(4, Sigmoid())
    with pytest.raises(DimensionMismatchError):
        broken.add_layer(DenseLayer(3, 1, Sigmoid()), output=True)


def test_add_multiple_layers_copies_activation():
    shared = Sigmoid()
    network = FeedForwardNetwork(2, 1).add_multiple_layers(3, 4, shared)
    activations = [layer.activation for layer in network.layers]
    assert len({id(act) for act in activations}) == 3
    assert all(act is not shared for act in activations)


def test_forward_pass_is_deterministic():
    network = FeedForwardNetwork(2, 2).add_hidden_layer(3, Sigmoid()).add_output_layer(Sigmoid())
    rng = np.random.default_rng(0)
    for layer in network.layers:
        layer.weights = rng.uniform(-1, 1, size=layer.weight_shape)
    first = network.get_output([0.3, -0.7]).copy()
    network.get_output([1.0, 1.0])
    second = network.get_output([0.3, -0.7])
    np.testing.assert_array_equal(first, second)


def test_network_output_reflects_weight_updates():
    network = FeedForwardNetwork(1, 1).add_output_layer(Linear())
    layer = network.layers[0]
    layer.weights = [[0.0, 1.0]]
    network.input = [2.0]
    assert network.output[0] == pytest.approx(2.0)
    layer.weights = [[0.0, 3.0]]
    assert network.output[0] == pytest.approx(6.0)


def test_network_without_input_has_no_output():
    network = FeedForwardNetwork(1, 1).add_output_layer(Linear())
    with pytest.raises(OperationNotPermittedError):
        network.output
    with pytest.raises(DimensionMismatchError):
        network.input = [1.0, 2.0]


def test_predict_stacks_outputs():
    network = FeedForwardNetwork(1, 1).add_output_layer(Linear())
    network.layers[0].weights = [[1.0, 2.0]]
    np.testing.assert_allclose(network.predict([[0.0], [1.0]]), [[1.0], [3.0]])
