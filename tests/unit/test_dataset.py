import numpy as np
import pytest

from backpropnets.core.errors import DimensionMismatchError, OperationNotPermittedError
from backpropnets.data import (
    ClassificationDataSet,
    DataPoint,
    RegressionDataSet,
    StandardNormaliser,
    UnsupervisedDataSet,
    available_datasets,
    get_dataset,
)


def _regression(n, seed=0):
    rng = np.random.default_rng(seed)
    dataset = RegressionDataSet(2, 1)
    for x in rng.random((n, 2)):
        dataset.add_data_point(x, [x.sum()])
    return dataset


def test_split_ratios_are_preserved():
    dataset = _regression(10_000)
    dataset.assign_data_points(0.7, 0.2, 0.1, rng=np.random.default_rng(1))
    sizes = [len(dataset.training_set), len(dataset.validation_set), len(dataset.test_set)]
    assert sum(sizes) == 10_000
    assert not dataset.unassigned
    for size, ratio in zip(sizes, (0.7, 0.2, 0.1)):
        assert abs(size / 10_000 - ratio) < 0.03


def test_assignment_keeps_previous_splits():
    dataset = _regression(10)
    dataset.assign_data_points(1, 0, 0, rng=np.random.default_rng(0))
    dataset.add_data_point([0.0, 0.0], [0.0])
    dataset.assign_data_points(0, 0, 1, rng=np.random.default_rng(0))
    assert len(dataset.training_set) == 10
    assert len(dataset.test_set) == 1
    assert len(dataset.whole_set()) == len(dataset) == 11


def test_random_subsets_sample_with_replacement():
    dataset = _regression(3)
    dataset.assign_data_points(1, 0, 0, rng=np.random.default_rng(0))
    subset = dataset.random_training_subset(20, rng=np.random.default_rng(5))
    assert len(subset) == 20
    assert all(point in dataset.training_set for point in subset)
    with pytest.raises(ValueError):
        dataset.random_validation_subset(1, rng=np.random.default_rng(0))


def test_point_sizes_are_validated():
    dataset = RegressionDataSet(2, 1)
    with pytest.raises(DimensionMismatchError):
        dataset.add_data_point([1.0], [1.0])
    with pytest.raises(DimensionMismatchError):
        dataset.add_data_point([1.0, 2.0], [1.0, 2.0])


def test_one_hot_encoding():
    point = DataPoint([0.0], category=2)
    point.one_hot(4)
    np.testing.assert_array_equal(point.target, [0.0, 0.0, 1.0, 0.0])

    dataset = ClassificationDataSet(1, 3)
    for category in (0, 1, 2):
        dataset.add_data_point([float(category)], category)
    dataset.one_hot_all()
    targets = np.vstack([p.target for p in dataset.whole_set()])
    np.testing.assert_array_equal(targets, np.eye(3))
    with pytest.raises(ValueError):
        dataset.add_data_point([0.0], 3)


def test_unsupervised_points_have_no_target():
    dataset = UnsupervisedDataSet(2)
    point = dataset.add_data_point([1.0, 2.0])
    assert point.target is None
    assert point.category == -1


def test_normalise_then_denormalise_restores_points():
    dataset = _regression(50)
    original = [p.input.copy() for p in dataset.whole_set()]
    normaliser = StandardNormaliser()
    dataset.normalise_by(normaliser)
    inputs = np.vstack([p.input for p in dataset.whole_set()])
    np.testing.assert_allclose(inputs.mean(axis=0), 0.0, atol=1e-12)
    np.testing.assert_allclose(inputs.std(axis=0), 1.0)
    dataset.denormalise_by(normaliser)
    for point, before in zip(dataset.whole_set(), original):
        np.testing.assert_allclose(point.input, before)


def test_denormalising_with_unfit_normaliser_fails():
    dataset = _regression(5)
    with pytest.raises(OperationNotPermittedError):
        dataset.denormalise_by(StandardNormaliser())


def test_registered_synthetic_datasets():
    assert {"xor", "sine", "quadrants"} <= set(available_datasets())
    xor = get_dataset("xor", rng=np.random.default_rng(0))
    assert len(xor.training_set) == 4
    quadrants = get_dataset("quadrants", rng=np.random.default_rng(0), n_points=200)
    for point in quadrants.whole_set():
        assert point.target.sum() == 1.0
        assert point.target[point.category] == 1.0
    with pytest.raises(KeyError, match="Available datasets"):
        get_dataset("mnist", rng=np.random.default_rng(0))


def test_denormalise_target_maps_outputs_back():
    dataset = _regression(20)
    raw = [p.target.copy() for p in dataset.whole_set()]
    normaliser = StandardNormaliser()
    dataset.normalise_by(normaliser)
    scaled = np.vstack([p.target for p in dataset.whole_set()])
    np.testing.assert_allclose(normaliser.denormalise_target(scaled), np.vstack(raw))
