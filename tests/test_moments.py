import pytest
import numpy as np
from rops.feature_extraction.moments import central_moments, shannon_entropy, SUB_FEATURE_SIZE


def test_sub_feature_size():
    assert SUB_FEATURE_SIZE == 5
    assert central_moments(np.ones((5, 5))).shape == (5,)


def test_diagonal_distribution():
    matrix = np.array([[0.5, 0.0], [0.0, 0.5]])
    m11, m12, m21, m22, entropy = central_moments(matrix)

    assert np.isclose(m11, 0.25)
    assert np.isclose(m12, 0.0)
    assert np.isclose(m21, 0.0)
    assert np.isclose(m22, 0.0625)
    assert np.isclose(entropy, np.log(2))


def test_uniform_distribution():
    bins = 5
    features = central_moments(np.full((bins, bins), 1.0 / bins ** 2))

    assert np.allclose(features[:3], 0.0)
    assert features[3] > 0
    assert np.isclose(features[4], np.log(bins ** 2))


def test_single_cell():
    matrix = np.zeros((5, 5))
    matrix[3, 1] = 1.0

    assert np.allclose(central_moments(matrix), 0.0)


def test_counts_are_normalized():
    counts = np.random.default_rng(1).integers(0, 10, size=(5, 5)).astype(np.float64)

    assert np.allclose(central_moments(counts), central_moments(counts / counts.sum()))


def test_empty_matrix():
    assert np.array_equal(central_moments(np.zeros((4, 4))), np.zeros(5))


@pytest.mark.parametrize('seed', range(5))
def test_entropy_is_non_negative(seed):
    matrix = np.random.default_rng(seed).random((6, 6))
    matrix[matrix < 0.5] = 0.0

    features = central_moments(matrix)
    assert features[4] >= 0
    assert np.all(np.isfinite(features))


def test_entropy_ignores_empty_bins():
    assert shannon_entropy(np.array([0.0, 1.0, 0.0])) == 0.0
    assert np.isclose(shannon_entropy(np.array([0.25, 0.25, 0.5, 0.0])), 1.5 * np.log(2))
