"""Tests for dl_labs/shared/DatasetLoader.py: MNIST features and the restartable batch iterator."""

import keras
import numpy as np
import pytest

from dl_labs.shared.DatasetLoader import MnistBatchIterator, load_mnist_features


@pytest.fixture
def indexed_features():
    """Ten one-value samples whose value is their row index."""
    return np.arange(10, dtype='float32').reshape(10, 1)


class TestMnistBatchIterator:

    def test_batch_count_includes_partial_batch(self, indexed_features):
        """Ten samples in batches of four give two full batches and one of two."""
        iterator = MnistBatchIterator(indexed_features, batch_size=4)
        batches = list(iterator)

        assert len(iterator) == 3
        assert [len(batch) for batch in batches] == [4, 4, 2]

    def test_every_sample_once_per_pass(self, indexed_features):
        """A pass returns each sample exactly once."""
        batches = list(MnistBatchIterator(indexed_features, batch_size=3))
        assert sorted(np.concatenate(batches).ravel().tolist()) == list(range(10))

    def test_exhausted_until_reset(self, indexed_features):
        """After a full pass the iterator is empty until it is reset."""
        iterator = MnistBatchIterator(indexed_features, batch_size=4)
        list(iterator)

        assert not iterator.has_next()
        with pytest.raises(StopIteration):
            next(iterator)

        iterator.reset()
        assert iterator.has_next()
        assert len(list(iterator)) == 3

    def test_reset_reshuffles(self, indexed_features):
        """Successive passes use different sample orders."""
        iterator = MnistBatchIterator(np.arange(100, dtype='float32').reshape(100, 1), batch_size=100)
        first = next(iterator).ravel().tolist()
        iterator.reset()
        second = next(iterator).ravel().tolist()

        assert first != second
        assert sorted(first) == sorted(second)

    def test_same_seed_same_order(self, indexed_features):
        """The shuffle order is reproducible."""
        first = np.concatenate(list(MnistBatchIterator(indexed_features, batch_size=4, seed=7)))
        second = np.concatenate(list(MnistBatchIterator(indexed_features, batch_size=4, seed=7)))
        np.testing.assert_array_equal(first, second)

    def test_no_shuffle_keeps_order(self, indexed_features):
        """Without shuffling the samples come back in their original order."""
        batches = list(MnistBatchIterator(indexed_features, batch_size=4, shuffle=False))
        np.testing.assert_array_equal(np.concatenate(batches), indexed_features)

    def test_invalid_batch_size_raises(self, indexed_features):
        with pytest.raises(ValueError, match="batch_size"):
            MnistBatchIterator(indexed_features, batch_size=0)

    def test_empty_dataset_raises(self):
        with pytest.raises(ValueError, match="empty"):
            MnistBatchIterator(np.zeros((0, 784)))


class TestLoadMnistFeatures:

    @pytest.fixture(autouse=True)
    def _fake_mnist(self, monkeypatch):
        """Replace the download with three tiny images per split."""
        x_train = np.array([np.zeros((28, 28)), np.full((28, 28), 255), np.full((28, 28), 51)], dtype='uint8')
        x_test = np.full((2, 28, 28), 255, dtype='uint8')
        monkeypatch.setattr(keras.datasets.mnist, "load_data",
                            lambda: ((x_train, np.zeros(3)), (x_test, np.zeros(2))))

    def test_flattened_and_scaled(self):
        """Images become 784 values, black maps to -1 and white to 1."""
        features = load_mnist_features(train=True)

        assert features.shape == (3, 784)
        assert features.dtype == np.float32
        np.testing.assert_allclose(features[0], -1.0)
        np.testing.assert_allclose(features[1], 1.0)
        np.testing.assert_allclose(features[2], 51 / 255 * 2 - 1, rtol=1e-6)

    def test_test_split(self):
        assert load_mnist_features(train=False).shape == (2, 784)
