# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
This module handles loading of the MNIST handwritten digits and batching them for GAN training.
"""
import logging

import keras
import numpy as np

logger = logging.getLogger()

MNIST_IMAGE_SHAPE = (28, 28)


def load_mnist_features(train=True):
    """
    Loads the MNIST images as flat feature vectors scaled to [-1, 1].

    Labels are dropped since the GAN is trained unconditionally.

    Args:
        train (bool): True for the 60000 training images, False for the 10000 test images.

    Returns:
        np.ndarray: float32 array of shape (num_images, 784).
    """
    (x_train, _), (x_test, _) = keras.datasets.mnist.load_data()
    images = x_train if train else x_test

    features = images.reshape(len(images), -1).astype('float32') / 255.0
    features = features * 2 - 1

    logger.info(f"Loaded {len(features)} MNIST {'training' if train else 'test'} images")
    return features


class MnistBatchIterator:
    """
    A restartable iterator over mini-batches of feature vectors.

    Iteration stops once every sample has been returned; `reset` rewinds the iterator and
    reshuffles the samples for the next pass. The last batch of a pass may be smaller than
    `batch_size`.

    Attributes:
        features (np.ndarray): The samples, one per row.
        batch_size (int): Number of samples per batch.
        shuffle (bool): Whether the sample order changes between passes.
    """

    def __init__(self, features, batch_size=128, seed=42, shuffle=True):
        """
        Initializes the iterator and shuffles the first pass.

        Args:
            features (np.ndarray): The samples to iterate over.
            batch_size (int): Number of samples per batch.
            seed (int): Seed for the shuffling order.
            shuffle (bool): Shuffle the samples on every pass.

        Raises:
            ValueError: If the batch size is not positive or there are no samples.
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if len(features) == 0:
            raise ValueError("The dataset should not be empty")

        self.features = np.asarray(features)
        self.batch_size = batch_size
        self.shuffle = shuffle
        self._rng = np.random.default_rng(seed)
        self._order = np.arange(len(self.features))
        self._cursor = 0
        self.reset()

    def __iter__(self):
        return self

    def __next__(self):
        if not self.has_next():
            raise StopIteration

        indices = self._order[self._cursor:self._cursor + self.batch_size]
        self._cursor += len(indices)
        return self.features[indices]

    def __len__(self):
        return -(-len(self.features) // self.batch_size)

    def has_next(self):
        return self._cursor < len(self.features)

    def reset(self):
        """Rewinds to the first batch, drawing a new sample order if shuffling is enabled."""
        self._cursor = 0
        if self.shuffle:
            self._rng.shuffle(self._order)
