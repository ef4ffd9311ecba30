"""Shared fixtures for the dl_labs unit tests."""

import keras
import numpy as np
import pytest

from dl_labs.shared.GAN import DenseGAN


@pytest.fixture(autouse=True)
def _seed():
    """Seed Python, NumPy and the backend so weight initialisation is repeatable."""
    keras.utils.set_random_seed(42)


# ---- Tiny networks for the synchronizer ----

def _sequential(input_dim, layers):
    return keras.models.Sequential([keras.layers.Input(shape=(input_dim,))] + layers)


@pytest.fixture
def sync_networks():
    """(generator, discriminator, combined) laid out like a GAN, each initialised independently.

    Generator 2->3->lrelu->4, discriminator 4->5->lrelu->1; the LeakyReLU layers carry no weights.
    """
    generator = _sequential(2, [
        keras.layers.Dense(3), keras.layers.LeakyReLU(), keras.layers.Dense(4),
    ])
    discriminator = _sequential(4, [
        keras.layers.Dense(5), keras.layers.LeakyReLU(), keras.layers.Dense(1, activation='sigmoid'),
    ])
    combined = _sequential(2, [
        keras.layers.Dense(3), keras.layers.LeakyReLU(), keras.layers.Dense(4),
        keras.layers.Dense(5), keras.layers.LeakyReLU(), keras.layers.Dense(1, activation='sigmoid'),
    ])
    return generator, discriminator, combined


@pytest.fixture
def tiny_gan():
    """DenseGAN producing 16-value samples from 4-value noise, one hidden layer per network."""
    return DenseGAN(input_dim=16, noise_dim=4, generator_layers=(8,), discriminator_layers=(8,),
                    learning_rate=0.01, discriminator_steps=1)


@pytest.fixture
def real_features():
    """Twenty random samples in [-1, 1] with 16 values each."""
    return np.random.default_rng(0).uniform(-1, 1, (20, 16)).astype('float32')


def layer_weights(layers):
    """Snapshot of every layer's weights."""
    return [[np.copy(w) for w in layer.get_weights()] for layer in layers]


def assert_layers_equal(left, right):
    """Asserts two lists of layers (or weight snapshots) hold identical weights."""
    left = left if _is_snapshot(left) else layer_weights(left)
    right = right if _is_snapshot(right) else layer_weights(right)
    assert len(left) == len(right)
    for left_weights, right_weights in zip(left, right):
        assert len(left_weights) == len(right_weights)
        for a, b in zip(left_weights, right_weights):
            np.testing.assert_array_equal(a, b)


def _is_snapshot(items):
    return all(isinstance(item, list) for item in items)
