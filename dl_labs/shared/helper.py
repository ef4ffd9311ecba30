# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
This module contains helper functions for turning generated samples into images.
"""
import os

import keras
import numpy as np


def samples_to_grid(samples, image_shape=(28, 28), columns=4):
    """
    Tiles flat generated samples into a single grayscale image.

    Args:
        samples (np.ndarray): Samples in [-1, 1] with shape (num_samples, height * width).
        image_shape (tuple): (height, width) of a single sample.
        columns (int): Number of samples per grid row. Missing cells stay black.

    Returns:
        np.ndarray: Grid image in [0, 1] with shape (rows * height, columns * width).

    Raises:
        ValueError: If the samples cannot be reshaped to `image_shape`.
    """
    samples = np.asarray(samples)
    height, width = image_shape
    if samples.ndim != 2 or samples.shape[1] != height * width:
        raise ValueError(f"Expected samples of shape (n, {height * width}), got {samples.shape}")

    rows = -(-len(samples) // columns)
    grid = np.full((rows * height, columns * width), -1.0, dtype='float32')

    for index, sample in enumerate(samples):
        row, column = divmod(index, columns)
        grid[row * height:(row + 1) * height, column * width:(column + 1) * width] = sample.reshape(image_shape)

    # Generator output is tanh, map it back to pixel intensities
    return np.clip((grid + 1) / 2, 0, 1)


def save_sample_grid(grid, directory, iteration, epoch):
    """
    Saves a grid produced by `samples_to_grid` as a PNG file.

    Args:
        grid (np.ndarray): Grid image in [0, 1].
        directory (str): Output directory, created if missing.
        iteration (int): Iteration within the epoch, used in the file name.
        epoch (int): Epoch number, used in the file name.

    Returns:
        str: Path of the written file.
    """
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, f"epoch{epoch:03d}_iter{iteration:05d}.png")
    keras.utils.save_img(path, grid[..., np.newaxis] * 255, scale=False)
    return path
