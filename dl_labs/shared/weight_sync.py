# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Weight synchronisation between a generator, a discriminator and the combined adversarial network.

The combined network is the generator's layers followed by a frozen copy of the discriminator's
layers. Its layer list is therefore split into a prefix segment (one layer per generator layer)
and a suffix segment (one layer per discriminator layer). Between training steps the generator
must equal the prefix and the discriminator must equal the suffix; the two functions below
restore that after either side has been trained.

Any object exposing ``layers`` whose items provide ``get_weights()`` and ``set_weights()`` works,
which covers every Keras model.
"""
import logging

logger = logging.getLogger()


def _prefix_length(generator, discriminator, combined):
    """
    Checks that the combined network is laid out as generator + discriminator.

    Args:
        generator (keras.Model): The standalone generator.
        discriminator (keras.Model): The standalone discriminator.
        combined (keras.Model): The combined adversarial network.

    Returns:
        int: Number of layers in the prefix (generator) segment.

    Raises:
        ValueError: If the layer counts do not line up.
    """
    prefix_length = len(generator.layers)
    expected = prefix_length + len(discriminator.layers)
    if len(combined.layers) != expected:
        raise ValueError(
            f"Combined network has {len(combined.layers)} layers, expected {expected} "
            f"({prefix_length} generator + {len(discriminator.layers)} discriminator).")
    return prefix_length


def propagate_discriminator_update(generator, discriminator, combined):
    """
    Copies every discriminator layer into the matching suffix layer of the combined network.

    Called after the discriminator has been trained so the frozen discriminator inside the
    combined network judges generated samples with the latest weights.

    Args:
        generator (keras.Model): The standalone generator (only its layer count is used).
        discriminator (keras.Model): The freshly trained discriminator.
        combined (keras.Model): The combined adversarial network.
    """
    prefix_length = _prefix_length(generator, discriminator, combined)

    for i, layer in enumerate(discriminator.layers):
        combined.layers[prefix_length + i].set_weights(layer.get_weights())


def synchronize_from_combined(generator, discriminator, combined):
    """
    Copies every layer of the combined network back into the standalone networks.

    Prefix layers go to the generator at the same index, suffix layers go to the discriminator
    at ``index - prefix_length``. Called after the combined network has been trained so the
    next batch of fake samples comes from the updated generator.

    Args:
        generator (keras.Model): The standalone generator.
        discriminator (keras.Model): The standalone discriminator.
        combined (keras.Model): The combined adversarial network.
    """
    prefix_length = _prefix_length(generator, discriminator, combined)

    for i, layer in enumerate(combined.layers):
        if i < prefix_length:
            generator.layers[i].set_weights(layer.get_weights())
        else:
            discriminator.layers[i - prefix_length].set_weights(layer.get_weights())

    logger.debug(f"Synchronized {prefix_length} generator and {len(combined.layers) - prefix_length} "
                 f"discriminator layers from combined network")
