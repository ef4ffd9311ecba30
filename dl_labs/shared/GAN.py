# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Module for a fully connected GAN (Generative Adversarial Network) built from three Keras models.

The main class is `DenseGAN`. It holds a generator, a discriminator and a combined network made of
fresh generator layers followed by a frozen copy of the discriminator layers. Only the combined
network is used to train the generator; the weights of the three models are kept consistent with
the functions in `weight_sync`.
"""

import logging

import keras
import numpy as np

from .weight_sync import propagate_discriminator_update, synchronize_from_combined

logger = logging.getLogger()
keras_verbose = 0 if logger.level >= logging.INFO else 1

REAL_LABEL = 0.0
FAKE_LABEL = 1.0


class DenseGAN:
    """
    A GAN made of Dense layers that learns to produce flat samples (e.g. 28x28 images as 784 values).

    Attributes:
        input_dim (int): The dimension of the generated data.
        noise_dim (int): The dimension of the noise vector used as input for the generator.
        discriminator_steps (int): How often the discriminator is fitted on each mixed batch.
        generator (keras.models.Sequential): Maps noise to samples in [-1, 1].
        discriminator (keras.models.Sequential): Maps samples to the probability of being fake.
        combined (keras.models.Sequential): Generator layers followed by frozen discriminator layers.
    """

    def __init__(self, input_dim=784, noise_dim=100, generator_layers=(256, 512, 1024),
                 discriminator_layers=(1024, 512, 256), learning_rate=0.0002, beta_1=0.5,
                 gradient_threshold=100.0, dropout_rate=0.5, leaky_relu_slope=0.2, discriminator_steps=2):
        """
        Builds and compiles the three networks and brings their weights in line.

        Args:
            input_dim (int): The dimension of the generated data.
            noise_dim (int): The dimension of the noise vector for the generator.
            generator_layers (tuple): Units of the hidden Dense layers of the generator.
            discriminator_layers (tuple): Units of the hidden Dense layers of the discriminator.
            learning_rate (float): Adam learning rate for both trainable networks.
            beta_1 (float): Adam beta_1.
            gradient_threshold (float): Gradient norm clipping threshold, None to disable.
            dropout_rate (float): Dropout rate after every hidden discriminator layer.
            leaky_relu_slope (float): Negative slope of the LeakyReLU activations.
            discriminator_steps (int): Discriminator updates per training step.

        Raises:
            ValueError: If `discriminator_steps` is smaller than 1.
        """
        if discriminator_steps < 1:
            raise ValueError(f"discriminator_steps must be at least 1, got {discriminator_steps}")

        self.input_dim = input_dim
        self.noise_dim = noise_dim
        self.generator_layers = list(generator_layers)
        self.discriminator_layers = list(discriminator_layers)
        self.learning_rate = learning_rate
        self.beta_1 = beta_1
        self.gradient_threshold = gradient_threshold
        self.dropout_rate = dropout_rate
        self.leaky_relu_slope = leaky_relu_slope
        self.discriminator_steps = discriminator_steps

        self.generator = self._create_generator()
        self.discriminator = self._create_discriminator()
        self.combined = self._create_combined()

        # The combined network is the reference until the first training step
        synchronize_from_combined(self.generator, self.discriminator, self.combined)

    def _generator_layers(self):
        """
        Creates a new, unconnected set of generator layers.

        Returns:
            list: Dense and LeakyReLU layers ending in a tanh output of size `input_dim`.
        """
        layers = []
        for i, units in enumerate(self.generator_layers):
            initializer = keras.initializers.RandomNormal(stddev=float(1 / np.sqrt(self.noise_dim))) if i == 0 \
                else keras.initializers.GlorotNormal()
            layers.append(keras.layers.Dense(units, kernel_initializer=initializer))
            layers.append(keras.layers.LeakyReLU(negative_slope=self.leaky_relu_slope))
        layers.append(keras.layers.Dense(self.input_dim, activation='tanh',
                                         kernel_initializer=keras.initializers.GlorotNormal()))
        return layers

    def _discriminator_layers(self, trainable=True):
        """
        Creates a new, unconnected set of discriminator layers.

        Args:
            trainable (bool): False to build the frozen copy used inside the combined network.

        Returns:
            list: Dense, LeakyReLU and Dropout layers ending in a single sigmoid unit.
        """
        layers = []
        for units in self.discriminator_layers:
            layers.append(keras.layers.Dense(units, kernel_initializer=keras.initializers.GlorotNormal()))
            layers.append(keras.layers.LeakyReLU(negative_slope=self.leaky_relu_slope))
            layers.append(keras.layers.Dropout(self.dropout_rate))
        layers.append(keras.layers.Dense(1, activation='sigmoid', kernel_initializer=keras.initializers.GlorotNormal()))

        for layer in layers:
            layer.trainable = trainable
        return layers

    def _optimizer(self):
        return keras.optimizers.Adam(learning_rate=self.learning_rate, beta_1=self.beta_1,
                                     clipnorm=self.gradient_threshold)

    def _create_generator(self):
        """
        Builds the generator model. It is never trained directly, so it is not compiled.

        Returns:
            keras.models.Sequential: The generator model.
        """
        return keras.models.Sequential([keras.layers.Input(shape=(self.noise_dim,))] + self._generator_layers(),
                                       name='generator')

    def _create_discriminator(self):
        """
        Builds the discriminator model that classifies real vs fake data.

        Returns:
            keras.models.Sequential: The compiled discriminator model.
        """
        model = keras.models.Sequential([keras.layers.Input(shape=(self.input_dim,))] + self._discriminator_layers(),
                                        name='discriminator')
        model.compile(optimizer=self._optimizer(), loss='binary_crossentropy')
        return model

    def _create_combined(self):
        """
        Builds the combined network: generator layers followed by frozen discriminator layers.

        The layers are new instances, so training the combined network never touches the
        standalone models until their weights are copied over.

        Returns:
            keras.models.Sequential: The compiled combined model.
        """
        layers = self._generator_layers() + self._discriminator_layers(trainable=False)
        model = keras.models.Sequential([keras.layers.Input(shape=(self.noise_dim,))] + layers, name='combined')
        model.compile(optimizer=self._optimizer(), loss='binary_crossentropy')
        return model

    def sample_noise(self, num_samples):
        """
        Draws standard normal noise vectors for the generator.

        Args:
            num_samples (int): Number of noise vectors.

        Returns:
            np.ndarray: Array of shape (num_samples, noise_dim).
        """
        return np.random.normal(0, 1, (num_samples, self.noise_dim)).astype('float32')

    def train_step(self, real_batch):
        """
        Runs one adversarial training step on a batch of real samples.

        The discriminator is fitted on real samples (label 0) merged with generated samples (label 1),
        its weights are pushed into the combined network, the combined network is fitted on fresh
        noise labelled as real, and its generator part is copied back into the generator.

        Args:
            real_batch (np.ndarray): Real samples scaled to [-1, 1], shape (batch_size, input_dim).

        Returns:
            tuple: (discriminator loss, generator loss) as floats.
        """
        real_batch = np.asarray(real_batch, dtype='float32')
        batch_size = real_batch.shape[0]

        fake_batch = self.generator.predict(self.sample_noise(batch_size), verbose=keras_verbose)

        samples = np.concatenate([real_batch, fake_batch])
        labels = np.concatenate([np.full((batch_size, 1), REAL_LABEL),
                                 np.full((batch_size, 1), FAKE_LABEL)]).astype('float32')

        for _ in range(self.discriminator_steps):
            d_loss = self.discriminator.train_on_batch(samples, labels)

        propagate_discriminator_update(self.generator, self.discriminator, self.combined)

        valid_labels = np.full((batch_size, 1), REAL_LABEL, dtype='float32')
        g_loss = self.combined.train_on_batch(self.sample_noise(batch_size), valid_labels)

        synchronize_from_combined(self.generator, self.discriminator, self.combined)

        return _loss_value(d_loss), _loss_value(g_loss)

    def generate_samples(self, noise=None, num_samples=None):
        """
        Generates synthetic samples using the current generator.

        Args:
            noise (np.ndarray): Noise vectors to decode. Drawn fresh when omitted.
            num_samples (int): Number of samples to draw when `noise` is omitted.

        Returns:
            np.ndarray: Generated samples in [-1, 1].
        """
        if noise is None:
            if num_samples is None:
                raise ValueError("Either noise or num_samples must be given")
            noise = self.sample_noise(num_samples)
        return self.generator.predict(np.asarray(noise, dtype='float32'), verbose=keras_verbose)

    def get_generator_weights(self):
        """
        Returns the weights of the generator.

        Returns:
            list: A list of weights from the generator.
        """
        return self.generator.get_weights()

    def set_generator_weights(self, weights):
        """
        Sets the weights for the generator and the generator part of the combined network.

        Args:
            weights (list): List of weights to set in the generator.
        """
        self.generator.set_weights(weights)
        for i, layer in enumerate(self.generator.layers):
            self.combined.layers[i].set_weights(layer.get_weights())

    def get_discriminator_weights(self):
        """
        Returns the weights of the discriminator.

        Returns:
            list: A list of weights from the discriminator.
        """
        return self.discriminator.get_weights()

    def set_discriminator_weights(self, weights):
        """
        Sets the weights for the discriminator and the frozen copy in the combined network.

        Args:
            weights (list): List of weights to set in the discriminator.
        """
        self.discriminator.set_weights(weights)
        propagate_discriminator_update(self.generator, self.discriminator, self.combined)

    def get_all_weights(self):
        """
        Returns the weights for both the generator and discriminator.

        Returns:
            dict: A dictionary containing 'generator' and 'discriminator' keys and their weights.
        """
        return {
            'generator': self.get_generator_weights(),
            'discriminator': self.get_discriminator_weights()
        }

    def set_all_weights(self, weights):
        """
        Sets the weights for both the generator and discriminator.

        Args:
            weights (dict): Dictionary containing 'generator' and 'discriminator' keys and their weights.
        """
        if 'generator' in weights:
            self.set_generator_weights(weights['generator'])
        if 'discriminator' in weights:
            self.set_discriminator_weights(weights['discriminator'])

    def save_generator(self, path):
        """
        Saves the generator to a Keras model file.

        Args:
            path (str): Target path, usually ending in `.keras`.
        """
        self.generator.save(path)
        logger.info(f"Generator saved to {path}")


def _loss_value(loss):
    # train_on_batch returns a list once metrics are compiled in
    return float(np.ravel(loss)[0])
