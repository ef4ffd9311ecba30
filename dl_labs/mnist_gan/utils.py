# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
This module provides configuration settings for training the MNIST GAN.

It includes the following functionalities:
1. Config class for managing the configuration parameters.
2. Functions for argument parsing and seed setup.
"""
import argparse
import logging
import random

import numpy as np
import tensorflow as tf

from dl_labs.shared.DatasetLoader import MNIST_IMAGE_SHAPE

logger = logging.getLogger()


class Config:
    """
    A class to hold the configuration parameters for GAN training.

    Attributes:
        batch_size (int): Number of real samples per training step.
        epochs (int): Number of passes over the training images.
        noise_dim (int): Noise vector dimension for the generator.
        generator_layers (list): Units of the hidden generator layers.
        discriminator_layers (list): Units of the hidden discriminator layers.
        learning_rate (float): Adam learning rate.
        beta_1 (float): Adam beta_1.
        gradient_threshold (float): Gradient norm clipping threshold.
        dropout_rate (float): Dropout rate of the discriminator.
        leaky_relu_slope (float): Negative slope of the LeakyReLU activations.
        discriminator_steps (int): Discriminator updates per training step.
        log_interval (int): Log losses every n iterations.
        visualization_interval (int): Render samples every n iterations.
        num_samples (int): Number of samples per rendered grid.
        output_dir (str): Directory for rendered grids.
        save_path (str): Where to save the trained generator.
        wandb_logging (bool): Flag to enable W&B logging.
        wandb_project (str): Project name for W&B logging.
        wandb_name (str): Name for the W&B log.
        wandb_mode (str): Mode of W&B logging (e.g., "offline").
        seed (int): Random seed for reproducibility.
        verbose (bool): Flag to enable verbose output during training.
    """

    def __init__(self, args):
        """
        Initializes the Config object with values parsed from command-line arguments.

        Args:
            args (argparse.Namespace): Parsed command-line arguments containing configuration values.
        """
        # --- Training Settings ---
        self.batch_size = args.batch_size
        self.epochs = args.epochs

        # --- Network Settings ---
        self.noise_dim = args.noise_dim
        self.generator_layers = args.generator_layers
        self.discriminator_layers = args.discriminator_layers
        self.learning_rate = args.learning_rate
        self.beta_1 = args.beta_1
        self.gradient_threshold = args.gradient_threshold
        self.dropout_rate = args.dropout_rate
        self.leaky_relu_slope = args.leaky_relu_slope
        self.discriminator_steps = args.discriminator_steps

        # --- Reporting ---
        self.log_interval = args.log_interval
        self.visualization_interval = args.visualization_interval
        self.num_samples = args.num_samples
        self.output_dir = args.output_dir
        self.save_path = args.save_path

        # --- WandB Integration (Logging) ---
        self.wandb_logging = args.wandb_logging
        self.wandb_project = args.wandb_project
        self.wandb_name = args.wandb_name
        self.wandb_mode = args.wandb_mode

        # --- Other General Configurations ---
        self.seed = args.seed
        self.verbose = args.verbose

        if self.log_interval < 1 or self.visualization_interval < 1:
            raise ValueError("log_interval and visualization_interval must be positive")

    def get_model_config(self):
        """
        Retrieves the keyword arguments for building the DenseGAN.

        Returns:
            dict: A dictionary containing the network configuration values.
        """
        return {
            "input_dim": MNIST_IMAGE_SHAPE[0] * MNIST_IMAGE_SHAPE[1],
            "noise_dim": self.noise_dim,
            "generator_layers": self.generator_layers,
            "discriminator_layers": self.discriminator_layers,
            "learning_rate": self.learning_rate,
            "beta_1": self.beta_1,
            "gradient_threshold": self.gradient_threshold,
            "dropout_rate": self.dropout_rate,
            "leaky_relu_slope": self.leaky_relu_slope,
            "discriminator_steps": self.discriminator_steps
        }

    def get_training_config(self):
        """
        Retrieves the configuration values for the training loop.

        Returns:
            dict: A dictionary containing the training configuration values.
        """
        return {
            "epochs": self.epochs,
            "log_interval": self.log_interval,
            "visualization_interval": self.visualization_interval,
            "num_samples": self.num_samples,
            "image_shape": MNIST_IMAGE_SHAPE,
            "output_dir": self.output_dir,
            "wandb_logging": self.wandb_logging
        }

    def get_wandb_config(self):
        """
        Retrieves the W&B logging configuration values.

        Returns:
            dict: A dictionary containing the W&B logging configuration values.
        """
        return {
            "wandb_logging": self.wandb_logging,
            "wandb_project": self.wandb_project,
            "wandb_name": self.wandb_name,
            "wandb_mode": self.wandb_mode
        }


def parse_arguments(argv=None):
    """
    Parses the command-line arguments and returns the corresponding configuration object.

    Args:
        argv (list): Arguments to parse, `sys.argv[1:]` when None.

    Returns:
        Config: The Config object containing the parsed configuration values.
    """
    parser = argparse.ArgumentParser(description="Train a GAN that generates handwritten digits.")
    parser.add_argument("-b", "--batch_size", type=int, default=128, help="Number of real images per step.")
    parser.add_argument("-e", "--epochs", type=int, default=50, help="Number of passes over MNIST.")
    parser.add_argument("--noise_dim", type=int, default=100, help="Size of noise for generator")
    parser.add_argument("--generator_layers", type=int, nargs='+', default=[256, 512, 1024],
                        help="Sizes of Dense Layers for generator")
    parser.add_argument("--discriminator_layers", type=int, nargs='+', default=[1024, 512, 256],
                        help="Sizes of Dense Layers for discriminator")
    parser.add_argument("-lr", "--learning_rate", type=float, default=0.0002, help="Adam learning rate.")
    parser.add_argument("--beta_1", type=float, default=0.5, help="Adam beta_1.")
    parser.add_argument("--gradient_threshold", type=float, default=100.0, help="Gradient norm clipping threshold.")
    parser.add_argument("--dropout_rate", type=float, default=0.5, help="Dropout rate of the discriminator.")
    parser.add_argument("--leaky_relu_slope", type=float, default=0.2, help="Negative slope of LeakyReLU.")
    parser.add_argument("-ds", "--discriminator_steps", type=int, default=2,
                        help="Discriminator updates per training step.")
    parser.add_argument("--log_interval", type=int, default=10, help="Log losses every n iterations.")
    parser.add_argument("-vi", "--visualization_interval", type=int, default=10,
                        help="Render generated samples every n iterations.")
    parser.add_argument("-ns", "--num_samples", type=int, default=12, help="Number of samples per rendered grid.")
    parser.add_argument("-o", "--output_dir", type=str, default=None, help="Directory for rendered sample grids.")
    parser.add_argument("-s", "--save_path", type=str, default=None, help="Path to save the trained generator.")
    parser.add_argument("--wandb_logging", action='store_true', default=False, help="Enable W&B logging.")
    parser.add_argument("-wp", "--wandb_project", type=str, default="MNIST-GAN", help="W&B project name.")
    parser.add_argument("-wn", "--wandb_name", type=str, default=None, help="Name of W&B logging.")
    parser.add_argument("-wm", "--wandb_mode", type=str, default="offline", help="Mode of W&B logging.")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility.")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Enable verbose output")

    args = parser.parse_args(argv)
    return Config(args)


def setup_seed(seed):
    """
    Sets the random seed for reproducibility across various libraries.

    Args:
        seed (int): The seed value for random number generation.
    """
    if seed is not None:
        random.seed(seed)
        np.random.seed(seed)
        tf.random.set_seed(seed)
        logger.info(f"Random seed set to: {seed}")
