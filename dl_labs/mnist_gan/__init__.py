# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
This package trains a Generative Adversarial Network (GAN) that synthesises handwritten digits from MNIST.

Features and Components:
1. **Configuration (Config)**: Collects the network, training, reporting and W&B parameters from the command line.
2. **Three Networks**: A generator, a discriminator and a combined network whose discriminator part is frozen.
3. **Weight Synchronisation**: After every update the trained network's weights are copied into the others.
4. **Sample Grids**: Generated digits are rendered periodically to PNG files and/or W&B.
5. **WandB Integration**: Enables integration with Weights & Biases (WandB) for logging training runs and metrics.
"""
