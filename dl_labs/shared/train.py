# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
This Module contains the epoch loop that trains a DenseGAN and reports its progress
"""
import logging
import time

import wandb
from tqdm import tqdm

from dl_labs.shared.helper import samples_to_grid, save_sample_grid
from dl_labs.shared.structs import GANStepResult

logger = logging.getLogger()


def train_gan(gan, data_iterator, config, tqdm_logger=None):
    """
    Trains the GAN for a number of passes over a restartable batch iterator.

    Args:
        gan (DenseGAN): The GAN to train.
        data_iterator (MnistBatchIterator): Iterator over real batches, reset after every epoch.
        config (dict): Configuration dictionary.
            - "epochs" (int): Number of passes over the data.
            - "log_interval" (int): Log losses and throughput every n iterations.
            - "visualization_interval" (int): Render generated samples every n iterations.
            - "num_samples" (int): Number of samples in every rendered grid.
            - "image_shape" (tuple): (height, width) of a single sample.
            - "output_dir" (Optional[str]): Directory for the rendered grids, None to skip saving.
            - "wandb_logging" (bool): Log losses and grids to W&B.
        tqdm_logger (TqdmLogger): Destination of the progress bar, stderr when None.

    Returns:
        list: The `GANStepResult` of every logged iteration.
    """
    history = []
    visualization_noise = gan.sample_noise(config["num_samples"])

    for epoch in range(1, config["epochs"] + 1):
        progress = tqdm(data_iterator, total=len(data_iterator), desc=f"Epoch {epoch}/{config['epochs']}",
                        file=tqdm_logger)

        for iteration, real_batch in enumerate(progress, start=1):
            start_time = time.time()
            d_loss, g_loss = gan.train_step(real_batch)
            elapsed_time = time.time() - start_time

            if iteration % config["log_interval"] == 0:
                samples_per_second = len(real_batch) / elapsed_time if elapsed_time > 0 else None
                result = GANStepResult(iteration, d_loss, g_loss, samples_per_second)
                history.append(result)
                _log_step(result, epoch, config)

            # The first iteration of an epoch is always visualized
            if iteration % config["visualization_interval"] == 1 or config["visualization_interval"] == 1:
                logger.info(f"Iteration {iteration} Visualizing...")
                _visualize(gan, visualization_noise, epoch, iteration, config)

        data_iterator.reset()

    return history


def _log_step(result, epoch, config):
    """
    Writes a step result to the logger and, if enabled, to W&B.

    Args:
        result (GANStepResult): The step to report.
        epoch (int): Current epoch.
        config (dict): Training configuration, see `train_gan`.
    """
    throughput = f"{result.samples_per_second:.1f} samples/sec" if result.samples_per_second else "n/a"
    logger.info(f"Epoch {epoch} Iteration {result.iteration} | D Loss: {result.discriminator_loss:.4f}, "
                f"G Loss: {result.generator_loss:.4f}, {throughput}")

    if config["wandb_logging"]:
        wandb.log({
            "epoch": epoch,
            "iteration": result.iteration,
            "discriminator_loss": result.discriminator_loss,
            "generator_loss": result.generator_loss,
        })


def _visualize(gan, noise, epoch, iteration, config):
    """
    Renders samples for a fixed noise batch so successive grids can be compared.

    Args:
        gan (DenseGAN): The GAN to sample from.
        noise (np.ndarray): Noise vectors, one per rendered sample.
        epoch (int): Current epoch.
        iteration (int): Current iteration within the epoch.
        config (dict): Training configuration, see `train_gan`.
    """
    grid = samples_to_grid(gan.generate_samples(noise), image_shape=config["image_shape"])

    if config["output_dir"]:
        path = save_sample_grid(grid, config["output_dir"], iteration, epoch)
        logger.debug(f"Sample grid written to {path}")

    if config["wandb_logging"]:
        wandb.log({"samples": wandb.Image(grid, caption=f"epoch {epoch} iteration {iteration}")})
