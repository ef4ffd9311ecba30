# -*- coding: utf-8 -*-
import logging
import time

import wandb

from dl_labs.shared.DatasetLoader import MnistBatchIterator, load_mnist_features
from dl_labs.shared.GAN import DenseGAN
from dl_labs.shared.logger_config import setup_logger, TqdmLogger
from dl_labs.shared.train import train_gan
from .utils import parse_arguments, setup_seed

logger = logging.getLogger()


def run(argv=None):
    # Parse command line arguments
    config = parse_arguments(argv)

    # Set up logging
    setup_logger(is_verbose=config.verbose)
    tqdm_logger = TqdmLogger(logger)

    # Set random seed for reproducibility
    setup_seed(config.seed)

    # Initialize W&B logging if enabled
    if config.wandb_logging:
        wandb.init(project=config.wandb_project, name=config.wandb_name, config=vars(config),
                   mode=config.wandb_mode)

    # Load dataset
    features = load_mnist_features(train=True)
    data_iterator = MnistBatchIterator(features, batch_size=config.batch_size, seed=config.seed)

    gan = _train(data_iterator, config, tqdm_logger)

    if config.save_path:
        gan.save_generator(config.save_path)
    if config.wandb_logging:
        wandb.finish()

    return gan


def _train(data_iterator, config, tqdm_logger):
    # gen -> generates fake samples, dis -> trained on real and fake, combined -> trains gen with frozen dis
    gan = DenseGAN(**config.get_model_config())

    logger.info("Starting GAN Training")
    start_time = time.time()

    train_gan(gan, data_iterator, config.get_training_config(), tqdm_logger)

    elapsed_time = time.time() - start_time
    logger.info(f"Training completed in {elapsed_time:.2f} seconds")

    return gan


if __name__ == '__main__':
    run()
