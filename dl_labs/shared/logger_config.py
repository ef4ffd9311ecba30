# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Logging setup shared by the lab programs.
"""
import logging

import tensorflow as tf


def setup_logger(is_verbose):
    """Configures the root logger based on the `is_verbose` flag."""
    level = logging.DEBUG if is_verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')
    logging.getLogger().setLevel(level)

    tf.get_logger().setLevel(level)


class TqdmLogger:
    """File-like adapter that forwards tqdm progress output to a logger."""

    def __init__(self, logger):
        self.logger = logger

    def write(self, msg):
        # tqdm writes carriage returns and blank lines between updates
        if msg.strip():
            self.logger.info(msg.strip())

    def flush(self):
        pass
