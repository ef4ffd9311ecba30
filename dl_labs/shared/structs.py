# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
This Module holds dataclass structures for passing results between the labs and their helpers
"""
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class GANStepResult:
    """
    Stores the outcome of a single GAN training step.

    Attributes:
        iteration (int): Iteration index within the current epoch (1-based).
        discriminator_loss (float): Loss of the last discriminator update.
        generator_loss (float): Loss of the combined network update.
        samples_per_second (Optional[float]): Throughput of the step, if measured.
    """

    iteration: int
    discriminator_loss: float
    generator_loss: float
    samples_per_second: Optional[float] = None


@dataclass
class DetectedObject:
    """
    A single detection decoded from a YOLO output grid.

    Coordinates are expressed in grid units, i.e. a box spanning the whole image
    on a 13x13 grid has a width of 13.

    Attributes:
        center_x (float): Horizontal box center.
        center_y (float): Vertical box center.
        width (float): Box width.
        height (float): Box height.
        confidence (float): Objectness score of the box.
        predicted_class (int): Index of the most probable class.
        class_probabilities (list): Probability of every class.
    """

    center_x: float
    center_y: float
    width: float
    height: float
    confidence: float
    predicted_class: int
    class_probabilities: list = field(default_factory=list)

    def top_left_xy(self):
        return self.center_x - self.width / 2, self.center_y - self.height / 2

    def bottom_right_xy(self):
        return self.center_x + self.width / 2, self.center_y + self.height / 2
