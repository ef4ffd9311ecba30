# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
This module provides configuration settings for the webcam object detection loop.
"""
import argparse
import logging

from dl_labs.shared.ObjectDetector import TINY_YOLO_INPUT_SIZE

logger = logging.getLogger()

CAMERA_POSITIONS = ("front", "back")


class Config:
    """
    A class to hold the configuration parameters for webcam detection.

    Attributes:
        camera_pos (str): "front" mirrors every frame, "back" leaves it as is.
        camera_num (int): Index of the camera to open.
        model_path (str): Path of the pretrained Tiny-YOLO Keras model.
        input_width (int): Width frames are resized to before inference.
        input_height (int): Height frames are resized to before inference.
        grid_width (Optional[int]): Width of the output grid, read from the model when None.
        grid_height (Optional[int]): Height of the output grid, read from the model when None.
        detection_threshold (float): Minimum objectness of a reported box.
        nms_threshold (float): IoU threshold of the non-max suppression.
        max_frames (Optional[int]): Stop after this many frames, run until interrupted when None.
        output (Optional[str]): Path of an annotated video file to write.
        fps (float): Frame rate of the written video.
        wandb_logging (bool): Flag to enable W&B logging.
        wandb_project (str): Project name for W&B logging.
        wandb_name (str): Name for the W&B log.
        wandb_mode (str): Mode of W&B logging (e.g., "offline").
        verbose (bool): Flag to enable verbose output.
    """

    def __init__(self, args):
        """
        Initializes the Config object with values parsed from command-line arguments.

        Args:
            args (argparse.Namespace): Parsed command-line arguments containing configuration values.

        Raises:
            ValueError: If the camera position is neither "front" nor "back".
            ValueError: If only one of the grid dimensions is given.
        """
        if args.camera_pos not in CAMERA_POSITIONS:
            raise ValueError("Unknown argument for camera position. Choose between front and back")
        if (args.grid_width is None) != (args.grid_height is None):
            raise ValueError("Grid width and grid height must be given together")

        # --- Camera ---
        self.camera_pos = args.camera_pos
        self.camera_num = args.camera_num

        # --- Model ---
        self.model_path = args.model_path
        self.input_width = args.input_width
        self.input_height = args.input_height
        self.grid_width = args.grid_width
        self.grid_height = args.grid_height
        self.detection_threshold = args.detection_threshold
        self.nms_threshold = args.nms_threshold

        # --- Output ---
        self.max_frames = args.max_frames
        self.output = args.output
        self.fps = args.fps

        # --- WandB Integration (Logging) ---
        self.wandb_logging = args.wandb_logging
        self.wandb_project = args.wandb_project
        self.wandb_name = args.wandb_name
        self.wandb_mode = args.wandb_mode

        self.verbose = args.verbose

    def grid_size(self):
        """Returns the (grid_width, grid_height) override, or None to use the model's grid."""
        if self.grid_width is None:
            return None
        return self.grid_width, self.grid_height

    def get_detector_config(self):
        """
        Retrieves the keyword arguments for the TinyYoloDetector.

        Returns:
            dict: A dictionary containing the detector configuration values.
        """
        return {
            "input_width": self.input_width,
            "input_height": self.input_height,
            "detection_threshold": self.detection_threshold,
            "nms_threshold": self.nms_threshold
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
    parser = argparse.ArgumentParser(description="Run Tiny-YOLO object detection on a camera stream.")
    parser.add_argument("-m", "--model_path", type=str, required=True, help="Path of the pretrained Tiny-YOLO model.")
    parser.add_argument("-cp", "--camera_pos", type=str, default="front", help="Camera position (front or back).")
    parser.add_argument("-cn", "--camera_num", type=int, default=0, help="Index of the camera to open.")
    parser.add_argument("--input_width", type=int, default=TINY_YOLO_INPUT_SIZE, help="Network input width.")
    parser.add_argument("--input_height", type=int, default=TINY_YOLO_INPUT_SIZE, help="Network input height.")
    parser.add_argument("--grid_width", type=int, default=None, help="Output grid width, read from model if omitted.")
    parser.add_argument("--grid_height", type=int, default=None, help="Output grid height, read from model if omitted.")
    parser.add_argument("-t", "--detection_threshold", type=float, default=0.5, help="Minimum box confidence.")
    parser.add_argument("--nms_threshold", type=float, default=0.4, help="IoU threshold for non-max suppression.")
    parser.add_argument("-n", "--max_frames", type=int, default=None, help="Stop after this many frames.")
    parser.add_argument("-o", "--output", type=str, default=None, help="Write annotated frames to this video file.")
    parser.add_argument("--fps", type=float, default=30.0, help="Frame rate of the written video.")
    parser.add_argument("--wandb_logging", action='store_true', default=False, help="Enable W&B logging.")
    parser.add_argument("-wp", "--wandb_project", type=str, default="WebCam-Detection", help="W&B project name.")
    parser.add_argument("-wn", "--wandb_name", type=str, default=None, help="Name of W&B logging.")
    parser.add_argument("-wm", "--wandb_mode", type=str, default="offline", help="Mode of W&B logging.")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Enable verbose output")

    args = parser.parse_args(argv)
    return Config(args)
