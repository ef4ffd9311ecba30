# -*- coding: utf-8 -*-
import logging

import cv2
import wandb

from dl_labs.shared.ObjectDetector import TinyYoloDetector, annotate_frame
from dl_labs.shared.logger_config import setup_logger
from .utils import parse_arguments

logger = logging.getLogger()


def run(argv=None):
    # Parse command line arguments, an unknown camera position stops here
    config = parse_arguments(argv)

    # Set up logging
    setup_logger(is_verbose=config.verbose)

    detector = TinyYoloDetector.from_pretrained(config.model_path, **config.get_detector_config())
    grid_size = config.grid_size()

    capture = cv2.VideoCapture(config.camera_num)
    if not capture.isOpened():
        raise RuntimeError(f"Unable to open camera {config.camera_num}")

    if config.wandb_logging:
        wandb.init(project=config.wandb_project, name=config.wandb_name, config=vars(config),
                   mode=config.wandb_mode)

    writer = None
    frames = 0
    try:
        for frames, frame, objects in detect_frames(capture, detector, config.camera_pos, grid_size,
                                                    config.max_frames):
            if config.output:
                if writer is None:
                    writer = _open_writer(config.output, config.fps, frame)
                writer.write(frame)

            for obj in objects:
                logger.debug(f"Frame {frames}: {detector.labels[obj.predicted_class]} "
                             f"({obj.confidence:.2f}) at {obj.top_left_xy()}-{obj.bottom_right_xy()}")

            if config.wandb_logging:
                wandb.log({"frame": frames, "detections": len(objects)})
    except KeyboardInterrupt:
        logger.info("Detection interrupted")
    finally:
        capture.release()
        if writer is not None:
            writer.release()

    logger.info(f"Processed {frames} frames")
    if config.wandb_logging:
        wandb.finish()

    return frames


def detect_frames(capture, detector, camera_pos, grid_size, max_frames=None):
    """
    Grabs frames from the camera and yields them annotated with the detections.

    Args:
        capture (cv2.VideoCapture): Opened camera.
        detector (TinyYoloDetector): Detector to run on every frame.
        camera_pos (str): "front" mirrors the frames.
        grid_size (Optional[tuple]): (grid_width, grid_height) the detections refer to, taken from the
            detector after every frame when None.
        max_frames (Optional[int]): Stop after this many frames.

    Yields:
        tuple: (1-based frame number, annotated BGR frame, list of DetectedObject).
    """
    frame_number = 0
    while max_frames is None or frame_number < max_frames:
        grabbed, frame = capture.read()
        if not grabbed:
            logger.warning("Camera returned no frame, stopping")
            return

        frame = prepare_frame(frame, camera_pos)
        objects = detector.detect(frame)
        annotate_frame(frame, objects, detector.labels, *(grid_size or detector.grid_size()))

        frame_number += 1
        yield frame_number, frame, objects


def prepare_frame(frame, camera_pos):
    """Mirrors frames of a front camera horizontally."""
    if camera_pos == "front":
        return cv2.flip(frame, 1)
    return frame


def _open_writer(path, fps, frame):
    height, width = frame.shape[:2]
    logger.info(f"Writing annotated video to {path}")
    return cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*'mp4v'), fps, (width, height))


if __name__ == '__main__':
    run()
