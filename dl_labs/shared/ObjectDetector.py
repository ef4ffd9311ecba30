# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Tiny-YOLO (YOLOv2) inference on single video frames.

The detector wraps a pretrained Keras model whose output is the raw YOLOv2 grid of shape
(grid_height, grid_width, num_priors * (5 + num_classes)). Every cell predicts, per prior box,
the offsets (tx, ty, tw, th), an objectness logit and one logit per class. Decoded boxes are
expressed in grid units and scaled to pixels only when drawn.
"""
import logging

import cv2
import keras
import numpy as np
import tensorflow as tf

from .structs import DetectedObject

logger = logging.getLogger()
keras_verbose = 0 if logger.level >= logging.INFO else 1

VOC_LABELS = [
    "aeroplane", "bicycle", "bird", "boat", "bottle", "bus", "car", "cat", "chair", "cow",
    "diningtable", "dog", "horse", "motorbike", "person", "pottedplant", "sheep", "sofa", "train", "tvmonitor"
]

# Anchor boxes (width, height) in grid units of the Pascal VOC Tiny-YOLO model
TINY_YOLO_PRIORS = np.array([
    [1.08, 1.19],
    [3.42, 4.41],
    [6.63, 11.38],
    [9.42, 5.11],
    [16.62, 10.52],
])

TINY_YOLO_INPUT_SIZE = 416
TINY_YOLO_GRID_SIZE = 13

BOX_COLOR = (0, 0, 255)
LABEL_COLOR = (0, 255, 0)


class TinyYoloDetector:
    """
    Runs a pretrained Tiny-YOLO model on BGR frames and decodes the detections.

    Attributes:
        model (keras.Model): The pretrained network.
        labels (list): Class names, indexed by class id.
        priors (np.ndarray): Anchor boxes of shape (num_priors, 2) in grid units.
        input_width (int): Width the frames are resized to.
        input_height (int): Height the frames are resized to.
        detection_threshold (float): Minimum objectness of a reported box.
        nms_threshold (float): IoU above which the weaker of two same-class boxes is dropped.
        last_grid_size (Optional[tuple]): (grid_width, grid_height) of the last prediction.
    """

    def __init__(self, model, labels=None, priors=None, input_width=TINY_YOLO_INPUT_SIZE,
                 input_height=TINY_YOLO_INPUT_SIZE, detection_threshold=0.5, nms_threshold=0.4):
        self.model = model
        self.labels = list(labels) if labels is not None else list(VOC_LABELS)
        self.priors = np.asarray(priors if priors is not None else TINY_YOLO_PRIORS, dtype='float32')
        self.input_width = input_width
        self.input_height = input_height
        self.detection_threshold = detection_threshold
        self.nms_threshold = nms_threshold
        self.last_grid_size = None

    @classmethod
    def from_pretrained(cls, model_path, **kwargs):
        """
        Loads a pretrained Keras model from disk and wraps it in a detector.

        Args:
            model_path (str): Path of a `.keras` or `.h5` model file.
            **kwargs: Forwarded to the constructor.

        Returns:
            TinyYoloDetector: The detector.
        """
        logger.info(f"Loading detection model from {model_path}")
        model = keras.models.load_model(model_path, compile=False)
        return cls(model, **kwargs)

    def preprocess(self, frame):
        """
        Converts a BGR frame into a network input batch.

        Args:
            frame (np.ndarray): BGR image of shape (height, width, 3).

        Returns:
            np.ndarray: float32 batch of shape (1, input_height, input_width, 3) scaled to [0, 1].
        """
        resized = cv2.resize(frame, (self.input_width, self.input_height))
        rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
        return (rgb.astype('float32') / 255.0)[np.newaxis]

    def predict(self, frame):
        """
        Returns the raw output grid of the network for a frame.

        Raises:
            ValueError: If the output does not match the priors and labels.
        """
        output = self.model.predict(self.preprocess(frame), verbose=keras_verbose)[0]

        expected_depth = len(self.priors) * (5 + len(self.labels))
        if output.ndim != 3 or output.shape[-1] != expected_depth:
            raise ValueError(
                f"Model output shape {output.shape} does not match {len(self.priors)} priors and "
                f"{len(self.labels)} classes (expected depth {expected_depth})")

        self.last_grid_size = (output.shape[1], output.shape[0])
        return output

    def detect(self, frame):
        """
        Detects objects in a BGR frame.

        Args:
            frame (np.ndarray): BGR image.

        Returns:
            list: `DetectedObject`s in grid units, after non-max suppression.
        """
        return decode_predictions(self.predict(frame), self.priors, len(self.labels),
                                  self.detection_threshold, self.nms_threshold)

    def grid_size(self):
        """
        Returns (grid_width, grid_height) of the network output.

        The grid of the last prediction wins, since models built on a variable input size only
        declare `None` dimensions.

        Raises:
            ValueError: If the model declares no grid and nothing was predicted yet.
        """
        if self.last_grid_size is not None:
            return self.last_grid_size

        _, grid_height, grid_width, _ = self.model.output_shape
        if grid_width is None or grid_height is None:
            raise ValueError("Model has a variable output grid, run a prediction first or pass the grid size")
        return grid_width, grid_height


def _sigmoid(x):
    return 1 / (1 + np.exp(-x))


def _softmax(x):
    exp = np.exp(x - np.max(x, axis=-1, keepdims=True))
    return exp / np.sum(exp, axis=-1, keepdims=True)


def decode_predictions(output, priors, num_classes, detection_threshold=0.5, nms_threshold=0.4):
    """
    Decodes a raw YOLOv2 output grid into detected objects.

    Args:
        output (np.ndarray): Raw grid of shape (grid_height, grid_width, num_priors * (5 + num_classes)).
        priors (np.ndarray): Anchor boxes of shape (num_priors, 2) in grid units.
        num_classes (int): Number of classes.
        detection_threshold (float): Minimum objectness of a reported box.
        nms_threshold (float): IoU threshold for non-max suppression, None to skip it.

    Returns:
        list: `DetectedObject`s in grid units.
    """
    priors = np.asarray(priors, dtype='float32')
    grid_height, grid_width, _ = output.shape
    grid = np.asarray(output, dtype='float32').reshape(grid_height, grid_width, len(priors), 5 + num_classes)

    columns = np.arange(grid_width).reshape(1, grid_width, 1)
    rows = np.arange(grid_height).reshape(grid_height, 1, 1)

    center_x = columns + _sigmoid(grid[..., 0])
    center_y = rows + _sigmoid(grid[..., 1])
    width = priors[:, 0] * np.exp(grid[..., 2])
    height = priors[:, 1] * np.exp(grid[..., 3])
    confidence = _sigmoid(grid[..., 4])
    class_probabilities = _softmax(grid[..., 5:])

    objects = []
    for row, column, prior in zip(*np.nonzero(confidence >= detection_threshold)):
        probabilities = class_probabilities[row, column, prior]
        objects.append(DetectedObject(
            center_x=float(center_x[row, column, prior]),
            center_y=float(center_y[row, column, prior]),
            width=float(width[row, column, prior]),
            height=float(height[row, column, prior]),
            confidence=float(confidence[row, column, prior]),
            predicted_class=int(np.argmax(probabilities)),
            class_probabilities=probabilities.tolist(),
        ))

    if nms_threshold is not None:
        objects = non_max_suppression(objects, nms_threshold)
    return objects


def non_max_suppression(objects, iou_threshold):
    """
    Drops boxes that overlap a more confident box of the same class.

    Args:
        objects (list): `DetectedObject`s to filter.
        iou_threshold (float): Boxes with a larger IoU against a kept box are removed.

    Returns:
        list: The kept objects, most confident first within each class.
    """
    kept = []
    for predicted_class in sorted({obj.predicted_class for obj in objects}):
        candidates = [obj for obj in objects if obj.predicted_class == predicted_class]
        boxes = [[*obj.top_left_xy()[::-1], *obj.bottom_right_xy()[::-1]] for obj in candidates]
        scores = [obj.confidence for obj in candidates]

        selected = tf.image.non_max_suppression(np.asarray(boxes, dtype='float32'), np.asarray(scores, dtype='float32'),
                                                max_output_size=len(candidates), iou_threshold=iou_threshold)
        kept.extend(candidates[i] for i in selected.numpy())
    return kept


def to_pixel_box(obj, image_width, image_height, grid_width, grid_height):
    """
    Scales a box from grid units to pixel coordinates of the displayed frame.

    Returns:
        tuple: Rounded (x1, y1, x2, y2).
    """
    (x1, y1), (x2, y2) = obj.top_left_xy(), obj.bottom_right_xy()
    return (int(round(image_width * x1 / grid_width)), int(round(image_height * y1 / grid_height)),
            int(round(image_width * x2 / grid_width)), int(round(image_height * y2 / grid_height)))


def annotate_frame(frame, objects, labels, grid_width, grid_height):
    """
    Draws a box and the class label of every detection onto the frame in place.

    Args:
        frame (np.ndarray): BGR image to draw on.
        objects (list): `DetectedObject`s in grid units.
        labels (list): Class names, indexed by class id.
        grid_width (int): Width of the output grid the boxes refer to.
        grid_height (int): Height of the output grid the boxes refer to.

    Returns:
        np.ndarray: The same frame.
    """
    image_height, image_width = frame.shape[:2]
    for obj in objects:
        x1, y1, x2, y2 = to_pixel_box(obj, image_width, image_height, grid_width, grid_height)
        cv2.rectangle(frame, (x1, y1), (x2, y2), BOX_COLOR, 2)
        cv2.putText(frame, labels[obj.predicted_class], (x1 + 2, y2 - 2), cv2.FONT_HERSHEY_DUPLEX, 1, LABEL_COLOR)
    return frame
