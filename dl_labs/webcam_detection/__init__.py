# SPDX-FileCopyrightText: 2025 Jonathan Feilmeier
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
This package runs a pretrained Tiny-YOLO network (Pascal VOC, 20 classes) on a camera stream.

Every frame is mirrored for front cameras, resized to the network input, decoded into bounding boxes,
filtered by confidence and non-max suppression and annotated with boxes and class labels. Annotated
frames can be written to a video file and detection counts logged to Weights & Biases.
"""
