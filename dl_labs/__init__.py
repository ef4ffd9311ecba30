"""
Package implementing the deep-learning lab programs and their shared building blocks.

Sub-Packages:
- `dl_labs.mnist_gan`: GAN that learns to generate handwritten digits from MNIST.
- `dl_labs.webcam_detection`: Tiny-YOLO object detection on a camera stream.
- `dl_labs.scripts`: Batch runner for parameter sweeps over the labs.
- `dl_labs.shared`: Networks, weight synchronisation, data loading, detection decoding and logging helpers.
"""
