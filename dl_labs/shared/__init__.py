"""
This module contains shared functionalities used by the labs. It includes the GAN networks and
their weight synchronisation, the MNIST batch iterator, the Tiny-YOLO decoder, the GAN training
loop and logging helpers.
"""
