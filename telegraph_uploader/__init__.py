"""Batch-upload images and publish them as a Telegraph page."""

__version__ = "0.1.0"
