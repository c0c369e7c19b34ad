"""Album share service: upload images, share them by link and QR code."""

__version__ = "1.0.0"
