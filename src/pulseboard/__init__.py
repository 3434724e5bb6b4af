"""Pulseboard: social posts with likes, comments and real-time notifications."""

__version__ = "0.1.0"
