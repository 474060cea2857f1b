"""
Exception types raised by PhotoSweep.
"""


class PhotoSweepError(Exception):
    """Base exception for PhotoSweep."""
    pass


class SignatureError(PhotoSweepError):
    """Raised when a signature cannot be generated from photo metadata."""
    pass


class MetadataError(PhotoSweepError):
    """Raised when photo metadata records cannot be read or parsed."""
    pass


class ConfigError(PhotoSweepError):
    """Raised when a configuration value has the wrong type."""
    pass
