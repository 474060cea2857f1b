"""
PhotoSweep utilities module.
"""

from .logging import ScanStats, setup_console_logging

__all__ = [
    'ScanStats',
    'setup_console_logging'
]
