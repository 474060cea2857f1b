"""
PhotoSweep CLI command groups.
"""
