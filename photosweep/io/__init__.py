"""
File input/output for the PhotoSweep CLI.
"""
