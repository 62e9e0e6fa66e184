"""
Utility Package.

Contains console and logging helpers.
"""
