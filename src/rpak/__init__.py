"""
rpak - project dependency manager for R
"""

__version__ = "0.1.0"
