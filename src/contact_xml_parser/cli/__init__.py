"""Command-line interface module for Contact XML Parser.

This module provides the ``contact-xml`` tool for parsing and validating
contact XML files in batches.
"""

from .main import main

__all__ = ["main"]
