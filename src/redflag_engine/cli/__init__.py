"""
CLI module for red-flag scoring.

Provides the ``redflag-score`` command for batch scoring from JSON files.
"""

from .score import main as score_main

__all__ = ["score_main"]
