"""
Red-flag engine: heuristic email triage.

Scores messages for urgency from four independent signals (keywords, VIP
senders, thread velocity, calendar proximity), clusters them into topics and
assembles ranked briefings.
"""

from .version import API_VERSION as __version__

__all__ = ["__version__"]
