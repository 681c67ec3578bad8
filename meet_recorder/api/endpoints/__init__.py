"""
API endpoints module.
"""

from . import recording, health

__all__ = ["recording", "health"]
