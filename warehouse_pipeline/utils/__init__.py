"""
Utilities module
"""

from .logging import LoggingManager
