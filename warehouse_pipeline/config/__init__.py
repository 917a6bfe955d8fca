"""
Configuration module
"""

from .config_loader import ConfigLoader
