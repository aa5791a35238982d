"""
Core utilities shared across stream producers and consumers.
"""

from .logger import level_from_env, setup_logging

__all__ = ["level_from_env", "setup_logging"]
