"""
Utils Package - Common utilities
"""
from .logger import setup_logger
from .load_config import load_config

__all__ = ["setup_logger", "load_config"]
