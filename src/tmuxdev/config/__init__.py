"""Configuration management module."""

from .loader import LaunchMode, TmuxdevConfig, find_config_file, load_config

__all__ = ["LaunchMode", "TmuxdevConfig", "load_config", "find_config_file"]
