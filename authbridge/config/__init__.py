"""Configuration module for the authbridge service."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
