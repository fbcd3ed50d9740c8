"""Configuration module for the Salesforce proxy."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
