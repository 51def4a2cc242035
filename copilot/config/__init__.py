"""Configuration module for the Northern Mountains copilot."""
from .settings import Settings, settings, get_model_cost

__all__ = ["Settings", "settings", "get_model_cost"]
