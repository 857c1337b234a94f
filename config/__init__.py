"""Configuration package for the practice coaching service."""
from .registry import COACH_KEY, SUMMARY_KEY, bind_model, get_model, is_bound
from .routes import AppConfig, LlmRoute, load_app_registry, load_config, resolve_registry
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_app_registry",
    "load_config",
    "resolve_registry",
    "COACH_KEY",
    "SUMMARY_KEY",
    "bind_model",
    "get_model",
    "is_bound",
    "Settings",
    "settings",
]
