"""Configuration package for the interview evaluation service."""
from .registry import EVALUATOR_KEY, bind_model, clear_models, get_model, is_bound
from .routes import AppConfig, ProviderRoute, load_config, load_route, resolve_route
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "ProviderRoute",
    "load_config",
    "load_route",
    "resolve_route",
    "EVALUATOR_KEY",
    "bind_model",
    "clear_models",
    "get_model",
    "is_bound",
    "Settings",
    "settings",
]
