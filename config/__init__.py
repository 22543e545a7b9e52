"""Configuration package for the interview pipeline service."""
from .registry import (
    EVALUATION_KEY,
    MODEL_KEYS,
    QUESTION_KEY,
    TONE_KEY,
    ModelInvoker,
    bind_model,
    clear_models,
    get_model,
)
from .routing import AppConfig, LlmRoute, load_config, resolve_registry, resolve_route
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "resolve_registry",
    "resolve_route",
    "EVALUATION_KEY",
    "MODEL_KEYS",
    "QUESTION_KEY",
    "TONE_KEY",
    "ModelInvoker",
    "bind_model",
    "clear_models",
    "get_model",
    "Settings",
    "settings",
]
