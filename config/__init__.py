"""Configuration package for the interview session engine."""
from .registry import EVALUATION_KEY, QUESTION_KEY, bind_model, get_model
from .routes import AppConfig, LlmRoute, load_app_registry, load_config, resolve_registry
from .scoring import ScoringTables, load_tables, reset_tables, scoring_tables
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_app_registry",
    "load_config",
    "resolve_registry",
    "EVALUATION_KEY",
    "QUESTION_KEY",
    "bind_model",
    "get_model",
    "ScoringTables",
    "load_tables",
    "reset_tables",
    "scoring_tables",
    "Settings",
    "settings",
]
