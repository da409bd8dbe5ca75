"""Core types shared by every layer."""

from .config import ConfigError, PluginSpec, ReleaseConfig, load_release_config
from .errors import ErrorCode
from .result import Err, Ok, Result
from .template import TemplateError, render

__all__ = [
    # config
    "ConfigError",
    "PluginSpec",
    "ReleaseConfig",
    "load_release_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    # template
    "TemplateError",
    "render",
]
