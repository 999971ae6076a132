"""Core domain types: results, exit codes and configuration."""

from .config import Config, ConfigError, load_config, load_config_or_default, resolve_token
from .errors import ErrorCode, exit_code_for
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    "resolve_token",
    # errors
    "ErrorCode",
    "exit_code_for",
    # result
    "Err",
    "Ok",
    "Result",
]
