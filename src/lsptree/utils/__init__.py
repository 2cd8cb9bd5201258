"""Utility module for lsptree."""

from .cli_utils import console, exit_with_error, loading_spinner
from .config_loader import ConfigError, ConfigLoader
from .log_setup import setup_logging

__all__ = [
	"ConfigError",
	"ConfigLoader",
	"console",
	"exit_with_error",
	"loading_spinner",
	"setup_logging",
]
