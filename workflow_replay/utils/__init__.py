"""Shared utilities."""
from .config import config, Config
from .logger import setup_logger, StepLogger
from .timing import TimingModel
from .variables import VariableResolver, VariableResolution, has_placeholders

__all__ = [
    "config",
    "Config",
    "setup_logger",
    "StepLogger",
    # Pacing
    "TimingModel",
    # Templates
    "VariableResolver",
    "VariableResolution",
    "has_placeholders",
]
