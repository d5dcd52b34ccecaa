"""Recorder component - captures steps and their selectors."""
from .selector_generator import SelectorStrategyGenerator
from .step_recorder import StepRecorder, RecordedStep

__all__ = [
    "SelectorStrategyGenerator",
    "StepRecorder",
    "RecordedStep",
]
