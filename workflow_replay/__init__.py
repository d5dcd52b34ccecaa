"""Record browser workflows and replay them resiliently."""

__version__ = "0.1.0"
