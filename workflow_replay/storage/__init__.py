"""Storage collaborators - workflows and artifact files."""
from .workflow_store import WorkflowStore
from .file_store import FileStore

__all__ = [
    "WorkflowStore",
    "FileStore",
]
