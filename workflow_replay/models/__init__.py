from .selector_set import StrategyType, SelectorStrategy, ElementMetadata, SelectorSet
from .workflow import ActionType, WorkflowStep, Workflow, format_workflow_listing

__all__ = [
    # Selectors
    "StrategyType",
    "SelectorStrategy",
    "ElementMetadata",
    "SelectorSet",
    # Workflows
    "ActionType",
    "WorkflowStep",
    "Workflow",
    "format_workflow_listing",
]
