"""Executor component - replays workflows."""
from .page_driver import PageDriver, PlaywrightPageDriver
from .element_resolver import ElementResolver, ResolvedElement
from .actions import ActionContract, ACTION_CONTRACTS, validate_step
from .workflow_executor import (
    WorkflowExecutor,
    ExecutionResult,
    RunReport,
    RunState,
    RunSummary,
)
from .browser_session import BrowserSession

__all__ = [
    "PageDriver",
    "PlaywrightPageDriver",
    "ElementResolver",
    "ResolvedElement",
    "ActionContract",
    "ACTION_CONTRACTS",
    "validate_step",
    "WorkflowExecutor",
    "ExecutionResult",
    "RunReport",
    "RunState",
    "RunSummary",
    "BrowserSession",
]
