"""Workflow and WorkflowStep - Recorded, replayable UI action sequences."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from workflow_replay.models.selector_set import SelectorSet


class ActionType(str, Enum):
    """Actions a workflow step can perform."""
    CLICK = "click"
    TYPE = "type"
    WAIT = "wait"
    SCROLL = "scroll"
    NAV = "nav"
    HOVER = "hover"
    EXTRACT = "extract"
    SCREENSHOT = "screenshot"
    UPLOAD_IMAGE = "upload_image"

    @classmethod
    def parse(cls, value: str) -> Optional["ActionType"]:
        """Look up an action tag, None if it is not one we know."""
        try:
            return cls(value)
        except ValueError:
            return None


class WorkflowStep(BaseModel):
    """
    A single recorded step.

    The action is kept as the raw tag so a step written by a newer (or
    broken) recorder still loads; the executor rejects unknown tags when it
    reaches them.
    """

    id: int
    workflow_id: int
    order: int = Field(ge=1)
    action: str
    action_value: Optional[str] = None
    description: Optional[str] = None
    selector_set: Optional[SelectorSet] = None

    def describe(self) -> str:
        """One-line listing, e.g. '2. click: Submit form (...)'."""
        return f"{self.order}. {self.action}: {self.description or ''} ({self.action_value or ''})"


class Workflow(BaseModel):
    """A workflow and the steps it owns."""

    id: int
    title: str
    website_url: Optional[str] = None
    description: Optional[str] = None
    success_criteria: Optional[str] = None
    status: str = "draft"
    created_at: datetime = Field(default_factory=datetime.now)
    steps: List[WorkflowStep] = Field(default_factory=list)

    def sorted_steps(self) -> List[WorkflowStep]:
        return sorted(self.steps, key=lambda s: s.order)

    def get_step(self, order: int) -> Optional[WorkflowStep]:
        for step in self.steps:
            if step.order == order:
                return step
        return None

    def next_order(self) -> int:
        """Order for a step appended at the end."""
        return max((s.order for s in self.steps), default=0) + 1


def format_workflow_listing(workflows: List[Workflow]) -> List[str]:
    """Render workflows and their steps as transcript lines."""
    if not workflows:
        return ["No workflows found."]

    lines = []
    for workflow in workflows:
        lines.append(f"Workflow: {workflow.title} (ID: {workflow.id})")
        lines.append(f"  Status: {workflow.status}")
        if workflow.website_url:
            lines.append(f"  URL: {workflow.website_url}")
        if workflow.description:
            lines.append(f"  Description: {workflow.description}")
        if workflow.success_criteria:
            lines.append(f"  Success Criteria: {workflow.success_criteria}")

        if workflow.steps:
            lines.append("  Steps:")
            for step in workflow.sorted_steps():
                lines.append(f"    {step.describe()}")
        else:
            lines.append("  No steps defined for this workflow.")
        lines.append("---")

    return lines
