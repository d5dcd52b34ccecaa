"""Recording of workflow steps against a live page."""
from dataclasses import dataclass, field
from typing import Any, List, Optional

from workflow_replay.errors import ValidationError
from workflow_replay.executor.actions import parse_action, requires_element
from workflow_replay.models.workflow import WorkflowStep
from workflow_replay.recorder.selector_generator import SelectorStrategyGenerator
from workflow_replay.storage.workflow_store import WorkflowStore
from workflow_replay.utils.logger import setup_logger


@dataclass
class RecordedStep:
    """Result of recording one step."""
    step: WorkflowStep
    created: bool
    lines: List[str] = field(default_factory=list)


class StepRecorder:
    """
    Adds or updates workflow steps.

    Steps are keyed by (workflow_id, order): recording the same order twice
    replaces the earlier step instead of adding a second one.
    """

    def __init__(self, store: WorkflowStore, generator: SelectorStrategyGenerator):
        self.store = store
        self.generator = generator
        self.logger = setup_logger("StepRecorder")

    def record_step(
        self,
        workflow_id: int,
        action: str,
        element: Optional[Any] = None,
        action_value: Optional[str] = None,
        description: Optional[str] = None,
        order: Optional[int] = None
    ) -> RecordedStep:
        """
        Record a step.

        Args:
            workflow_id: Workflow to add the step to
            action: Action tag (click, type, ...)
            element: Live element the action targets, optional for actions
                     that don't need one (wait, nav, screenshot, ...)
            action_value: Text to type, URL, wait duration, ...
            description: What this step does
            order: Position in the workflow; appended after the last step if omitted

        Returns:
            RecordedStep with the stored step and transcript lines
        """
        parse_action(action)

        if element is None and requires_element(action):
            raise ValidationError(f"{action} step needs a target element")

        selector_set = self.generator.generate(element) if element is not None else None

        if order is None:
            order = self.store.next_order(workflow_id)
        if order < 1:
            raise ValidationError(f"Step order must be 1 or greater, got {order}")

        step, created = self.store.upsert_step(
            workflow_id=workflow_id,
            order=order,
            action=action,
            action_value=action_value,
            description=description,
            selector_set=selector_set,
        )

        if created:
            lines = [f"Successfully added step {order} to workflow {workflow_id}"]
        else:
            lines = [f"Successfully updated step {order} in workflow {workflow_id}"]
        lines.append(f"Action: {step.action}")
        if selector_set is not None:
            lines.append(f"Best selector: {selector_set.best_selector}")
            lines.append(f"Selector strategies count: {len(selector_set.strategies)}")

        self.logger.info(lines[0])
        return RecordedStep(step=step, created=created, lines=lines)
