"""File-backed store for workflows and their steps."""
import threading
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from workflow_replay.errors import StorageError
from workflow_replay.models.selector_set import SelectorSet
from workflow_replay.models.workflow import Workflow, WorkflowStep
from workflow_replay.utils.config import config
from workflow_replay.utils.logger import setup_logger


class WorkflowStore:
    """
    Persists each workflow (with its steps) as one JSON file.

    Read and write problems raise StorageError; an unknown workflow or an
    empty step list is not an error.

    Usage:
        store = WorkflowStore()
        workflow = store.create_workflow("Login flow", website_url="https://example.com")
        store.upsert_step(workflow.id, 1, "nav", "https://example.com")
        steps = store.list_steps(workflow.id)
    """

    FILE_PATTERN = "workflow_*.json"

    def __init__(self, root: Optional[Path] = None):
        """
        Args:
            root: Directory holding workflow files. Defaults to artifacts/workflows/
        """
        self.root = Path(root) if root else config.workflows_dir
        self.logger = setup_logger("WorkflowStore")
        self._lock = threading.Lock()

    # =========================================================================
    # WORKFLOWS
    # =========================================================================

    def create_workflow(
        self,
        title: str,
        website_url: Optional[str] = None,
        description: Optional[str] = None,
        success_criteria: Optional[str] = None
    ) -> Workflow:
        """Create a draft workflow with a fresh id."""
        with self._lock:
            ids = [w.id for w in self._load_all()]
            workflow = Workflow(
                id=max(ids, default=0) + 1,
                title=title,
                website_url=website_url,
                description=description,
                success_criteria=success_criteria,
            )
            self._save(workflow)

        self.logger.info(f"Created workflow \"{workflow.title}\" (ID: {workflow.id})")
        return workflow

    def get_workflow(self, workflow_id: int) -> Optional[Workflow]:
        """Load one workflow, None if it does not exist."""
        path = self._path(workflow_id)
        if not path.exists():
            return None
        return self._load(path)

    def list_workflows(self) -> List[Workflow]:
        """All workflows, newest first."""
        workflows = self._load_all()
        return sorted(workflows, key=lambda w: (w.created_at, w.id), reverse=True)

    # =========================================================================
    # STEPS
    # =========================================================================

    def list_steps(self, workflow_id: int, order: Optional[int] = None) -> List[WorkflowStep]:
        """
        Steps of a workflow in ascending order.

        Args:
            workflow_id: Workflow to read
            order: Restrict to the step with this order

        Returns:
            Matching steps, empty if the workflow or step does not exist
        """
        workflow = self.get_workflow(workflow_id)
        if workflow is None:
            return []

        steps = workflow.sorted_steps()
        if order is not None:
            steps = [s for s in steps if s.order == order]
        return steps

    def next_order(self, workflow_id: int) -> int:
        """Order for a step appended after the current last one."""
        workflow = self.get_workflow(workflow_id)
        return workflow.next_order() if workflow else 1

    def upsert_step(
        self,
        workflow_id: int,
        order: int,
        action: str,
        action_value: Optional[str] = None,
        description: Optional[str] = None,
        selector_set: Optional[SelectorSet] = None
    ) -> Tuple[WorkflowStep, bool]:
        """
        Insert a step, or update the one already at (workflow_id, order).

        Returns:
            (step, created) where created is False for an update
        """
        with self._lock:
            workflow = self.get_workflow(workflow_id)
            if workflow is None:
                raise StorageError(f"Workflow {workflow_id} does not exist")

            existing = workflow.get_step(order)
            if existing is not None:
                step = existing.model_copy(update={
                    "action": action,
                    "action_value": action_value,
                    "description": description,
                    "selector_set": selector_set,
                })
                workflow.steps = [step if s.order == order else s for s in workflow.steps]
                created = False
            else:
                step_ids = [s.id for w in self._load_all() for s in w.steps]
                step = WorkflowStep(
                    id=max(step_ids, default=0) + 1,
                    workflow_id=workflow_id,
                    order=order,
                    action=action,
                    action_value=action_value,
                    description=description,
                    selector_set=selector_set,
                )
                workflow.steps.append(step)
                created = True

            self._save(workflow)

        verb = "Added" if created else "Updated"
        self.logger.debug(f"{verb} step {order} ({action}) in workflow {workflow_id}")
        return step, created

    # =========================================================================
    # FILES
    # =========================================================================

    def _path(self, workflow_id: int) -> Path:
        return self.root / f"workflow_{workflow_id}.json"

    def _load(self, path: Path) -> Workflow:
        try:
            with open(path) as f:
                return Workflow.model_validate_json(f.read())
        except (OSError, PydanticValidationError) as e:
            raise StorageError(f"Failed to read workflow file {path.name}: {e}") from e

    def _load_all(self) -> List[Workflow]:
        if not self.root.exists():
            return []
        return [self._load(path) for path in sorted(self.root.glob(self.FILE_PATTERN))]

    def _save(self, workflow: Workflow):
        path = self._path(workflow.id)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w') as f:
                f.write(workflow.model_dump_json(indent=2, by_alias=True))
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to write workflow {workflow.id}: {e}") from e
