"""Main workflow executor - replays recorded steps with human-like pacing."""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple

import httpx

from workflow_replay.errors import ActionError
from workflow_replay.executor.actions import validate_step
from workflow_replay.executor.element_resolver import ElementResolver, ResolvedElement
from workflow_replay.executor.page_driver import PageDriver
from workflow_replay.models.workflow import ActionType, WorkflowStep
from workflow_replay.storage.file_store import FileStore
from workflow_replay.storage.workflow_store import WorkflowStore
from workflow_replay.utils.config import config
from workflow_replay.utils.logger import setup_logger, StepLogger
from workflow_replay.utils.timing import TimingModel
from workflow_replay.utils.variables import VariableResolver, has_placeholders


DEFAULT_WAIT_MS = 1000
DEFAULT_SCROLL_PX = 300
SCROLL_INCREMENT_PX = 100


class RunState(str, Enum):
    """Where the executor is in a run."""
    IDLE = "idle"
    RUNNING = "running"
    STEP_SUCCEEDED = "step_succeeded"
    STEP_FAILED = "step_failed"
    SUMMARIZED = "summarized"


@dataclass
class ExecutionResult:
    """Outcome of one executed step."""
    step_order: int
    action: str
    success: bool
    detail: str = ""


@dataclass
class RunSummary:
    """Aggregate counts for a run."""
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    timed_out: bool = False


@dataclass
class RunReport:
    """Everything a run produced: per-step results, counts and a transcript."""
    workflow_id: int
    results: List[ExecutionResult] = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)
    lines: List[str] = field(default_factory=list)
    dummy_variables: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.summary.failed == 0 and not self.summary.timed_out

    def add_line(self, line: str):
        self.lines.append(line)

    def transcript(self) -> str:
        return "\n".join(self.lines)


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def scroll_increments(delta: int, increment: int = SCROLL_INCREMENT_PX) -> Iterator[int]:
    """Split a pixel delta into chunks of at most `increment`, keeping the sign."""
    sign = -1 if delta < 0 else 1
    remaining = abs(delta)
    while remaining > 0:
        chunk = min(increment, remaining)
        yield sign * chunk
        remaining -= chunk


class WorkflowExecutor:
    """
    Replays a stored workflow step by step.

    Steps run strictly in ascending order. A failing step is recorded and
    the run moves on to the next one; only failing to load the steps at all
    aborts a run.

    Per step:
    - Thinking pause before acting
    - {{ variable }} substitution in the step value (dummy data if unbound)
    - Contract check (required value / element), then action dispatch
    - Post-action pause, on success only
    """

    def __init__(
        self,
        store: WorkflowStore,
        driver: PageDriver,
        file_store: Optional[FileStore] = None,
        timing: Optional[TimingModel] = None,
        variable_resolver: Optional[VariableResolver] = None,
        http_client: Optional[httpx.Client] = None,
        run_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize executor.

        Args:
            store: Source of workflow steps
            driver: Page driver, used exclusively by this executor during a run
            file_store: Where screenshots and downloaded uploads go
            timing: Human-like delay source
            variable_resolver: Placeholder substitution
            http_client: Client for upload_image downloads
            run_timeout: Seconds after which remaining steps are skipped
            clock: Monotonic clock for the run deadline
        """
        self.store = store
        self.driver = driver
        self.file_store = file_store or FileStore()
        self.timing = timing or TimingModel()
        self.variable_resolver = variable_resolver or VariableResolver()
        # Only a client created here is closed by close()
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.Client(
            follow_redirects=True, timeout=config.step_timeout
        )
        self.run_timeout = run_timeout if run_timeout is not None else config.run_timeout
        self.clock = clock

        self.resolver = ElementResolver(driver)
        self.logger = setup_logger("WorkflowExecutor")
        self.state = RunState.IDLE

        self._handlers: Dict[ActionType, Callable[..., str]] = {
            ActionType.CLICK: self._execute_click,
            ActionType.TYPE: self._execute_type,
            ActionType.WAIT: self._execute_wait,
            ActionType.SCROLL: self._execute_scroll,
            ActionType.NAV: self._execute_nav,
            ActionType.HOVER: self._execute_hover,
            ActionType.EXTRACT: self._execute_extract,
            ActionType.SCREENSHOT: self._execute_screenshot,
            ActionType.UPLOAD_IMAGE: self._execute_upload_image,
        }

    def run(
        self,
        workflow_id: int,
        order: Optional[int] = None,
        variables: Optional[Mapping[str, str]] = None
    ) -> RunReport:
        """
        Execute a workflow.

        Args:
            workflow_id: Workflow to replay
            order: Only run the step with this order
            variables: Values for {{ name }} placeholders

        Returns:
            RunReport with per-step results and summary

        Raises:
            StorageError: if the steps cannot be loaded (nothing is executed)
        """
        start_time = time.time()
        report = RunReport(workflow_id=workflow_id)

        steps = self.store.list_steps(workflow_id, order)

        if not steps:
            target = f"step {order} of workflow {workflow_id}" if order is not None else f"workflow {workflow_id}"
            report.add_line(f"No steps found for {target}.")
            self.logger.warning(report.lines[-1])
            self._transition(RunState.SUMMARIZED)
            return report

        self.logger.info("=" * 60)
        self.logger.info(f"Executing workflow {workflow_id} ({len(steps)} steps)")
        self.logger.info("=" * 60)
        report.add_line(f"Executing workflow {workflow_id} with {len(steps)} step(s)")

        deadline = self.clock() + self.run_timeout if self.run_timeout else None
        report.summary.total = len(steps)

        for index, step in enumerate(steps):
            if deadline is not None and self.clock() >= deadline:
                remaining = len(steps) - index
                report.summary.skipped = remaining
                report.summary.timed_out = True
                report.add_line(
                    f"Run timeout of {self.run_timeout}s exceeded, skipping {remaining} remaining step(s)"
                )
                self.logger.error(report.lines[-1])
                break

            self._transition(RunState.RUNNING)
            result = self.execute_step(step, variables or {}, report)
            report.results.append(result)

            if result.success:
                report.summary.succeeded += 1
                self._transition(RunState.STEP_SUCCEEDED)
                self.timing.sleep(self.timing.post_action_delay())
            else:
                report.summary.failed += 1
                self._transition(RunState.STEP_FAILED)

        self._transition(RunState.SUMMARIZED)
        report.duration_seconds = time.time() - start_time

        summary = report.summary
        report.add_line(
            f"Execution complete: {summary.total} total, {summary.succeeded} succeeded, "
            f"{summary.failed} failed" + (f", {summary.skipped} skipped" if summary.skipped else "")
        )
        self.logger.info(report.lines[-1] + f" ({report.duration_seconds:.1f}s)")

        return report

    def execute_step(
        self,
        step: WorkflowStep,
        variables: Mapping[str, str],
        report: RunReport
    ) -> ExecutionResult:
        """
        Execute one step, converting any failure into a failed result.

        Args:
            step: Step to execute
            variables: Placeholder values
            report: Run report receiving transcript lines

        Returns:
            ExecutionResult for the step
        """
        prefix = f"Step {step.order} ({step.action})"
        self.timing.sleep(self.timing.thinking_delay())

        try:
            with StepLogger(self.logger, step.description or step.action, step.order):
                value = self._resolve_value(step, variables, report)
                action_type = validate_step(step.action, value, step.selector_set)
                detail = self._handlers[action_type](step, value, report)
        except Exception as e:
            report.add_line(f"{prefix}: ✗ {e}")
            return ExecutionResult(step.order, step.action, success=False, detail=str(e))

        report.add_line(f"{prefix}: ✓ {detail}")
        return ExecutionResult(step.order, step.action, success=True, detail=detail)

    def _resolve_value(
        self,
        step: WorkflowStep,
        variables: Mapping[str, str],
        report: RunReport
    ) -> Optional[str]:
        if not has_placeholders(step.action_value):
            return step.action_value

        resolution = self.variable_resolver.resolve(step.action_value, variables)
        if resolution.used_dummy:
            names = ", ".join(resolution.used_dummy)
            report.add_line(f"  Step {step.order}: no value for {names}, using dummy data")
            self.logger.warning(f"  Using dummy values for: {names}")
            for name in resolution.used_dummy:
                if name not in report.dummy_variables:
                    report.dummy_variables.append(name)
        return resolution.value

    def _transition(self, state: RunState):
        self.logger.debug(f"State: {self.state.value} → {state.value}")
        self.state = state

    def _resolve(self, step: WorkflowStep) -> ResolvedElement:
        return self.resolver.require(step.selector_set.strategies)

    # =========================================================================
    # ACTIONS
    # Each handler returns a short success detail or raises.
    # =========================================================================

    def _execute_click(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        resolved = self._resolve(step)
        self.driver.hover(resolved.element)
        self.timing.pause(120, 0.3)
        self.driver.click(resolved.element)
        return f"Clicked element via {resolved.strategy.describe()}"

    def _execute_type(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        target = "focused element"
        if step.selector_set and step.selector_set.strategies:
            resolved = self.resolver.resolve(step.selector_set.strategies)
            if resolved.found:
                self.driver.click(resolved.element)
                target = f"element via {resolved.strategy.describe()}"
            else:
                self.logger.warning("  Could not resolve element to focus, typing into active element")

        self._human_type(value)
        return f"Typed {len(value)} characters into {target}"

    def _human_type(self, text: str):
        """Type text one character at a time with human-like gaps."""
        for char in text:
            self.timing.sleep(self.timing.typing_delay())
            self.driver.type_character(char)
            self.timing.sleep(self.timing.micro_pause())

    def _execute_wait(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        wait_ms = _parse_int(value, DEFAULT_WAIT_MS)
        slept = self.timing.pause(wait_ms, 0.15)
        return f"Waited {slept}ms"

    def _execute_scroll(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        delta = _parse_int(value, DEFAULT_SCROLL_PX)

        target = None
        if step.selector_set and step.selector_set.strategies:
            resolved = self.resolver.resolve(step.selector_set.strategies)
            target = resolved.element

        increments = list(scroll_increments(delta))
        for i, increment in enumerate(increments):
            if i > 0:
                self.timing.pause(80, 0.4)
            self.driver.scroll_by(increment, target)

        where = "element" if target is not None else "page"
        return f"Scrolled {where} by {delta}px in {len(increments)} increment(s)"

    def _execute_nav(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        try:
            self.driver.navigate(value)
        except Exception as e:
            raise ActionError(f"Navigation to {value} failed: {e}") from e
        self.timing.pause(800, 0.3)
        return f"Navigated to {value}"

    def _execute_hover(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        resolved = self._resolve(step)
        self.driver.hover(resolved.element)
        self.timing.pause(400, 0.3)
        return f"Hovered element via {resolved.strategy.describe()}"

    def _execute_extract(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        resolved = self._resolve(step)
        text = (self.driver.text_content(resolved.element) or "").strip()
        report.add_line(f"  Step {step.order}: extracted text: {text[:100]}")
        return f"Extracted: {text[:50]}"

    def _execute_screenshot(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        filename = value or f"workflow_{step.workflow_id}_step_{step.order}.png"
        data = self.driver.screenshot()
        path = self.file_store.save_file(data, filename)
        return f"Saved screenshot to {path}"

    def _execute_upload_image(self, step: WorkflowStep, value: Optional[str], report: RunReport) -> str:
        resolved = self._resolve(step)
        data, mime_type = self._download(value)
        path = self.file_store.save_temporary_file(data, mime_type)

        try:
            try:
                self.driver.set_input_files(resolved.element, path)
                return f"Uploaded image to element via {resolved.strategy.describe()}"
            except Exception as direct_error:
                self.logger.debug(f"  Direct file assignment failed: {direct_error}, trying file chooser")
                try:
                    self.driver.upload_via_file_chooser(resolved.element, path)
                except Exception as chooser_error:
                    raise ActionError(
                        f"Failed to upload image: direct assignment failed ({direct_error}); "
                        f"file chooser failed ({chooser_error})"
                    ) from chooser_error

            return f"Uploaded image via file chooser on {resolved.strategy.describe()}"
        finally:
            self.file_store.remove(path)

    def _download(self, url: str) -> Tuple[bytes, Optional[str]]:
        try:
            response = self.http_client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ActionError(f"Failed to download image from {url}: {e}") from e

        mime_type = response.headers.get("content-type")
        self.logger.debug(f"  Downloaded {len(response.content)} bytes ({mime_type})")
        return response.content, mime_type

    def close(self):
        """Release the download client if this executor created it."""
        if self._owns_http_client:
            self.http_client.close()
