from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from workflow_replay.models.selector_set import SelectorSet, SelectorStrategy, StrategyType
from workflow_replay.storage.file_store import FileStore
from workflow_replay.storage.workflow_store import WorkflowStore
from workflow_replay.utils.timing import TimingModel


class FakeElement:
    def __init__(self, name: str, text: str = "") -> None:
        self.name = name
        self.text = text

    def __repr__(self) -> str:
        return f"<FakeElement {self.name}>"


class FakePageDriver:
    """In-memory page: selectors map straight to elements, every call is recorded."""

    def __init__(self) -> None:
        self.selectors: Dict[str, FakeElement] = {}
        self.xpaths: Dict[str, FakeElement] = {}
        self.raising: set = set()
        self.calls: List[tuple] = []
        self.typed: List[str] = []
        self.uploaded: List[bytes] = []
        self.screenshot_bytes = b"\x89PNG fake"
        self.candidates: List[Dict[str, Any]] = []
        self.accessibility: Dict[str, str] = {}
        self.navigate_error: Optional[Exception] = None
        self.set_input_files_error: Optional[Exception] = None
        self.file_chooser_error: Optional[Exception] = None

    def query_selector(self, selector: str) -> Optional[FakeElement]:
        self.calls.append(("query_selector", selector))
        if selector in self.raising:
            raise RuntimeError(f"invalid selector {selector}")
        return self.selectors.get(selector)

    def query_xpath(self, xpath: str) -> Optional[FakeElement]:
        self.calls.append(("query_xpath", xpath))
        if xpath in self.raising:
            raise RuntimeError(f"invalid xpath {xpath}")
        return self.xpaths.get(xpath)

    def hover(self, element: Any) -> None:
        self.calls.append(("hover", element))

    def click(self, element: Any) -> None:
        self.calls.append(("click", element))

    def type_character(self, char: str) -> None:
        self.typed.append(char)

    def text_content(self, element: Any) -> str:
        return element.text

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", expression))
        return None

    def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))
        if self.navigate_error:
            raise self.navigate_error

    def scroll_by(self, delta_y: int, element: Any = None) -> None:
        self.calls.append(("scroll_by", delta_y, element))

    def screenshot(self) -> bytes:
        self.calls.append(("screenshot",))
        return self.screenshot_bytes

    def set_input_files(self, element: Any, path: Path) -> None:
        self.calls.append(("set_input_files", element, path))
        self.uploaded.append(path.read_bytes())
        if self.set_input_files_error:
            raise self.set_input_files_error

    def upload_via_file_chooser(self, element: Any, path: Path) -> None:
        self.calls.append(("upload_via_file_chooser", element, path))
        if self.file_chooser_error:
            raise self.file_chooser_error

    def extract_selector_candidates(self, element: Any) -> List[Dict[str, Any]]:
        return self.candidates

    def describe_accessibility(self, element: Any) -> Dict[str, str]:
        return self.accessibility

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


class CenteredTiming(TimingModel):
    """Every delay lands exactly on its mean and sleeps are recorded, not slept."""

    MICRO_PAUSE_PROBABILITY = 0.0

    def __init__(self) -> None:
        self.sleeps: List[float] = []
        super().__init__(rng=random.Random(0), sleep_fn=self.sleeps.append)

    def gaussian(self) -> float:
        return 0.0


def make_selector_set(*specs: tuple) -> SelectorSet:
    """make_selector_set(("id", "#a", 1), ("xpath", "//a", 10), ...)"""
    return SelectorSet.from_strategies(
        [SelectorStrategy(type=StrategyType(t), value=v, priority=p) for t, v, p in specs]
    )


@pytest.fixture
def driver() -> FakePageDriver:
    return FakePageDriver()


@pytest.fixture
def store(tmp_path: Path) -> WorkflowStore:
    return WorkflowStore(tmp_path / "workflows")


@pytest.fixture
def file_store(tmp_path: Path) -> FileStore:
    return FileStore(output_dir=tmp_path / "screenshots", temp_dir=tmp_path / "uploads")


@pytest.fixture
def timing() -> CenteredTiming:
    return CenteredTiming()
