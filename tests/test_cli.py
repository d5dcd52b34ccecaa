from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import FakePageDriver
from workflow_replay.cli import record, workflows
from workflow_replay.cli.replay import load_variables
from workflow_replay.storage.workflow_store import WorkflowStore
from workflow_replay.executor.browser_session import BrowserSession
from workflow_replay.utils.config import Config, config


def test_create_and_list_workflows(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    store_dir = tmp_path / "workflows"

    workflows.main(["--store-dir", str(store_dir), "create", "--title", "Checkout", "--website-url", "https://shop.example.com"])
    assert 'Successfully created workflow "Checkout" (ID: 1)' in capsys.readouterr().out

    WorkflowStore(store_dir).upsert_step(1, 1, "nav", "https://shop.example.com")

    workflows.main(["--store-dir", str(store_dir), "list"])
    out = capsys.readouterr().out
    assert "Workflow: Checkout (ID: 1)" in out
    assert "1. nav:  (https://shop.example.com)" in out


def test_list_without_workflows(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    workflows.main(["--store-dir", str(tmp_path), "list"])
    assert capsys.readouterr().out.strip() == "No workflows found."


def test_load_variables_merges_file_and_inline(tmp_path: Path) -> None:
    vars_file = tmp_path / "vars.json"
    vars_file.write_text(json.dumps({"username": "file-user", "pin": 1234}))

    variables = load_variables('{"username": "inline-user"}', vars_file)

    assert variables == {"username": "inline-user", "pin": "1234"}


def test_load_variables_rejects_bad_json() -> None:
    with pytest.raises(ValueError):
        load_variables("{nope", None)


def test_config_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("REPLAY_ARTIFACTS_DIR", str(tmp_path))
    monkeypatch.setenv("REPLAY_STEP_TIMEOUT", "3.5")
    monkeypatch.setenv("REPLAY_RUN_TIMEOUT", "0")
    monkeypatch.setenv("REPLAY_BROWSER_HEADLESS", "true")

    cfg = Config.from_env()

    assert cfg.workflows_dir == tmp_path / "workflows"
    assert cfg.step_timeout == 3.5
    assert cfg.run_timeout is None
    assert cfg.browser_headless


class _RecordingSession:
    instances: list = []

    def __init__(self, headless=None, step_timeout=None) -> None:
        self.headless = headless
        _RecordingSession.instances.append(self)

    def launch(self, url=None) -> FakePageDriver:
        return FakePageDriver()

    def __enter__(self) -> "_RecordingSession":
        return self

    def __exit__(self, *exc) -> None:
        return None


@pytest.mark.parametrize("flags, expected", [([], None), (["--headless"], True)])
def test_record_leaves_headless_to_config_unless_flagged(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture, flags: list, expected
) -> None:
    store_dir = tmp_path / "workflows"
    WorkflowStore(store_dir).create_workflow("Pause")
    _RecordingSession.instances.clear()
    monkeypatch.setattr(record, "BrowserSession", _RecordingSession)

    record.main(["--workflow-id", "1", "--action", "wait", "--value", "500", "--store-dir", str(store_dir), *flags])

    assert [s.headless for s in _RecordingSession.instances] == [expected]
    assert "Successfully added step 1 to workflow 1" in capsys.readouterr().out


def test_browser_session_falls_back_to_config_headless(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "browser_headless", True)

    assert BrowserSession(headless=None).headless is True
    assert BrowserSession(headless=False).headless is False
