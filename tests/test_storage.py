from __future__ import annotations

from pathlib import Path

import pytest

from conftest import make_selector_set
from workflow_replay.errors import StorageError
from workflow_replay.models.workflow import ActionType, format_workflow_listing
from workflow_replay.storage.file_store import FileStore
from workflow_replay.storage.workflow_store import WorkflowStore


def test_create_assigns_increasing_ids(store: WorkflowStore) -> None:
    first = store.create_workflow("One", website_url="https://example.com")
    second = store.create_workflow("Two")

    assert (first.id, second.id) == (1, 2)
    assert first.status == "draft"
    assert store.get_workflow(1).website_url == "https://example.com"


def test_list_workflows_newest_first(store: WorkflowStore) -> None:
    store.create_workflow("One")
    store.create_workflow("Two")

    assert [w.title for w in store.list_workflows()] == ["Two", "One"]


def test_steps_come_back_in_order(store: WorkflowStore) -> None:
    workflow = store.create_workflow("Steps")
    store.upsert_step(workflow.id, 3, "wait", "100")
    store.upsert_step(workflow.id, 1, "nav", "https://example.com")
    store.upsert_step(workflow.id, 2, "click", selector_set=make_selector_set(("id", "#go", 1)))

    steps = store.list_steps(workflow.id)

    assert [s.order for s in steps] == [1, 2, 3]
    assert steps[1].selector_set.best_selector == "#go"
    assert store.next_order(workflow.id) == 4


def test_upsert_same_order_replaces_step(store: WorkflowStore) -> None:
    workflow = store.create_workflow("Upsert")
    store.upsert_step(workflow.id, 1, "nav", "https://example.com")
    original, created = store.upsert_step(workflow.id, 2, "type", "hello")
    assert created

    updated, created = store.upsert_step(workflow.id, 2, "type", "goodbye", description="greet")

    assert not created
    assert updated.id == original.id
    steps = store.list_steps(workflow.id, order=2)
    assert len(steps) == 1
    assert steps[0].action_value == "goodbye"
    assert len(store.list_steps(workflow.id)) == 2


def test_step_ids_unique_across_workflows(store: WorkflowStore) -> None:
    a = store.create_workflow("A")
    b = store.create_workflow("B")
    step_a, _ = store.upsert_step(a.id, 1, "wait")
    step_b, _ = store.upsert_step(b.id, 1, "wait")

    assert step_a.id != step_b.id


def test_order_filter(store: WorkflowStore) -> None:
    workflow = store.create_workflow("Filter")
    store.upsert_step(workflow.id, 1, "wait")
    store.upsert_step(workflow.id, 2, "screenshot")

    assert [s.action for s in store.list_steps(workflow.id, order=2)] == ["screenshot"]
    assert store.list_steps(workflow.id, order=5) == []


def test_missing_workflow(store: WorkflowStore) -> None:
    assert store.get_workflow(99) is None
    assert store.list_steps(99) == []
    assert store.next_order(99) == 1

    with pytest.raises(StorageError, match="does not exist"):
        store.upsert_step(99, 1, "wait")


def test_unknown_action_tag_still_loads(store: WorkflowStore) -> None:
    workflow = store.create_workflow("Legacy")
    store.upsert_step(workflow.id, 1, "dance")

    step = store.list_steps(workflow.id)[0]
    assert step.action == "dance"
    assert ActionType.parse(step.action) is None


def test_corrupt_file_raises_storage_error(store: WorkflowStore) -> None:
    workflow = store.create_workflow("Corrupt")
    (store.root / f"workflow_{workflow.id}.json").write_text("{not json")

    with pytest.raises(StorageError):
        store.list_steps(workflow.id)
    with pytest.raises(StorageError):
        store.list_workflows()


def test_saved_file_uses_metadata_alias(store: WorkflowStore) -> None:
    workflow = store.create_workflow("Alias")
    store.upsert_step(workflow.id, 1, "click", selector_set=make_selector_set(("id", "#go", 1)))

    raw = (store.root / f"workflow_{workflow.id}.json").read_text()
    assert '"ax_node_meta"' in raw


def test_listing_format(store: WorkflowStore) -> None:
    workflow = store.create_workflow("Search", website_url="https://example.com", description="Find things")
    store.upsert_step(workflow.id, 1, "type", "{{ search }}", description="Enter query")
    store.create_workflow("Empty")

    lines = format_workflow_listing(store.list_workflows())

    assert lines[0] == "Workflow: Empty (ID: 2)"
    assert "  No steps defined for this workflow." in lines
    assert "Workflow: Search (ID: 1)" in lines
    assert "  URL: https://example.com" in lines
    assert "    1. type: Enter query ({{ search }})" in lines


def test_listing_without_workflows() -> None:
    assert format_workflow_listing([]) == ["No workflows found."]


def test_save_file_stays_in_output_dir(file_store: FileStore, tmp_path: Path) -> None:
    path = file_store.save_file(b"png", "../../escape me.png")

    assert path.parent == tmp_path / "screenshots"
    assert path.name == "escape_me.png"
    assert path.read_bytes() == b"png"


def test_save_temporary_file_uses_mime_extension(file_store: FileStore, tmp_path: Path) -> None:
    first = file_store.save_temporary_file(b"a", "image/png")
    second = file_store.save_temporary_file(b"b", "image/png; charset=binary")

    assert first != second
    assert first.suffix == ".png"
    assert first.name.startswith("upload_")
    assert first.parent == tmp_path / "uploads"
    assert second.read_bytes() == b"b"


def test_remove_temporary_file(file_store: FileStore) -> None:
    path = file_store.save_temporary_file(b"a", "image/png")

    file_store.remove(path)
    file_store.remove(path)

    assert not path.exists()
