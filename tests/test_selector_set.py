from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from workflow_replay.models.selector_set import (
    ElementMetadata,
    SelectorSet,
    SelectorStrategy,
    StrategyType,
)


def _strategy(kind: str, value: str, priority: int) -> SelectorStrategy:
    return SelectorStrategy(type=StrategyType(kind), value=value, priority=priority)


def test_strategies_sorted_and_best_selector_tracks_first() -> None:
    selector_set = SelectorSet.from_strategies([
        _strategy("xpath", "/html/body/button", 10),
        _strategy("id", "#submit", 1),
        _strategy("class", "button.primary", 6),
    ])

    assert [s.priority for s in selector_set.strategies] == [1, 6, 10]
    assert selector_set.best_selector == "#submit"


def test_explicit_best_selector_is_overridden() -> None:
    selector_set = SelectorSet(
        best_selector="stale",
        strategies=[_strategy("name", '[name="q"]', 4)],
    )
    assert selector_set.best_selector == '[name="q"]'


def test_equal_priorities_keep_recorded_order() -> None:
    selector_set = SelectorSet.from_strategies([
        _strategy("class", "a.first", 6),
        _strategy("class", "a.second", 6),
    ])
    assert [s.value for s in selector_set.strategies] == ["a.first", "a.second"]


def test_empty_set_has_empty_best_selector() -> None:
    selector_set = SelectorSet()

    assert selector_set.strategies == []
    assert selector_set.best_selector == ""


def test_strategy_rejects_empty_value_and_bad_priority() -> None:
    with pytest.raises(PydanticValidationError):
        SelectorStrategy(type=StrategyType.ID, value="", priority=1)
    with pytest.raises(PydanticValidationError):
        SelectorStrategy(type=StrategyType.ID, value="#a", priority=0)


def test_text_and_xpath_are_xpath_strategies() -> None:
    assert StrategyType.TEXT.is_xpath
    assert StrategyType.XPATH.is_xpath
    assert not StrategyType.CSS_PATH.is_xpath


def test_metadata_serialized_under_ax_node_meta() -> None:
    selector_set = SelectorSet.from_strategies(
        [_strategy("aria-label", '[aria-label="Search"]', 3)],
        ElementMetadata(role="searchbox", name="Search"),
    )

    dumped = selector_set.model_dump(by_alias=True)
    assert dumped["ax_node_meta"] == {"role": "searchbox", "name": "Search", "description": ""}

    restored = SelectorSet.model_validate_json(selector_set.model_dump_json(by_alias=True))
    assert restored.element_metadata.role == "searchbox"
    assert restored.best_selector == '[aria-label="Search"]'


def test_loading_reranks_unsorted_strategies() -> None:
    restored = SelectorSet.model_validate({
        "best_selector": "//a",
        "strategies": [
            {"type": "xpath", "value": "//a", "priority": 10},
            {"type": "testid", "value": '[data-testid="go"]', "priority": 2},
        ],
    })

    assert restored.best_selector == '[data-testid="go"]'


def test_get_description_mentions_role_and_count() -> None:
    selector_set = SelectorSet.from_strategies(
        [_strategy("id", "#go", 1)], ElementMetadata(role="button", name="Go")
    )
    description = selector_set.get_description()

    assert "role=button" in description
    assert "1 strategies" in description
