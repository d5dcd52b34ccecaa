"""Per-action requirements, checked before a step is dispatched."""
from dataclasses import dataclass
from typing import Dict, Optional

from workflow_replay.errors import UnknownActionError, ValidationError
from workflow_replay.models.selector_set import SelectorSet
from workflow_replay.models.workflow import ActionType


@dataclass(frozen=True)
class ActionContract:
    """What a step must carry for its action to run."""
    requires_value: bool = False
    requires_element: bool = False
    value_label: str = "action_value"


ACTION_CONTRACTS: Dict[ActionType, ActionContract] = {
    ActionType.CLICK: ActionContract(requires_element=True),
    ActionType.TYPE: ActionContract(requires_value=True, value_label="text to type"),
    ActionType.WAIT: ActionContract(),
    ActionType.SCROLL: ActionContract(),
    ActionType.NAV: ActionContract(requires_value=True, value_label="URL"),
    ActionType.HOVER: ActionContract(requires_element=True),
    ActionType.EXTRACT: ActionContract(requires_element=True),
    ActionType.SCREENSHOT: ActionContract(),
    ActionType.UPLOAD_IMAGE: ActionContract(
        requires_value=True, requires_element=True, value_label="image URL"
    ),
}


def parse_action(action: str) -> ActionType:
    """Map a raw action tag to ActionType or raise UnknownActionError."""
    action_type = ActionType.parse(action)
    if action_type is None:
        raise UnknownActionError(action)
    return action_type


def validate_step(
    action: str,
    value: Optional[str],
    selector_set: Optional[SelectorSet]
) -> ActionType:
    """
    Check a step against its action's contract.

    Args:
        action: Raw action tag
        value: action_value after variable substitution
        selector_set: Recorded selectors, if any

    Returns:
        The parsed ActionType

    Raises:
        UnknownActionError: for an unrecognized tag
        ValidationError: when a required value or element is missing
    """
    action_type = parse_action(action)
    contract = ACTION_CONTRACTS[action_type]

    if contract.requires_value and not value:
        raise ValidationError(f"{action_type.value} action requires {contract.value_label}")

    if contract.requires_element and (selector_set is None or not selector_set.strategies):
        raise ValidationError(f"{action_type.value} action requires an element selector set")

    return action_type


def requires_element(action: str) -> bool:
    """Whether recording this action needs a target element."""
    return ACTION_CONTRACTS[parse_action(action)].requires_element
