"""SelectorSet - Ranked, redundant locators for one recorded element."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StrategyType(str, Enum):
    """Locator techniques, roughly ordered by how stable they are."""
    ID = "id"
    TESTID = "testid"
    ARIA_LABEL = "aria-label"
    NAME = "name"
    ROLE_NAME = "role-name"
    CLASS = "class"
    INPUT_TYPE = "input-type"
    PLACEHOLDER = "placeholder"
    TEXT = "text"
    XPATH = "xpath"
    CSS_PATH = "css-path"

    @property
    def is_xpath(self) -> bool:
        """Whether the locator value is an XPath expression."""
        return self in (StrategyType.XPATH, StrategyType.TEXT)


class SelectorStrategy(BaseModel):
    """One way of re-finding an element. Lower priority = higher confidence."""
    model_config = ConfigDict(frozen=True)

    type: StrategyType
    value: str = Field(min_length=1)
    priority: int = Field(ge=1)

    def describe(self) -> str:
        return f"{self.type.value}={self.value}"


class ElementMetadata(BaseModel):
    """Accessibility node attributes captured at recording time."""
    role: str = ""
    name: str = ""
    description: str = ""


class SelectorSet(BaseModel):
    """
    All strategies recorded for an element.

    Strategies are kept sorted by priority and best_selector always mirrors
    the first one. Nothing guarantees a strategy is unique on the page; the
    point is that layout drift should break only some of them.
    """
    model_config = ConfigDict(populate_by_name=True)

    best_selector: str = ""
    strategies: List[SelectorStrategy] = Field(default_factory=list)
    element_metadata: ElementMetadata = Field(
        default_factory=ElementMetadata, alias="ax_node_meta"
    )

    @model_validator(mode="after")
    def _rank_strategies(self) -> "SelectorSet":
        # sorted() is stable, so equal priorities keep their recorded order
        ranked = sorted(self.strategies, key=lambda s: s.priority)
        self.strategies = ranked
        self.best_selector = ranked[0].value if ranked else ""
        return self

    @classmethod
    def from_strategies(
        cls,
        strategies: List[SelectorStrategy],
        metadata: Optional[ElementMetadata] = None
    ) -> "SelectorSet":
        return cls(strategies=strategies, element_metadata=metadata or ElementMetadata())

    def get_description(self) -> str:
        """Get human-readable description."""
        meta = self.element_metadata
        parts = []
        if meta.role:
            parts.append(f"role={meta.role}")
        if meta.name:
            parts.append(f'name="{meta.name[:30]}"')
        if self.best_selector:
            parts.append(f"best={self.best_selector[:40]}")
        parts.append(f"{len(self.strategies)} strategies")
        return " | ".join(parts)
