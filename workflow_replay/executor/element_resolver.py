"""Element resolution with a priority-ordered strategy cascade."""
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from workflow_replay.errors import ResolutionError
from workflow_replay.executor.page_driver import PageDriver
from workflow_replay.models.selector_set import SelectorStrategy
from workflow_replay.utils.logger import setup_logger


@dataclass
class ResolvedElement:
    """Outcome of resolving a strategy list."""
    element: Optional[Any] = None
    strategy: Optional[SelectorStrategy] = None
    attempts: int = 0

    @property
    def found(self) -> bool:
        return self.element is not None

    @classmethod
    def not_found(cls, attempts: int = 0) -> "ResolvedElement":
        return cls(attempts=attempts)


class ElementResolver:
    """
    Resolves recorded strategies to a live element.

    Strategies are tried from highest confidence (lowest priority number)
    down. A strategy that errors or matches nothing is skipped silently;
    only running out of strategies counts as a failure.
    """

    def __init__(self, driver: PageDriver):
        """
        Args:
            driver: Page driver for the current page
        """
        self.driver = driver
        self.logger = setup_logger("ElementResolver")

    def resolve(self, strategies: Iterable[SelectorStrategy]) -> ResolvedElement:
        """
        Find the first strategy that matches a live element.

        Args:
            strategies: Recorded strategies, in any order

        Returns:
            ResolvedElement; check .found before using .element
        """
        ordered: List[SelectorStrategy] = sorted(strategies, key=lambda s: s.priority)

        for attempt, strategy in enumerate(ordered, 1):
            try:
                if strategy.type.is_xpath:
                    element = self.driver.query_xpath(strategy.value)
                else:
                    element = self.driver.query_selector(strategy.value)
            except Exception as e:
                self.logger.debug(f"  {strategy.describe()} failed: {e}")
                continue

            if element is None:
                self.logger.debug(f"  {strategy.describe()} matched nothing")
                continue

            self.logger.debug(f"  Resolved via {strategy.describe()} (attempt {attempt})")
            return ResolvedElement(element=element, strategy=strategy, attempts=attempt)

        return ResolvedElement.not_found(attempts=len(ordered))

    def require(self, strategies: Iterable[SelectorStrategy]) -> ResolvedElement:
        """Like resolve(), but raise ResolutionError when nothing matches."""
        resolved = self.resolve(strategies)
        if not resolved.found:
            raise ResolutionError(
                f"Element not found: none of {resolved.attempts} selector strategies matched"
            )
        return resolved
