"""Selector strategy generation for a recorded element."""
from typing import Any, List

from pydantic import ValidationError as PydanticValidationError

from workflow_replay.errors import ValidationError
from workflow_replay.executor.page_driver import PageDriver
from workflow_replay.models.selector_set import ElementMetadata, SelectorSet, SelectorStrategy
from workflow_replay.utils.logger import setup_logger


class SelectorStrategyGenerator:
    """
    Builds a SelectorSet for a live element at recording time.

    The DOM walking happens inside the page (the driver's
    extract_selector_candidates capability). This class only validates and
    ranks what comes back, and attaches the element's accessibility metadata.

    Candidates, by priority:
     1 id                  7 input type
     2 data-testid/test/cy 8 placeholder
     3 aria-label          9 button/link text (XPath)
     4 name               10 absolute XPath (always)
     5 role + aria-label  11 CSS path (always)
     6 tag + classes
    """

    def __init__(self, driver: PageDriver):
        self.driver = driver
        self.logger = setup_logger("SelectorGenerator")

    def generate(self, element: Any) -> SelectorSet:
        """
        Generate all strategies for element.

        Args:
            element: A live element handle from the page driver

        Returns:
            SelectorSet ranked by priority

        Raises:
            ValidationError: if no element was supplied
        """
        if element is None:
            raise ValidationError("Cannot generate selectors without a live element")

        strategies = self._parse_candidates(self.driver.extract_selector_candidates(element))
        metadata = self._describe(element)

        selector_set = SelectorSet.from_strategies(strategies, metadata)
        self.logger.debug(f"Generated {len(strategies)} strategies: {selector_set.get_description()}")
        return selector_set

    def _parse_candidates(self, candidates: List[dict]) -> List[SelectorStrategy]:
        strategies = []
        for candidate in candidates or []:
            try:
                strategies.append(SelectorStrategy.model_validate(candidate))
            except PydanticValidationError as e:
                self.logger.warning(f"Dropping malformed selector candidate {candidate!r}: {e.errors()[0]['msg']}")
        return strategies

    def _describe(self, element: Any) -> ElementMetadata:
        raw = self.driver.describe_accessibility(element) or {}
        return ElementMetadata(
            role=str(raw.get("role") or ""),
            name=str(raw.get("name") or ""),
            description=str(raw.get("description") or ""),
        )
