"""Template variable substitution for step values."""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional


PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*\}\}")

# Order matters: partial matches take the first key that fits.
DUMMY_VALUES: Dict[str, str] = {
    "email": "test@example.com",
    "username": "testuser",
    "password": "TestPassword123!",
    "name": "Test User",
    "first_name": "Test",
    "last_name": "User",
    "phone": "555-0100",
    "address": "123 Test Street",
    "city": "Testville",
    "zip": "12345",
    "country": "United States",
    "search": "test search",
    "url": "https://example.com",
    "message": "This is a test message.",
    "comment": "This is a test comment.",
}


@dataclass
class VariableResolution:
    """Result of resolving a template."""
    value: str
    used_dummy: List[str] = field(default_factory=list)


def has_placeholders(template: Optional[str]) -> bool:
    """Check whether a string contains any {{ name }} placeholder."""
    return bool(template) and PLACEHOLDER_PATTERN.search(template) is not None


def dummy_value(name: str) -> str:
    """Deterministic stand-in for an unbound variable."""
    key = name.lower()

    if key in DUMMY_VALUES:
        return DUMMY_VALUES[key]

    for field_name, value in DUMMY_VALUES.items():
        if field_name in key or key in field_name:
            return value

    return f"dummy_{key}"


class VariableResolver:
    """
    Substitutes {{ name }} placeholders in step values.

    Bound variables are inserted verbatim. Unbound ones get a dummy value so
    replay can always proceed; their names are reported back to the caller.
    """

    def resolve(
        self,
        template: str,
        variables: Optional[Mapping[str, str]] = None
    ) -> VariableResolution:
        """
        Resolve all placeholders in template.

        Args:
            template: String possibly containing {{ name }} placeholders
            variables: Caller-supplied bindings

        Returns:
            VariableResolution with the substituted string and the names
            that fell back to dummy values
        """
        variables = variables or {}
        used_dummy: List[str] = []

        def replace(match: re.Match) -> str:
            name = match.group(1)
            if name in variables:
                return str(variables[name])
            if name not in used_dummy:
                used_dummy.append(name)
            return dummy_value(name)

        value = PLACEHOLDER_PATTERN.sub(replace, template or "")
        return VariableResolution(value=value, used_dummy=used_dummy)
