"""Name matching for user-typed filters."""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class NameMatcher:
    """Two-tier name matcher.

    The filter is first compiled as a case-insensitive regular expression, with
    ``*`` expanded to ``.*`` so shell-style wildcards work. Filters that are not
    valid patterns (for example ``"(soup"``) degrade to a case-insensitive
    substring match instead of failing.
    """

    text: str
    pattern: re.Pattern[str] | None

    @classmethod
    def compile(cls, name_filter: str) -> "NameMatcher":
        """Build a matcher for the given filter text."""
        text = name_filter.strip()
        try:
            pattern = re.compile(text.replace("*", ".*"), re.IGNORECASE)
        except re.error:
            pattern = None
        return cls(text=text, pattern=pattern)

    @property
    def is_regex(self) -> bool:
        """Return True when the filter compiled as a regular expression."""
        return self.pattern is not None

    def matches(self, name: str) -> bool:
        """Return True when the name matches the filter."""
        candidate = name.strip()
        if self.pattern is not None:
            return self.pattern.search(candidate) is not None
        return self.text.lower() in candidate.lower()
