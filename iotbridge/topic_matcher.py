"""Extract a single variable from MQTT topics built from a template."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_VARIABLE_EXPR = "([^/]+)"


class TopicMatcherError(ValueError):
    """Raised when a template is unusable or a topic does not match."""


@dataclass(frozen=True)
class TopicMatcher:
    """Matches topics against a template holding one variable placeholder."""

    pattern: Optional[re.Pattern] = None

    def parse_topic(self, topic: str) -> str:
        """Return the value the placeholder takes in the given topic."""
        if self.pattern is None:
            raise TopicMatcherError("invalid matcher")
        match = self.pattern.fullmatch(topic)
        if match is None:
            raise TopicMatcherError(f"topic='{topic}' does not match")
        return match.group(1)


def create_matcher_single_variable(topic_template: str, variable_placeholder: str) -> TopicMatcher:
    """Build a matcher for a template containing the placeholder once."""
    if variable_placeholder not in topic_template:
        raise TopicMatcherError(
            f"cannot find variablePlacholder='{variable_placeholder}' in topic='{topic_template}'"
        )
    before, _, after = topic_template.partition(variable_placeholder)
    expr = re.escape(before) + _VARIABLE_EXPR + re.escape(after)
    try:
        pattern = re.compile(expr)
    except re.error as exc:
        raise TopicMatcherError(f"cannot compile regexp: {exc}") from exc
    return TopicMatcher(pattern)