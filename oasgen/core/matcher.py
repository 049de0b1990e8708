"""Matching concrete request URLs to ``{name}`` path templates."""

import re
from typing import Collection, Dict, List, Optional, Pattern

PLACEHOLDER_PATTERN = re.compile(r"\{([^/{}]+)\}")


def placeholder_names(template: str) -> List[str]:
    """Return the placeholder names of a path template in order of appearance."""
    return PLACEHOLDER_PATTERN.findall(template)


def compile_template(template: str) -> Pattern[str]:
    """
    Build the matcher for one path template.

    Every ``{name}`` placeholder becomes a group matching one or more
    characters other than ``/``; literal text is escaped. The pattern is
    meant to be used with ``fullmatch`` and accepts an optional trailing slash.

    Example:
        >>> compile_template("/users/{id}").fullmatch("/users/42/") is not None
        True
    """
    parts: List[str] = []
    last = 0
    for found in PLACEHOLDER_PATTERN.finditer(template):
        parts.append(re.escape(template[last : found.start()]))
        parts.append("([^/]+)")
        last = found.end()
    parts.append(re.escape(template[last:]))
    return re.compile("".join(parts) + "/?")


class PathMatcher:
    """
    Finds the path template a request URL belongs to.

    Compiled patterns are cached per template, so each template is compiled
    once no matter how many requests are matched against it. Templates are
    never renamed once created, so cached entries never go stale.

    When several templates could match the same URL (``/users/{id}`` and
    ``/users/new``), the first one in iteration order wins. Callers pass the
    templates in registration order.
    """

    def __init__(self) -> None:
        self._patterns: Dict[str, Pattern[str]] = {}

    def pattern_for(self, template: str) -> Pattern[str]:
        """Get the cached matcher for a template, compiling it on first use."""
        pattern = self._patterns.get(template)
        if pattern is None:
            pattern = compile_template(template)
            self._patterns[template] = pattern
        return pattern

    def match(self, url: Optional[str], templates: Collection[str]) -> Optional[str]:
        """
        Find the template matching ``url``.

        Args:
            url: Request path, optionally followed by ``?query``
            templates: Known templates in registration order

        Returns:
            The matching template, or None for an untracked route
        """
        if not url:
            return None

        # Literal registrations (query string included) short-circuit
        if url in templates:
            return url

        path = url.split("?", 1)[0]
        for template in templates:
            if self.pattern_for(template).fullmatch(path):
                return template
        return None

    def __len__(self) -> int:
        return len(self._patterns)
