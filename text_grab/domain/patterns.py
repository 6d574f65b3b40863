"""
Filename and path pattern matching.
Patterns use a single wildcard, ``*``, meaning zero or more characters.
"""

import re
from functools import lru_cache
from typing import Iterable


@lru_cache(maxsize=256)
def _glob_regex(pattern: str, ignore_case: bool) -> re.Pattern:
    body = re.escape(pattern).replace(r"\*", ".*")
    return re.compile(body, re.DOTALL | (re.IGNORECASE if ignore_case else 0))


def matches(file_name: str, patterns: Iterable[str]) -> bool:
    """Check if a filename matches any of the wildcard patterns.

    Matching is anchored at both ends and case-insensitive. An empty
    pattern list matches nothing.
    """
    return any(
        _glob_regex(pattern, True).fullmatch(file_name) is not None
        for pattern in patterns
    )


def is_excluded(path: str, rules: Iterable[str]) -> bool:
    """Check if a path is hit by any exclude rule.

    Rules without a wildcard are plain substring tests. Rules with ``*``
    are searched anywhere in the path.
    """
    normalized = path.replace("\\", "/")
    for rule in rules:
        if not rule:
            continue
        rule = rule.replace("\\", "/")
        if "*" not in rule:
            if rule in normalized:
                return True
        elif _glob_regex(rule, False).search(normalized):
            return True
    return False
