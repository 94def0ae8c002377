"""Domain keyword matching for taskmatrix.

Tests task text against the configured keyword rules and yields the minimum
importance the guardrail must enforce. Matching is fuzzy by nature: a task
that should match but doesn't is a keyword-tuning issue, fixed in
`taskmatrix.config.KEYWORD_RULES`.
"""

import re
from typing import List, Optional, Tuple

from taskmatrix.config import KEYWORD_RULES
from taskmatrix.models.task import KeywordCategory


def compile_rules(rules) -> List[Tuple[KeywordCategory, int, "re.Pattern[str]"]]:
    """Compile (category, floor, fragments) rules into case-insensitive patterns.

    Order is preserved; it defines match precedence.
    """
    compiled = []
    for category, floor, fragments in rules:
        pattern = re.compile("|".join(f"(?:{fragment})" for fragment in fragments), re.IGNORECASE)
        compiled.append((KeywordCategory(category), int(floor), pattern))
    return compiled


_RULES = compile_rules(KEYWORD_RULES)


def match_category(text: str) -> Optional[KeywordCategory]:
    """Return the first keyword category matching the text.

    Categories are evaluated in fixed order: high-risk, packaging, reviews.

    Args:
        text: Task description

    Returns:
        Matched category, or None if no rule matches
    """
    if not text:
        return None
    for category, _, pattern in _RULES:
        if pattern.search(text):
            return category
    return None


def importance_floor(category: Optional[KeywordCategory]) -> int:
    """Minimum importance for a keyword category (0 for no category)."""
    if category is None:
        return 0
    for rule_category, floor, _ in _RULES:
        if rule_category == category:
            return floor
    return 0


def min_importance(text: str) -> int:
    """Minimum importance required by the task text (0 if no rule matches)."""
    return importance_floor(match_category(text))
