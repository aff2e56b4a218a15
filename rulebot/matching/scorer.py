"""
Keyword scoring and winner selection.

Scores:
  "*"              -> points
  regex (variable) -> points when the pattern captures something, else -1
  literal tokens   -> -1 + n * (points + 1) when all n tokens appear, else -1

Selection keeps the first candidate whose score strictly beats the running
best (initially -1), so ties go to the earlier rule and negative scores
never win.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from rulebot.matching.regex import MalformedPattern, match
from rulebot.models.rules import Rule
from rulebot.models.turn import MatchResult

logger = logging.getLogger(__name__)

NO_MATCH = -1


def score(text: str, rule: Rule) -> Tuple[int, str]:
    """Score one rule against an utterance. Returns (score, captured)."""
    if rule.is_wildcard:
        return rule.points, ""

    if rule.captures:
        captured = match(rule.keyword, text)
        if captured:
            return rule.points, captured
        return NO_MATCH, ""

    lowered = text.lower()
    words: List[str] = [w for w in rule.keyword.split(" ") if w]
    acc = NO_MATCH
    for word in words:
        if word.lower() in lowered:
            acc += rule.points + 1
        else:
            return NO_MATCH, ""
    return acc, ""


def select(text: str, rules: Sequence[Rule]) -> Optional[MatchResult]:
    """Pick the single best rule for `text`, or None."""
    best_score = NO_MATCH
    best: Optional[MatchResult] = None

    # Iterate a snapshot: learning may append to the live list afterwards
    for rule in list(rules):
        try:
            value, captured = score(text, rule)
        except MalformedPattern as e:
            logger.warning("Skipping rule %r: %s", rule.keyword, e)
            continue
        if value > best_score:
            best_score = value
            best = MatchResult(rule=rule, captured=captured, score=value)

    return best
